from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import math
import os
from pathlib import Path
import re
import time
from typing import Any, Callable, Protocol
import unicodedata

import httpx

from .errors import ConfigError, WoeidUnavailableError
from .version import user_agent

log = logging.getLogger(__name__)

WOEID_DATA_URL = (
    "https://gist.githubusercontent.com/freakynit/57eb1a23adec8084f5fbbc452e42335d/raw/"
    "e326170bebcabebce40bd3fa2b282df04ce712a7/woeid_twitter_parsed.json"
)
CACHE_MAX_AGE_SECONDS = 7 * 24 * 60 * 60
_DEFAULT_CACHE_FILENAME = "woeid_twitter_parsed.json"

_NON_ALNUM_REGEX = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class WoeidRecord:
    placeName: str
    country: str
    woeid: int
    placeType: str
    countryCode: str | None = None

    def to_row(self) -> dict:
        row: dict[str, Any] = {
            "place_name": self.placeName,
            "country": self.country,
            "woeid": self.woeid,
            "type": self.placeType,
        }
        if self.countryCode is not None:
            row["country_code"] = self.countryCode
        return row


@dataclass(frozen=True)
class WoeidMatch:
    record: WoeidRecord
    score: int

    @property
    def woeid(self) -> int:
        return self.record.woeid

    @property
    def placeName(self) -> str:
        return self.record.placeName

    @property
    def country(self) -> str:
        return self.record.country

    def to_dict(self) -> dict:
        return {
            "placeName": self.record.placeName,
            "country": self.record.country,
            "countryCode": self.record.countryCode,
            "placeType": self.record.placeType,
            "woeid": self.record.woeid,
            "score": self.score,
        }


@dataclass(frozen=True)
class ResolvedWoeid:
    woeid: int
    displayName: str
    hadMultiple: bool


class WoeidCache(Protocol):
    def read(self, max_age: float | None) -> list[WoeidRecord] | None: ...

    def write(self, records: list[WoeidRecord]) -> None: ...


def resolve_default_cache_path(configured: str | None = None) -> Path:
    override = os.environ.get("XCLI_WOEID_CACHE_PATH")
    if override and override.strip():
        return Path(override.strip()).expanduser()
    if configured and configured.strip():
        return Path(configured.strip()).expanduser()
    return Path.home() / ".cache" / "xcli" / _DEFAULT_CACHE_FILENAME


def _parse_woeid(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return math.trunc(number)


def parse_woeid_rows(payload: Any) -> list[WoeidRecord]:
    if not isinstance(payload, list):
        raise ValueError("WOEID index payload must be an array.")

    records: list[WoeidRecord] = []
    for row in payload:
        if not isinstance(row, dict):
            continue
        place_name = row.get("place_name").strip() if isinstance(row.get("place_name"), str) else ""
        country = row.get("country").strip() if isinstance(row.get("country"), str) else ""
        place_type = row.get("type").strip() if isinstance(row.get("type"), str) else ""
        country_code = row.get("country_code") if isinstance(row.get("country_code"), str) else None
        woeid = _parse_woeid(row.get("woeid"))
        if not place_name or woeid is None:
            continue
        records.append(
            WoeidRecord(
                placeName=place_name,
                country=country,
                woeid=woeid,
                placeType=place_type,
                countryCode=country_code,
            )
        )

    if not records:
        raise ValueError("WOEID index is empty.")
    return records


class FileWoeidCache:
    def __init__(self, path: Path):
        self.path = path

    def read(self, max_age: float | None) -> list[WoeidRecord] | None:
        try:
            if max_age is not None and time.time() - self.path.stat().st_mtime > max_age:
                return None
            return parse_woeid_rows(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as exc:
            log.debug("WOEID cache at %s unusable: %s", self.path, exc)
            return None

    def write(self, records: list[WoeidRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([record.to_row() for record in records]), encoding="utf-8")


def fetch_remote_index(url: str = WOEID_DATA_URL, *, timeout: float = 30) -> list[WoeidRecord]:
    response = httpx.get(url, timeout=timeout, follow_redirects=True, headers={"user-agent": user_agent()})
    if response.status_code < 200 or response.status_code >= 300:
        raise RuntimeError(f"Failed to fetch WOEID index: HTTP {response.status_code} {response.reason_phrase}".strip())
    return parse_woeid_rows(response.json())


def load_woeid_index(
    cache: WoeidCache | None = None,
    fetch_impl: Callable[[], list[WoeidRecord]] | None = None,
) -> list[WoeidRecord]:
    """Fresh cache, then network, then stale cache; fail only when all three are missing."""
    cache = cache or FileWoeidCache(resolve_default_cache_path())
    fetch_impl = fetch_impl or fetch_remote_index

    fresh = cache.read(CACHE_MAX_AGE_SECONDS)
    if fresh:
        return fresh

    try:
        remote = fetch_impl()
    except Exception as exc:
        log.warning("WOEID index fetch failed: %s", exc)
        stale = cache.read(None)
        if stale:
            log.info("Using stale WOEID cache")
            return stale
        raise WoeidUnavailableError("Unable to load WOEID index (network unavailable and no cache found).") from exc

    try:
        cache.write(remote)
    except OSError as exc:
        log.warning("Could not write WOEID cache: %s", exc)
    return remote


def normalize_text(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM_REGEX.sub(" ", without_marks.lower()).strip()


def score_record(record: WoeidRecord, query_norm: str, query_tokens: list[str]) -> int:
    place = normalize_text(record.placeName)
    country = normalize_text(record.country)
    combined = f"{place} {country}".strip()

    score = 0
    if place == query_norm:
        score += 200
    if combined == query_norm:
        score += 240
    if place.startswith(query_norm):
        score += 120
    if combined.startswith(query_norm):
        score += 100
    if query_norm in place:
        score += 80
    if query_norm in combined:
        score += 60

    for token in query_tokens:
        if token in place:
            score += 24
        elif token in country:
            score += 12
    return score


def search_woeid(
    query: str,
    *,
    limit: int = 10,
    index: list[WoeidRecord] | None = None,
    loader: Callable[[], list[WoeidRecord]] | None = None,
) -> list[WoeidMatch]:
    query_norm = normalize_text(query)
    if not query_norm:
        return []

    limit = max(1, min(limit, 100))
    tokens = [token for token in query_norm.split(" ") if token]
    records = index if index is not None else (loader or load_woeid_index)()

    scored = [WoeidMatch(record=record, score=score_record(record, query_norm, tokens)) for record in records]
    matches = [match for match in scored if match.score > 0]
    matches.sort(key=lambda match: (-match.score, match.record.placeName))
    return matches[:limit]


def resolve_woeid(query: str, **kwargs) -> ResolvedWoeid:
    matches = search_woeid(query, limit=5, **kwargs)
    if not matches:
        raise ConfigError(f"No WOEID match found for '{query}'. Try: xcli trends search {query}")
    best = matches[0]
    label = f"{best.placeName}, {best.country}" if best.country else best.placeName
    return ResolvedWoeid(woeid=best.woeid, displayName=label, hadMultiple=len(matches) > 1)

from __future__ import annotations

import re

ACCEPTED_HOSTS = ("x.com", "twitter.com")

RESERVED_PATHS = frozenset(
    {
        "home",
        "explore",
        "search",
        "notifications",
        "messages",
        "settings",
        "i",
        "compose",
        "intent",
        "share",
        "login",
        "logout",
        "signup",
        "tos",
        "privacy",
        "hashtag",
        "account",
        "jobs",
    }
)

_NUMERIC_ID_REGEX = re.compile(r"[0-9]+")
_USERNAME_REGEX = re.compile(r"[A-Za-z0-9_]{1,50}")
_STATUS_ID_REGEX = re.compile(r"/status/([0-9]+)")
_WEB_STATUS_ID_REGEX = re.compile(r"/i/web/status/([0-9]+)")


def is_numeric_id(value: str) -> bool:
    return bool(_NUMERIC_ID_REGEX.fullmatch(value))


def is_username(value: str) -> bool:
    return bool(_USERNAME_REGEX.fullmatch(value))


def is_probably_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def strip_at_prefix(value: str) -> str:
    return value[1:] if value.startswith("@") else value


def normalize_host(host: str) -> str:
    lowered = host.lower()
    return lowered[4:] if lowered.startswith("www.") else lowered


def is_accepted_host(host: str) -> bool:
    return normalize_host(host) in ACCEPTED_HOSTS


def extract_post_id(url: str) -> str | None:
    # /<user>/status/<id>, /i/web/status/<id>
    match = _STATUS_ID_REGEX.search(url)
    if match:
        return match.group(1)
    match = _WEB_STATUS_ID_REGEX.search(url)
    if match:
        return match.group(1)
    return None


def parse_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result

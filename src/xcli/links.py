"""Readable placeholders for shortened links in post text."""

from __future__ import annotations

import re
from typing import Literal
from urllib.parse import urlsplit

from .responses import get_object, get_string, objects

LinkKind = Literal["quote", "media", "plain"]

QUOTE_PLACEHOLDER = "[quote]"
MEDIA_HOSTS = frozenset({"pic.twitter.com", "pic.x.com", "pbs.twimg.com", "video.twimg.com"})

_STATUS_ID_REGEX = re.compile(r"/status/([0-9]+)")


def quoted_post_ids(post: dict) -> set[str]:
    ids: set[str] = set()
    for ref in objects(post.get("referenced_tweets", post.get("referencedTweets"))):
        if get_string(ref, "type") == "quoted":
            ref_id = get_string(ref, "id")
            if ref_id:
                ids.add(ref_id)
    return ids


def _split(url: str):
    candidate = url if "://" in url else f"https://{url}"
    try:
        return urlsplit(candidate)
    except ValueError:
        return None


def _is_media_url(url: str) -> bool:
    parts = _split(url)
    if parts is None:
        return False
    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host in MEDIA_HOSTS or "/photo/" in parts.path or "/video/" in parts.path


def classify_link(expanded: str | None, display: str | None, quoted_ids: set[str]) -> LinkKind:
    candidates = [value for value in (expanded, display) if value]
    for value in candidates:
        if any(match in quoted_ids for match in _STATUS_ID_REGEX.findall(value)):
            return "quote"
    if any(_is_media_url(value) for value in candidates):
        return "media"
    return "plain"


def rewrite_post_links(post: dict) -> str:
    text = get_string(post, "text") or ""
    if not text:
        return text

    entities = get_object(post.get("entities")) or {}
    quoted = quoted_post_ids(post)

    kinds: dict[str, LinkKind] = {}
    for entity in objects(entities.get("urls")):
        short_url = get_string(entity, "url")
        if not short_url or short_url in kinds:
            continue
        kinds[short_url] = classify_link(
            get_string(entity, "expanded_url", "expandedUrl"),
            get_string(entity, "display_url", "displayUrl"),
            quoted,
        )
    if not kinds:
        return text

    # Longest token first at each position, so t.co/a never matches inside t.co/ab.
    tokens = sorted(kinds, key=len, reverse=True)
    placeholders: dict[str, str] = {}
    parts: list[str] = []
    index = 0
    while index < len(text):
        token = next((candidate for candidate in tokens if text.startswith(candidate, index)), None)
        if token is None:
            parts.append(text[index])
            index += 1
            continue
        kind = kinds[token]
        if kind == "quote":
            parts.append(QUOTE_PLACEHOLDER)
        elif kind == "media":
            if token not in placeholders:
                placeholders[token] = f"[img{len(placeholders) + 1}]"
            parts.append(placeholders[token])
        else:
            parts.append(token)
        index += len(token)
    return "".join(parts)

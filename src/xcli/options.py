from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal

from .errors import ConfigError
from .extract import is_numeric_id, parse_csv

PostSearchMode = Literal["recent", "all"]

USER_PRESETS: dict[str, dict[str, list[str]]] = {
    "minimal": {"user_fields": ["public_metrics", "verified", "verified_type"]},
    "profile": {
        "user_fields": [
            "created_at",
            "description",
            "location",
            "profile_image_url",
            "protected",
            "public_metrics",
            "url",
            "verified",
            "verified_type",
            "pinned_tweet_id",
        ]
    },
}

POST_PRESETS: dict[str, dict[str, list[str]]] = {
    "minimal": {},
    "post": {
        "tweet_fields": [
            "created_at",
            "public_metrics",
            "author_id",
            "conversation_id",
            "attachments",
            "entities",
            "referenced_tweets",
        ],
        "expansions": ["author_id", "attachments.media_keys"],
        "user_fields": ["username", "name", "verified"],
        "media_fields": ["media_key", "type", "url", "preview_image_url", "duration_ms", "alt_text"],
    },
}

MAX_WOEID = 2147483647

_PARAM_NAMES = {
    "user_fields": "user.fields",
    "tweet_fields": "tweet.fields",
    "expansions": "expansions",
    "media_fields": "media.fields",
    "poll_fields": "poll.fields",
    "place_fields": "place.fields",
    "trend_fields": "trend.fields",
}


@dataclass(frozen=True)
class RequestFields:
    user_fields: list[str] | None = None
    tweet_fields: list[str] | None = None
    expansions: list[str] | None = None
    media_fields: list[str] | None = None
    poll_fields: list[str] | None = None
    place_fields: list[str] | None = None
    trend_fields: list[str] | None = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for item in fields(self):
            values = getattr(self, item.name)
            if values:
                params[_PARAM_NAMES[item.name]] = ",".join(values)
        return params


@dataclass(frozen=True)
class SearchOptions:
    max_results: int | None = None
    next_token: str | None = None
    pagination_token: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    since_id: str | None = None
    until_id: str | None = None
    sort_order: str | None = None

    def to_params(self) -> dict[str, str]:
        return {item.name: str(getattr(self, item.name)) for item in fields(self) if getattr(self, item.name) is not None}


def _csv(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return parse_csv(value)


def _clean(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_maybe_int(value: str | None) -> int | None:
    if value is None or not str(value).strip():
        return None
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None


def parse_bounded_int(value: str | None, label: str, minimum: int, maximum: int) -> int | None:
    if _clean(value) is None:
        return None
    parsed = parse_maybe_int(value)
    if parsed is None:
        raise ConfigError(f"{label} must be an integer.")
    if parsed < minimum or parsed > maximum:
        raise ConfigError(f"{label} must be between {minimum} and {maximum}. Got: {parsed}.")
    return parsed


def parse_search_query(query_option: str | None, query_args: list[str]) -> str:
    query_option = _clean(query_option)
    if query_option and query_args:
        raise ConfigError("Provide query either as --query or as positional text, not both.")
    query = query_option or " ".join(query_args).strip()
    if not query:
        raise ConfigError("Missing required search query.")
    return query


def users_lookup_fields(
    *,
    preset: str | None = None,
    user_fields: str | None = None,
    expansions: str | None = None,
    tweet_fields: str | None = None,
) -> RequestFields:
    name = preset or "minimal"
    if name not in USER_PRESETS:
        raise ConfigError(f"Unknown --preset '{name}'. Allowed: {', '.join(USER_PRESETS)}.")
    defaults = USER_PRESETS[name]
    return RequestFields(
        user_fields=_csv(user_fields) if user_fields is not None else defaults.get("user_fields"),
        expansions=_csv(expansions),
        tweet_fields=_csv(tweet_fields),
    )


def posts_lookup_fields(
    *,
    preset: str | None = None,
    tweet_fields: str | None = None,
    expansions: str | None = None,
    user_fields: str | None = None,
    media_fields: str | None = None,
    poll_fields: str | None = None,
    place_fields: str | None = None,
) -> RequestFields:
    name = preset or "post"
    if name not in POST_PRESETS:
        raise ConfigError(f"Unknown --preset '{name}'. Allowed: {', '.join(POST_PRESETS)}.")
    defaults = POST_PRESETS[name]

    def pick(value: str | None, key: str) -> list[str] | None:
        return _csv(value) if value is not None else defaults.get(key)

    return RequestFields(
        tweet_fields=pick(tweet_fields, "tweet_fields"),
        expansions=pick(expansions, "expansions"),
        user_fields=pick(user_fields, "user_fields"),
        media_fields=pick(media_fields, "media_fields"),
        poll_fields=_csv(poll_fields),
        place_fields=_csv(place_fields),
    )


def users_search_options(*, max_results: str | None = None, next_token: str | None = None) -> SearchOptions:
    return SearchOptions(
        max_results=parse_bounded_int(max_results, "--max-results", 1, 1000),
        next_token=_clean(next_token),
    )


def posts_search_options(
    mode: PostSearchMode,
    *,
    max_results: str | None = None,
    next_token: str | None = None,
    pagination_token: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    since_id: str | None = None,
    until_id: str | None = None,
    sort_order: str | None = None,
) -> SearchOptions:
    limit = 100 if mode == "recent" else 500
    parsed_max = parse_bounded_int(max_results, "--max-results", 10, limit)

    next_token = _clean(next_token)
    pagination_token = _clean(pagination_token)
    if next_token and pagination_token:
        raise ConfigError("Use either --next-token or --pagination-token, not both.")

    since_id = _clean(since_id)
    if since_id and not is_numeric_id(since_id):
        raise ConfigError("--since-id must be a numeric post ID.")
    until_id = _clean(until_id)
    if until_id and not is_numeric_id(until_id):
        raise ConfigError("--until-id must be a numeric post ID.")

    sort_order = _clean(sort_order)
    if sort_order is not None and sort_order not in {"recency", "relevancy"}:
        raise ConfigError("--sort-order must be one of: recency, relevancy.")

    return SearchOptions(
        max_results=parsed_max,
        next_token=next_token,
        pagination_token=pagination_token,
        start_time=_clean(start_time),
        end_time=_clean(end_time),
        since_id=since_id,
        until_id=until_id,
        sort_order=sort_order,
    )


def parse_woeid_argument(value: str) -> int:
    woeid = int(value)
    if woeid <= 0 or woeid > MAX_WOEID:
        raise ConfigError(f"<woeid> must be an integer in the range 1..{MAX_WOEID}.")
    return woeid

"""Accessors for loosely shaped API payloads.

Responses spell the same field in snake_case or camelCase depending on the
endpoint, so every read goes through :func:`get_field` with the candidate names.
"""

from __future__ import annotations

from datetime import datetime, timezone
import re
from typing import Any, Iterable, Literal

FieldKind = Literal["any", "string", "number", "object", "array", "bool"]

_WHITESPACE_REGEX = re.compile(r"\s+")


def get_object(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def to_array(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def objects(value: Any) -> list[dict]:
    return [item for item in to_array(value) if isinstance(item, dict)]


def _matches(value: Any, kind: FieldKind) -> bool:
    if kind == "any":
        return value is not None
    if kind == "string":
        return isinstance(value, str)
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == "object":
        return isinstance(value, dict)
    if kind == "array":
        return isinstance(value, list)
    return isinstance(value, bool)


def get_field(obj: Any, names: Iterable[str], kind: FieldKind = "any") -> Any:
    """Return the first value under ``names`` that has the expected ``kind``."""
    if not isinstance(obj, dict):
        return None
    for name in names:
        value = obj.get(name)
        if _matches(value, kind):
            return value
    return None


def get_string(obj: Any, *names: str) -> str | None:
    value = get_field(obj, names, "string")
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def format_number(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "-"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}"


def format_date_short(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return "-"
    raw = value.strip()
    try:
        parsed = datetime.fromisoformat(raw[:-1] + "+00:00" if raw.endswith("Z") else raw)
    except ValueError:
        return raw
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%d %H:%M")


def compact_whitespace(text: str) -> str:
    return _WHITESPACE_REGEX.sub(" ", text).strip()


def truncate(text: str, limit: int) -> str:
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    if limit == 1:
        return "…"
    return text[: limit - 1] + "…"


def merge_lookup_responses(responses: list[Any]) -> Any:
    """Combine several lookup responses into one ``data``/``includes`` payload."""
    if len(responses) == 1:
        return responses[0]

    data: list = []
    seen_ids: set[str] = set()
    errors: list = []
    includes: dict[str, list] = {}

    for response in responses:
        obj = get_object(response)
        if not obj:
            continue
        for item in to_array(obj.get("data")):
            item_id = get_string(item, "id")
            if item_id:
                if item_id in seen_ids:
                    continue
                seen_ids.add(item_id)
            data.append(item)
        errors.extend(to_array(obj.get("errors")))
        for key, value in (get_object(obj.get("includes")) or {}).items():
            includes.setdefault(key, []).extend(to_array(value))

    merged: dict[str, Any] = {"data": data}
    if includes:
        merged["includes"] = includes
    if errors:
        merged["errors"] = errors
    merged["meta"] = {"response_count": len(responses), "merged": True}
    return merged

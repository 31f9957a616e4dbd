"""Classification of free-form user and post references.

Every input string maps to exactly one of :class:`IdRef`, :class:`UsernameRef`
or :class:`InvalidRef` without any I/O, so a whole argument list can be
validated before the first request goes out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union
from urllib.parse import SplitResult, unquote, urlsplit

from .errors import ConfigError
from .extract import (
    ACCEPTED_HOSTS,
    RESERVED_PATHS,
    dedupe,
    extract_post_id,
    is_accepted_host,
    is_numeric_id,
    is_probably_url,
    is_username,
    strip_at_prefix,
)

MAX_VALUES_PER_REQUEST = 100


@dataclass(frozen=True)
class IdRef:
    value: str
    source: str
    kind: Literal["id"] = "id"


@dataclass(frozen=True)
class UsernameRef:
    value: str
    source: str
    kind: Literal["username"] = "username"


@dataclass(frozen=True)
class InvalidRef:
    source: str
    reason: str
    kind: Literal["invalid"] = "invalid"

    def describe(self) -> str:
        return f"Invalid input '{self.source}': {self.reason}"


UserReference = Union[IdRef, UsernameRef, InvalidRef]
PostReference = Union[IdRef, InvalidRef]


def _host_error() -> str:
    return f"URL must be on {' or '.join(ACCEPTED_HOSTS)}."


def _split_url(source: str) -> SplitResult | InvalidRef:
    try:
        parts = urlsplit(source)
        host = parts.hostname
    except ValueError:
        return InvalidRef(source=source, reason="Invalid URL.")
    if not host:
        return InvalidRef(source=source, reason="Invalid URL.")
    if not is_accepted_host(host):
        return InvalidRef(source=source, reason=_host_error())
    return parts


def _user_from_url(source: str) -> UserReference:
    parts = _split_url(source)
    if isinstance(parts, InvalidRef):
        return parts

    segments = [segment for segment in parts.path.split("/") if segment]

    # /<username>/status/<id> resolves to the author.
    if len(segments) >= 2 and segments[1] == "status":
        author = strip_at_prefix(unquote(segments[0]))
        if is_username(author) and author.lower() not in RESERVED_PATHS:
            return UsernameRef(value=author, source=source)

    if len(segments) >= 3 and segments[0] == "i" and segments[1] == "user" and is_numeric_id(segments[2]):
        return IdRef(value=segments[2], source=source)

    if not segments:
        return InvalidRef(source=source, reason="Could not determine a username from URL.")

    slug = strip_at_prefix(unquote(segments[0]))
    if slug.lower() in RESERVED_PATHS:
        return InvalidRef(source=source, reason=f"'{slug}' is a reserved path, not a username.")
    if not is_username(slug):
        return InvalidRef(source=source, reason="Could not determine a username from URL.")
    return UsernameRef(value=slug, source=source)


def classify_user_reference(source: str) -> UserReference:
    if is_probably_url(source):
        return _user_from_url(source)
    if is_numeric_id(source):
        return IdRef(value=source, source=source)
    username = strip_at_prefix(source)
    if is_username(username):
        return UsernameRef(value=username, source=source)
    return InvalidRef(source=source, reason="Expected an ID, username, or URL.")


def classify_post_reference(source: str) -> PostReference:
    if is_probably_url(source):
        parts = _split_url(source)
        if isinstance(parts, InvalidRef):
            return parts
        post_id = extract_post_id(parts.path)
        if not post_id:
            return InvalidRef(source=source, reason="Could not determine a Post ID from URL.")
        return IdRef(value=post_id, source=source)
    if is_numeric_id(source):
        return IdRef(value=source, source=source)
    return InvalidRef(source=source, reason="Expected a numeric Post ID or status URL.")


def require_at_most(values: list[str], label: str, limit: int = MAX_VALUES_PER_REQUEST) -> None:
    if len(values) > limit:
        raise ConfigError(f"{label} accepts at most {limit} values per request. Got: {len(values)}.")


@dataclass
class ResolvedReferences:
    ids: list[str] = field(default_factory=list)
    usernames: list[str] = field(default_factory=list)
    invalid: list[InvalidRef] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.invalid

    @property
    def empty(self) -> bool:
        return not self.ids and not self.usernames

    def enforce_limits(self, prefix: str, limit: int = MAX_VALUES_PER_REQUEST) -> None:
        require_at_most(self.ids, f"{prefix} IDs", limit)
        require_at_most(self.usernames, f"{prefix} usernames", limit)


def _partition(refs: list[UserReference]) -> ResolvedReferences:
    ids: list[str] = []
    usernames: list[str] = []
    invalid: list[InvalidRef] = []
    for ref in refs:
        if isinstance(ref, InvalidRef):
            invalid.append(ref)
        elif isinstance(ref, IdRef):
            ids.append(ref.value)
        else:
            usernames.append(ref.value)
    return ResolvedReferences(ids=dedupe(ids), usernames=dedupe(usernames), invalid=invalid)


def resolve_user_references(inputs: list[str]) -> ResolvedReferences:
    return _partition([classify_user_reference(value) for value in inputs])


def resolve_post_references(inputs: list[str]) -> ResolvedReferences:
    return _partition([classify_post_reference(value) for value in inputs])

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from .errors import ApiError
from .options import RequestFields, SearchOptions
from .version import user_agent

log = logging.getLogger(__name__)

X_API_BASE = "https://api.x.com/2"


@dataclass(frozen=True)
class RawResponse:
    status: int
    statusText: str
    headers: dict[str, str]
    body: Any

    def to_dict(self) -> dict:
        return {"status": self.status, "statusText": self.statusText, "headers": self.headers, "body": self.body}


def parse_raw_response(response: httpx.Response) -> RawResponse:
    headers = {key.lower(): value for key, value in response.headers.items()}
    text = response.text
    if not text:
        body: Any = None
    else:
        try:
            body = json.loads(text)
        except ValueError:
            body = text
    return RawResponse(status=response.status_code, statusText=response.reason_phrase, headers=headers, body=body)


def _error_message(response: httpx.Response, body: Any) -> str:
    if isinstance(body, dict):
        for key in ("detail", "title", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class XClient:
    def __init__(
        self,
        bearer_token: str,
        *,
        timeout_ms: int | None = None,
        max_retries: int | None = None,
        base_url: str = X_API_BASE,
        transport: httpx.BaseTransport | None = None,
    ):
        if not bearer_token:
            raise ValueError("A bearer token is required")
        timeout = timeout_ms / 1000 if timeout_ms and timeout_ms > 0 else None
        if transport is None:
            transport = httpx.HTTPTransport(retries=max(0, max_retries or 0))
        self._http = httpx.Client(
            base_url=base_url,
            headers={
                "authorization": f"Bearer {bearer_token}",
                "user-agent": user_agent(),
                "accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        self.users = UsersResource(self)
        self.posts = PostsResource(self)
        self.trends = TrendsResource(self)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> XClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get(self, path: str, params: dict[str, str] | None = None, *, raw: bool = False) -> Any:
        log.debug("GET %s %s", path, params or {})
        response = self._http.get(path, params=params or None)
        log.debug("-> %s", response.status_code)
        if raw:
            return parse_raw_response(response)

        payload = parse_raw_response(response)
        if response.status_code < 200 or response.status_code >= 300:
            raise ApiError(
                _error_message(response, payload.body),
                status=payload.status,
                status_text=payload.statusText,
                headers=payload.headers,
                data=payload.body,
            )
        return payload.body


class _Resource:
    def __init__(self, client: XClient):
        self._client = client


def _merge(*parts: dict[str, str]) -> dict[str, str]:
    merged: dict[str, str] = {}
    for part in parts:
        merged.update(part)
    return merged


class UsersResource(_Resource):
    def get_by_id(self, user_id: str, fields: RequestFields = RequestFields(), *, raw: bool = False) -> Any:
        return self._client.get(f"/users/{quote(user_id)}", fields.to_params(), raw=raw)

    def get_by_ids(self, ids: list[str], fields: RequestFields = RequestFields(), *, raw: bool = False) -> Any:
        return self._client.get("/users", _merge({"ids": ",".join(ids)}, fields.to_params()), raw=raw)

    def get_by_username(self, username: str, fields: RequestFields = RequestFields(), *, raw: bool = False) -> Any:
        return self._client.get(f"/users/by/username/{quote(username)}", fields.to_params(), raw=raw)

    def get_by_usernames(
        self, usernames: list[str], fields: RequestFields = RequestFields(), *, raw: bool = False
    ) -> Any:
        return self._client.get("/users/by", _merge({"usernames": ",".join(usernames)}, fields.to_params()), raw=raw)

    def search(
        self,
        query: str,
        options: SearchOptions = SearchOptions(),
        fields: RequestFields = RequestFields(),
        *,
        raw: bool = False,
    ) -> Any:
        params = _merge({"query": query}, options.to_params(), fields.to_params())
        return self._client.get("/users/search", params, raw=raw)


class PostsResource(_Resource):
    def get_by_id(self, post_id: str, fields: RequestFields = RequestFields(), *, raw: bool = False) -> Any:
        return self._client.get(f"/tweets/{quote(post_id)}", fields.to_params(), raw=raw)

    def get_by_ids(self, ids: list[str], fields: RequestFields = RequestFields(), *, raw: bool = False) -> Any:
        return self._client.get("/tweets", _merge({"ids": ",".join(ids)}, fields.to_params()), raw=raw)

    def search_recent(
        self,
        query: str,
        options: SearchOptions = SearchOptions(),
        fields: RequestFields = RequestFields(),
        *,
        raw: bool = False,
    ) -> Any:
        params = _merge({"query": query}, options.to_params(), fields.to_params())
        return self._client.get("/tweets/search/recent", params, raw=raw)

    def search_all(
        self,
        query: str,
        options: SearchOptions = SearchOptions(),
        fields: RequestFields = RequestFields(),
        *,
        raw: bool = False,
    ) -> Any:
        params = _merge({"query": query}, options.to_params(), fields.to_params())
        return self._client.get("/tweets/search/all", params, raw=raw)


class TrendsResource(_Resource):
    def get_by_woeid(
        self,
        woeid: int,
        *,
        max_trends: int | None = None,
        fields: RequestFields = RequestFields(),
        raw: bool = False,
    ) -> Any:
        params = fields.to_params()
        if max_trends is not None:
            params["max_trends"] = str(max_trends)
        return self._client.get(f"/trends/by/woeid/{woeid}", params, raw=raw)

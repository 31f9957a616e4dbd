from __future__ import annotations

from typing import Any, Mapping


class ConfigError(Exception):
    """Bad input or option; reported before any network call."""


class WoeidUnavailableError(RuntimeError):
    """The WOEID index could not be fetched and no cache exists."""


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status: int,
        status_text: str = "",
        headers: Mapping[str, str] | None = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.headers = dict(headers or {})
        self.data = data

    def to_dict(self) -> dict:
        return {
            "error": {
                "message": self.message,
                "status": self.status,
                "statusText": self.status_text,
                "data": self.data,
                "headers": self.headers,
            }
        }

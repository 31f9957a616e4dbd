from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Callable, Mapping

import json5

from .errors import ConfigError


@dataclass(frozen=True)
class XcliConfig:
    timeoutMs: int | None = None
    retries: int | None = None
    mediaDir: str | None = None
    woeidCachePath: str | None = None
    usersPreset: str | None = None
    postsPreset: str | None = None


def _read_config_file(path: Path, warn: Callable[[str], None]) -> dict:
    if not path.exists():
        return {}
    try:
        raw = path.read_text(encoding="utf-8")
        parsed = json5.loads(raw)
        if isinstance(parsed, dict):
            return parsed
        warn(f"Ignoring config at {path}: expected an object")
        return {}
    except (OSError, ValueError) as exc:
        warn(f"Failed to parse config at {path}: {exc}")
        return {}


def _int_or_none(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


def load_config(
    warn: Callable[[str], None],
    *,
    global_path: Path | None = None,
    local_path: Path | None = None,
) -> XcliConfig:
    global_path = global_path or Path.home() / ".config" / "xcli" / "config.json5"
    local_path = local_path or Path.cwd() / ".xclirc.json5"

    merged: dict = {}
    merged.update(_read_config_file(global_path, warn))
    merged.update(_read_config_file(local_path, warn))

    return XcliConfig(
        timeoutMs=_int_or_none(merged.get("timeoutMs")),
        retries=_int_or_none(merged.get("retries")),
        mediaDir=_str_or_none(merged.get("mediaDir")),
        woeidCachePath=_str_or_none(merged.get("woeidCachePath")),
        usersPreset=_str_or_none(merged.get("usersPreset")),
        postsPreset=_str_or_none(merged.get("postsPreset")),
    )


def _first_int(values, *, minimum: int) -> int | None:
    for value in values:
        if value is None or value == "":
            continue
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            continue
        if parsed >= minimum:
            return parsed
    return None


def resolve_timeout_ms(option: str | None, config: XcliConfig, env: Mapping[str, str]) -> int | None:
    return _first_int((option, config.timeoutMs, env.get("XCLI_TIMEOUT_MS")), minimum=1)


def resolve_retries(option: str | None, config: XcliConfig, env: Mapping[str, str]) -> int | None:
    return _first_int((option, config.retries, env.get("XCLI_RETRIES")), minimum=0)


def get_bearer_token(option: str | None, env: Mapping[str, str] | None = None) -> str:
    env = os.environ if env is None else env
    token = option or env.get("X_API_BEARER_TOKEN") or env.get("BEARER_TOKEN") or ""
    if not token:
        raise ConfigError("Missing bearer token. Set X_API_BEARER_TOKEN (recommended) or pass --bearer-token.")
    return token

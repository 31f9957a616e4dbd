from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

from .styles import style_text

StatusKind = Literal["ok", "warn", "err", "info", "hint"]
OutputMode = Literal["human", "json", "json-pretty"]


@dataclass(frozen=True)
class OutputConfig:
    plain: bool
    emoji: bool
    color: bool

    def style(self, text: str, color: str | None = None, *, bold: bool = False) -> str:
        return style_text(text, color=color, bold=bold, enabled=self.color)


_STATUS = {
    "ok": {"emoji": "✅", "text": "OK:", "plain": "[ok]"},
    "warn": {"emoji": "⚠️", "text": "Warning:", "plain": "[warn]"},
    "err": {"emoji": "❌", "text": "Error:", "plain": "[err]"},
    "info": {"emoji": "ℹ️", "text": "Info:", "plain": "[info]"},
    "hint": {"emoji": "ℹ️", "text": "Hint:", "plain": "[hint]"},
}


def _default_color(env: Mapping[str, str], is_tty: bool) -> bool:
    force = env.get("FORCE_COLOR")
    if force is not None:
        return force.strip() not in {"0", "false"}
    if "NO_COLOR" in env or env.get("TERM") == "dumb":
        return False
    return is_tty


def resolve_output_config_from_options(
    opts: Mapping[str, bool | None], env: Mapping[str, str], is_tty: bool
) -> OutputConfig:
    plain = bool(opts.get("plain"))
    emoji = not plain and (opts.get("emoji") if opts.get("emoji") is not None else True)
    color = not plain and (opts.get("color") if opts.get("color") is not None else True) and _default_color(env, is_tty)

    return OutputConfig(plain=plain, emoji=bool(emoji), color=bool(color))


def resolve_output_mode(*, json_output: bool, json_pretty: bool) -> OutputMode:
    if json_pretty:
        return "json-pretty"
    if json_output:
        return "json"
    return "human"


def status_prefix(kind: StatusKind, cfg: OutputConfig) -> str:
    if cfg.plain:
        return f"{_STATUS[kind]['plain']} "
    if cfg.emoji:
        return f"{_STATUS[kind]['emoji']} "
    return f"{_STATUS[kind]['text']} "

from __future__ import annotations

from dataclasses import dataclass
import re

ANSI_RESET = "\x1b[0m"

_ANSI_REGEX = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True)
class Style:
    prefix: str

    def apply(self, text: str, enabled: bool) -> str:
        if not enabled:
            return text
        return f"{self.prefix}{text}{ANSI_RESET}"


STYLES = {
    "bold": Style("\x1b[1m"),
    "dim": Style("\x1b[2m"),
    "blue": Style("\x1b[34m"),
    "cyan": Style("\x1b[36m"),
    "magenta": Style("\x1b[35m"),
    "green": Style("\x1b[32m"),
    "yellow": Style("\x1b[33m"),
    "red": Style("\x1b[31m"),
    "gray": Style("\x1b[90m"),
}


def style_text(text: str, *, color: str | None = None, bold: bool = False, enabled: bool = True) -> str:
    if not enabled:
        return text
    output = text
    if color:
        output = STYLES[color].apply(output, True)
    if bold:
        output = STYLES["bold"].apply(output, True)
    return output


def strip_ansi(text: str) -> str:
    return _ANSI_REGEX.sub("", text)


def visible_len(text: str) -> int:
    """Length of ``text`` as it appears on a terminal (styling escapes excluded)."""
    return len(strip_ansi(text))


def pad_visible(text: str, width: int) -> str:
    gap = width - visible_len(text)
    if gap <= 0:
        return text
    return text + " " * gap

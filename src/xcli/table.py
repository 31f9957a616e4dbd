"""Width-aware plain-text tables.

Columns start at their natural width. When a width budget is set, the column
with the most slack above its minimum gives up one character at a time until
the table fits or no column has slack left. Cells are then word-wrapped to the
final widths, so content is kept rather than cut whenever space allows.
"""

from __future__ import annotations

from typing import Sequence

from .styles import pad_visible, strip_ansi, visible_len

DEFAULT_MIN_COL_WIDTH = 6
COLUMN_GAP = "  "


def wrap_text(text: str, width: int) -> list[str]:
    width = max(1, width)
    lines: list[str] = []
    current = ""
    for word in text.split():
        while len(word) > width:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:width])
            word = word[width:]
        if not word:
            continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines or [""]


def wrap_cell(cell: str, width: int) -> list[str]:
    # Cells that already fit keep their styling; wrapped cells are wrapped as plain text.
    if "\n" not in cell and visible_len(cell) <= width:
        return [cell]
    return wrap_text(strip_ansi(cell), width)


def natural_widths(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[int]:
    widths = [visible_len(header) for header in headers]
    for row in rows:
        for index, cell in enumerate(row[: len(widths)]):
            widths[index] = max(widths[index], visible_len(cell))
    return widths


def minimum_widths(
    headers: Sequence[str],
    natural: Sequence[int],
    *,
    min_col_width: int = DEFAULT_MIN_COL_WIDTH,
    min_widths: Sequence[int | None] | None = None,
) -> list[int]:
    result: list[int] = []
    for index, header in enumerate(headers):
        hint = min_widths[index] if min_widths and index < len(min_widths) else None
        floor = hint if hint is not None else min_col_width
        result.append(min(natural[index], max(visible_len(header), floor)))
    return result


def total_width(widths: Sequence[int]) -> int:
    if not widths:
        return 0
    return sum(widths) + len(COLUMN_GAP) * (len(widths) - 1)


def fit_widths(widths: Sequence[int], minimums: Sequence[int], max_width: int | None) -> list[int]:
    fitted = list(widths)
    if max_width is None:
        return fitted
    while total_width(fitted) > max_width:
        best = -1
        best_slack = 0
        for index, width in enumerate(fitted):
            slack = width - minimums[index]
            if slack > best_slack:
                best = index
                best_slack = slack
        if best < 0:
            break
        fitted[best] -= 1
    return fitted


def render_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    max_width: int | None = None,
    min_col_width: int = DEFAULT_MIN_COL_WIDTH,
    min_widths: Sequence[int | None] | None = None,
) -> list[str]:
    natural = natural_widths(headers, rows)
    minimums = minimum_widths(headers, natural, min_col_width=min_col_width, min_widths=min_widths)
    widths = fit_widths(natural, minimums, max_width)

    lines = [COLUMN_GAP.join(pad_visible(header, widths[i]) for i, header in enumerate(headers))]
    lines.append(COLUMN_GAP.join("-" * width for width in widths))

    for row in rows:
        cells = [row[i] if i < len(row) else "" for i in range(len(headers))]
        wrapped = [wrap_cell(cell, widths[i]) for i, cell in enumerate(cells)]
        height = max((len(cell_lines) for cell_lines in wrapped), default=1)
        for line_index in range(height):
            parts = []
            for i, cell_lines in enumerate(wrapped):
                text = cell_lines[line_index] if line_index < len(cell_lines) else ""
                parts.append(pad_visible(text, widths[i]))
            lines.append(COLUMN_GAP.join(parts))
    return lines

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from ..models.raw_table import Cell, RawTable

"""Tabular parser: CSV text or a spreadsheet cell grid -> RawTable.

Rules shared by both inputs:
- the first non-blank row is the header row (cells trimmed)
- a data row is kept only if at least one cell is non-blank after trimming
- ragged rows are kept as-is

Text specifics: lines are split on newline and blank lines are discarded
before anything else, so quoted fields cannot span lines. A double quote
toggles quoted mode and is dropped from the output; there is no ``""`` escape.
"""

__all__ = [
    "parse_line",
    "parse_text",
    "parse_grid",
    "is_blank",
]

QUOTE = '"'
DELIMITER = ","


def parse_line(line: str) -> list[str]:
    """Tokenize one CSV line.

    >>> parse_line('"Acme, Inc.",100')
    ['Acme, Inc.', '100']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == QUOTE:
            in_quotes = not in_quotes
        elif ch == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def is_blank(cell: Any) -> bool:
    if cell is None:
        return True
    if isinstance(cell, str):
        return cell.strip() == ""
    # NaN / NaT never equal themselves
    return cell != cell


def _row_has_content(row: Sequence[Any]) -> bool:
    return any(not is_blank(c) for c in row)


def parse_text(text: str) -> RawTable:
    """Parse delimited text into a RawTable. Never raises for malformed rows."""
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = [ln for ln in text.split("\n") if ln.strip()]
    if not lines:
        return RawTable(headers=(), rows=())
    headers = tuple(h.strip() for h in parse_line(lines[0]))
    rows: list[tuple[Cell, ...]] = []
    for line in lines[1:]:
        fields = parse_line(line)
        if _row_has_content(fields):
            rows.append(tuple(fields))
    return RawTable(headers=headers, rows=tuple(rows))


def _clean_cell(value: Any) -> Cell:
    if is_blank(value):
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def parse_grid(grid: Iterable[Sequence[Any]]) -> RawTable:
    """Parse pre-tokenized spreadsheet rows into a RawTable.

    Numeric and datetime cells are kept as-is (serial dates must stay numeric);
    None/NaN cells become "" and string cells are trimmed.
    """
    headers: tuple[str, ...] | None = None
    rows: list[tuple[Cell, ...]] = []
    for raw in grid:
        if not _row_has_content(raw):
            continue
        cells = tuple(_clean_cell(v) for v in raw)
        if headers is None:
            headers = tuple(str(c).strip() for c in cells)
            continue
        rows.append(cells)
    if headers is None:
        return RawTable(headers=(), rows=())
    return RawTable(headers=headers, rows=tuple(rows))

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

"""RawTable model: header row + data rows as read from CSV text or a spreadsheet grid.

Rows keep their cells exactly as the parser produced them. CSV cells are always
trimmed strings; spreadsheet cells may also be numbers or datetimes (serial
dates stay numeric so the normalizer can interpret them).
"""

__all__ = [
    "Cell",
    "RawTable",
]

Cell = Union[str, int, float, date, datetime]


@dataclass(frozen=True)
class RawTable:
    """Header + data rows of one loaded file.

    Rows may be ragged: a row can be shorter or longer than ``headers``.
    Use :meth:`cell` for index-safe access (missing cell -> "").
    """
    headers: tuple[str, ...]
    rows: tuple[tuple[Cell, ...], ...]

    @staticmethod
    def cell(row: tuple[Cell, ...], index: int | None) -> Cell:
        if index is None or index < 0 or index >= len(row):
            return ""
        return row[index]

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.headers

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .column_roles import ColumnRoleMap
from .raw_table import RawTable
from .record import Record

"""Dataset model: the canonical in-memory state produced by one load event.

A Dataset is replaced wholesale on the next load; nothing in it is mutable,
so any number of queries may read it at once.
"""

__all__ = [
    "Dataset",
]


@dataclass(frozen=True)
class Dataset:
    source: str  # file name or caller-supplied label
    table: RawTable
    roles: ColumnRoleMap
    records: tuple[Record, ...]
    loaded_at: datetime  # UTC

    @property
    def dropped_rows(self) -> int:
        """Data rows discarded because both customer and salesperson were empty."""
        return len(self.table.rows) - len(self.records)

    def __len__(self) -> int:
        return len(self.records)

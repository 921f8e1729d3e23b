from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .raw_table import Cell

"""Record model: one canonical RFQ row after normalization.

Conversion and effective amount are derived properties, so they can never
disagree with the status and amount fields they come from.
"""

__all__ = [
    "NOT_CONVERTED_MARKER",
    "is_converted_status",
    "Record",
]

# Status value (KETERANGAN column) marking an RFQ that did not become an order
NOT_CONVERTED_MARKER = "TIDAK JADI OC"


def is_converted_status(status_raw: str) -> bool:
    """Strict conversion rule: converted unless blank or exactly the not-converted marker."""
    return status_raw != "" and status_raw != NOT_CONVERTED_MARKER


@dataclass(frozen=True)
class Record:
    """Canonical RFQ record.

    ``original_row`` is the raw row from the parsed table, shared for
    drill-down display and never modified.
    """
    rfq_id: str
    date: date | None
    customer: str
    salesperson: str
    primary_amount: float
    secondary_amount: float
    status_raw: str  # trimmed + uppercased
    remark: str = ""  # free-text remark column (e.g. body builder), trimmed
    original_row: tuple[Cell, ...] = ()
    row_number: int = 0  # 1-based position among retained data rows

    @property
    def effective_amount(self) -> float:
        return self.secondary_amount if self.secondary_amount > 0 else self.primary_amount

    @property
    def is_converted(self) -> bool:
        return is_converted_status(self.status_raw)

from __future__ import annotations

import logging
import math
import numbers
import re
import warnings
from datetime import date, datetime, timedelta

import pandas as pd

from ..models.column_roles import ColumnRoleMap, Role
from ..models.raw_table import Cell, RawTable
from ..models.record import Record

"""Record normalizer: RawTable + ColumnRoleMap -> canonical Records.

Everything here is best effort. A cell that cannot be read as a number
becomes 0 and a cell that cannot be read as a date becomes None; nothing is
raised for bad values. Known limitations, kept on purpose:
- commas are always thousands separators, so "1,5" reads as 15
- only the leading decimal number is taken, so "1.500.000" reads as 1.5
"""

__all__ = [
    "SPREADSHEET_EPOCH",
    "cell_text",
    "parse_number",
    "parse_date",
    "normalize_status",
    "normalize_row",
    "normalize",
]

logger = logging.getLogger(__name__)

# Day 0 of spreadsheet serial dates (1900-01-00 shifted by the 1900 leap-year bug)
SPREADSHEET_EPOCH = date(1899, 12, 30)

_NON_NUMERIC = re.compile(r"[^\d,.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_DD_MMM_YY = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{2})$")

MONTH_ABBREVIATIONS = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
    "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
    # Indonesian
    "MEI": 5, "AGU": 8, "AGT": 8, "OKT": 10, "NOP": 11, "DES": 12,
}


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def cell_text(value: Cell) -> str:
    """Text form of a cell, trimmed. Integral floats lose their ".0"."""
    if value is None:
        return ""
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat()
    return str(value).strip()


def parse_number(value: Cell) -> float:
    """Parse a currency-ish cell. Failure or empty -> 0.0.

    >>> parse_number("Rp 1,250,000")
    1250000.0
    """
    if _is_number(value):
        f = float(value)  # type: ignore[arg-type]
        return abs(f) if math.isfinite(f) else 0.0
    if value is None or isinstance(value, (bool, date)):
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(value)).replace(",", "")
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def _from_serial(serial: float) -> date | None:
    if not math.isfinite(serial):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=math.floor(serial))
    except OverflowError:
        return None


def _parse_calendar_string(text: str) -> date | None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def _parse_dd_mmm_yy(text: str) -> date | None:
    match = _DD_MMM_YY.match(text)
    if not match:
        return None
    month = MONTH_ABBREVIATIONS.get(match.group(2).upper())
    if month is None:
        return None
    try:
        return date(2000 + int(match.group(3)), month, int(match.group(1)))
    except ValueError:
        return None


def parse_date(value: Cell) -> date | None:
    """Parse a date cell; first success wins.

    1. spreadsheet serial number (days since 1899-12-30) or native date cell
    2. generic calendar string
    3. DD-MMM-YY with year 2000+YY
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _is_number(value):
        return _from_serial(float(value))  # type: ignore[arg-type]
    text = cell_text(value)
    if not text:
        return None
    return _parse_calendar_string(text) or _parse_dd_mmm_yy(text)


def normalize_status(value: Cell) -> str:
    return cell_text(value).upper()


def normalize_row(row: tuple[Cell, ...], roles: ColumnRoleMap, row_number: int = 0) -> Record:
    """Map one raw row to a Record. Unresolved roles read as empty / zero."""

    def pick(role: Role) -> Cell:
        return RawTable.cell(row, roles.index_of(role))

    return Record(
        rfq_id=cell_text(pick(Role.RFQ_ID)),
        date=parse_date(pick(Role.DATE)),
        customer=cell_text(pick(Role.CUSTOMER)),
        salesperson=cell_text(pick(Role.SALESPERSON)),
        primary_amount=parse_number(pick(Role.AMOUNT)),
        secondary_amount=parse_number(pick(Role.SECONDARY_AMOUNT)),
        status_raw=normalize_status(pick(Role.STATUS)),
        remark=cell_text(pick(Role.REMARK)),
        original_row=row,
        row_number=row_number,
    )


def normalize(table: RawTable, roles: ColumnRoleMap) -> tuple[Record, ...]:
    """Build the canonical record sequence.

    Rows whose customer and salesperson are both empty are dropped; they
    cannot take part in any grouping.
    """
    records: list[Record] = []
    for row_number, row in enumerate(table.rows, start=1):
        record = normalize_row(row, roles, row_number)
        if not record.customer and not record.salesperson:
            continue
        records.append(record)
    dropped = len(table.rows) - len(records)
    if dropped:
        logger.debug("dropped %d rows without customer and salesperson", dropped)
    return tuple(records)

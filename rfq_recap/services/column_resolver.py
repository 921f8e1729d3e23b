from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import date

from ..models.column_roles import ColumnRoleMap, KeywordRule, Role
from ..models.raw_table import Cell, RawTable

"""Column role resolution from heterogeneous, typo-prone header names.

Headers in real recap files are Indonesian and inconsistently spelled
("MARKERTING", "HARGA (NEW)", "KETERANGAN"). Each role owns an ordered tuple
of KeywordRule; headers are scanned once, left to right, and a role keeps its
first match unless a later header matches a rule of strictly better priority.
"""

__all__ = [
    "ROLE_RULES",
    "match_priority",
    "resolve_columns",
    "detect_field_types",
]

logger = logging.getLogger(__name__)

ROLE_RULES: dict[Role, tuple[KeywordRule, ...]] = {
    Role.AMOUNT: (
        KeywordRule(1, all_of=("NEW",), any_of=("HARGA", "PRICE")),
        KeywordRule(2, any_of=("HARGA", "PRICE", "VALUE")),
    ),
    Role.CUSTOMER: (
        KeywordRule(1, all_of=("CUSTOMER", "NAME")),
        KeywordRule(2, any_of=("CUSTOMER", "CLIENT")),
    ),
    Role.SALESPERSON: (
        KeywordRule(1, any_of=("MARKERTING", "MARKETING")),
        KeywordRule(2, any_of=("SALES", "PERSON")),
    ),
    Role.STATUS: (
        KeywordRule(1, any_of=("KETERANGAN",)),
        KeywordRule(2, any_of=("STATUS",)),
        KeywordRule(2, any_of=("PROGRESS",), none_of=("QUANTITY",)),
    ),
    Role.SECONDARY_AMOUNT: (
        KeywordRule(1, any_of=("TOTAL",), none_of=("QUANTITY",)),
        KeywordRule(2, any_of=("QUANTITY",), none_of=("SATUAN",)),
    ),
    Role.DATE: (
        KeywordRule(1, exact=("DATE",)),
        KeywordRule(1, any_of=("TANGGAL",)),
        KeywordRule(2, any_of=("DATE", "TGL")),
    ),
    Role.RFQ_ID: (
        KeywordRule(1, all_of=("PENAWARAN",), any_of=("NO",)),
        KeywordRule(1, all_of=("RFQ",), any_of=("NO", "NUMBER")),
        KeywordRule(2, any_of=("PENAWARAN", "RFQ", "QUOTATION")),
    ),
    Role.REMARK: (
        KeywordRule(1, all_of=("REMARK",), any_of=("KAROSERI",)),
        KeywordRule(2, any_of=("REMARK",)),
    ),
}


def match_priority(role: Role, header: str) -> int | None:
    """Best (lowest) priority of the role's rules matched by ``header``, or None."""
    folded = header.strip().upper()
    if not folded:
        return None
    best: int | None = None
    for rule in ROLE_RULES[role]:
        if rule.matches(folded) and (best is None or rule.priority < best):
            best = rule.priority
    return best


def resolve_columns(headers: Sequence[str]) -> ColumnRoleMap:
    """Classify which header plays which role. Never fails; unmatched roles stay absent."""
    indices: dict[Role, int] = {}
    priorities: dict[Role, int] = {}
    for idx, header in enumerate(headers):
        for role in Role:
            prio = match_priority(role, str(header))
            if prio is None:
                continue
            current = priorities.get(role)
            if current is None or prio < current:
                indices[role] = idx
                priorities[role] = prio
    roles = ColumnRoleMap(indices=indices, priorities=priorities)
    for role in roles.unresolved:
        logger.debug("column role not found: %s", role.value)
    return roles


_DATE_LIKE = re.compile(r"^\d{2}-\w{3}-\d{2}")
_NUMERIC_LIKE = re.compile(r"\d")


def _classify_value(value: Cell) -> str:
    if isinstance(value, date):
        return "date"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return "numeric"
    text = str(value).strip()
    if _DATE_LIKE.match(text):
        return "date"
    cleaned = re.sub(r"[^\d,.]", "", text).replace(",", "")
    if _NUMERIC_LIKE.search(cleaned):
        return "numeric"
    return "string"


def detect_field_types(table: RawTable, sample_size: int = 100) -> dict[str, str]:
    """Guess a type per column from the first ``sample_size`` rows.

    Returns header -> one of ``empty``, ``date``, ``numeric``, ``string``.
    A column is ``date`` if any sampled value looks like DD-MMM-YY, else
    ``numeric`` if any value carries digits, else ``string``.
    """
    sample = table.rows[:sample_size]
    types: dict[str, str] = {}
    for idx, header in enumerate(table.headers):
        values = [RawTable.cell(row, idx) for row in sample]
        non_empty = [v for v in values if str(v).strip()]
        if not non_empty:
            types[header] = "empty"
            continue
        kinds = {_classify_value(v) for v in non_empty}
        if "date" in kinds:
            types[header] = "date"
        elif "numeric" in kinds:
            types[header] = "numeric"
        else:
            types[header] = "string"
    return types

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime, time
from typing import Any, Optional

from ..models.filter_spec import FilterSpec
from ..models.record import Record

"""Filter predicate builder.

A FilterSpec becomes one predicate that AND-composes every present
criterion. Queries always filter the full canonical record set.
"""

__all__ = [
    "END_OF_DAY",
    "build_predicate",
    "filter_records",
    "normalize_filters",
]

Predicate = Callable[[Record], bool]

# dateTo bound is inclusive up to the last millisecond of the day
END_OF_DAY = time(23, 59, 59, 999000)


def _start_of(d: date) -> datetime:
    return datetime.combine(d, time.min)


def build_predicate(spec: FilterSpec) -> Predicate:
    checks: list[Predicate] = []

    if spec.customer_substring:
        needle = spec.customer_substring.lower()
        checks.append(lambda r: bool(r.customer) and needle in r.customer.lower())

    if spec.salesperson_exact:
        wanted = spec.salesperson_exact.strip().lower()
        checks.append(lambda r: bool(r.salesperson) and r.salesperson.strip().lower() == wanted)

    if spec.status_substring:
        status_needle = spec.status_substring.lower()
        checks.append(lambda r: status_needle in r.status_raw.lower())

    if spec.date_from is not None:
        lower = _start_of(spec.date_from)
        checks.append(lambda r: r.date is not None and _start_of(r.date) >= lower)

    if spec.date_to is not None:
        upper = datetime.combine(spec.date_to, END_OF_DAY)
        checks.append(lambda r: r.date is not None and _start_of(r.date) <= upper)

    if not spec.include_converted and not spec.include_not_converted:
        return lambda r: False
    if not spec.include_converted:
        checks.append(lambda r: not r.is_converted)
    elif not spec.include_not_converted:
        checks.append(lambda r: r.is_converted)

    def predicate(record: Record) -> bool:
        return all(check(record) for check in checks)

    return predicate


def filter_records(records: Iterable[Record], spec: FilterSpec | None = None) -> tuple[Record, ...]:
    if spec is None:
        return tuple(records)
    predicate = build_predicate(spec)
    return tuple(r for r in records if predicate(r))


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def normalize_filters(raw: dict) -> FilterSpec:
    """Build a FilterSpec from loose UI state.

    Blank strings mean "no constraint", dates are ISO ``YYYY-MM-DD`` strings
    or date objects, and when both status gates are switched off the
    converted gate is switched back on.
    """
    include_converted = bool(raw.get("include_converted", True))
    include_not_converted = bool(raw.get("include_not_converted", True))
    if not include_converted and not include_not_converted:
        include_converted = True

    return FilterSpec(
        customer_substring=_as_text(raw.get("customer")),
        salesperson_exact=_as_text(raw.get("sales")),
        status_substring=_as_text(raw.get("status")),
        date_from=_as_date(raw.get("date_from")),
        date_to=_as_date(raw.get("date_to")),
        include_converted=include_converted,
        include_not_converted=include_not_converted,
    )

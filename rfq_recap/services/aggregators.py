from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date

from ..models.aggregates import (
    BreakdownKind,
    BreakdownRow,
    CustomerConversion,
    CustomerVolume,
    KpiSummary,
    NameCount,
    PairAmount,
    PairCount,
    VolumeMode,
)
from ..models.record import Record

"""Aggregators over (already filtered) records.

Every function is pure: it reads the records, builds new frozen rows and
returns them in a tuple with a total order. Names tie-break by
``(casefold, raw)`` so equal counts always come out in the same order.
"""

__all__ = [
    "name_key",
    "count_by_customer_salesperson",
    "count_by_customer",
    "count_by_salesperson",
    "conversion_by_customer",
    "amount_by_customer_salesperson",
    "top_customers_by_volume",
    "option_counts",
    "compute_kpis",
    "date_bounds",
    "RATE_DECIMALS",
    "PRICE_BANDS",
    "conversion_sort_key",
    "price_band",
    "customer_breakdown",
]

# Conversion rates equal after rounding to this many decimals rank as tied.
# Rounding approximates a 0.01 tolerance: rates straddling a rounding edge
# (33.3349 vs 33.3351) still rank by rate.
RATE_DECIMALS = 2

# (label, exclusive upper bound) of HARGA (NEW) bands, in display order
PRICE_BANDS: tuple[tuple[str, float], ...] = (
    ("< 100M", 100_000_000),
    ("100M - 300M", 300_000_000),
    ("300M - 500M", 500_000_000),
    ("500M - 1B", 1_000_000_000),
    ("> 1B", math.inf),
)
NO_PRICE = "No Price"
NO_DATE = "(No Date)"


def name_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def _rate(converted: int, total: int) -> float:
    return converted / total * 100 if total > 0 else 0.0


def count_by_customer_salesperson(records: Iterable[Record]) -> tuple[PairCount, ...]:
    """RFQ count per (customer, salesperson); records missing either are skipped."""
    counts: dict[tuple[str, str], int] = {}
    for r in records:
        if not r.customer or not r.salesperson:
            continue
        key = (r.customer, r.salesperson)
        counts[key] = counts.get(key, 0) + 1
    rows = [PairCount(customer=c, salesperson=s, count=n) for (c, s), n in counts.items()]
    rows.sort(key=lambda p: (-p.count, name_key(p.customer), name_key(p.salesperson)))
    return tuple(rows)


def _count_by(values: Iterable[str]) -> tuple[NameCount, ...]:
    counts: dict[str, int] = {}
    for v in values:
        if not v:
            continue
        counts[v] = counts.get(v, 0) + 1
    rows = [NameCount(name=k, count=n) for k, n in counts.items()]
    rows.sort(key=lambda nc: (-nc.count, name_key(nc.name)))
    return tuple(rows)


def count_by_customer(records: Iterable[Record]) -> tuple[NameCount, ...]:
    return _count_by(r.customer for r in records)


def count_by_salesperson(records: Iterable[Record]) -> tuple[NameCount, ...]:
    return _count_by(r.salesperson for r in records)


def conversion_sort_key(row: CustomerConversion) -> tuple[float, int, tuple[str, str]]:
    return (-round(row.conversion_rate, RATE_DECIMALS), -row.total, name_key(row.customer))


def conversion_by_customer(records: Iterable[Record]) -> tuple[CustomerConversion, ...]:
    """Conversion rate per customer.

    Sorted by rate (rounded to RATE_DECIMALS) descending, then total
    descending, then customer name.
    """
    totals: dict[str, list[int]] = {}
    for r in records:
        if not r.customer:
            continue
        bucket = totals.setdefault(r.customer, [0, 0])
        bucket[0] += 1
        if r.is_converted:
            bucket[1] += 1
    rows = [
        CustomerConversion(
            customer=customer,
            total=total,
            converted=converted,
            not_converted=total - converted,
            conversion_rate=_rate(converted, total),
        )
        for customer, (total, converted) in totals.items()
    ]
    rows.sort(key=conversion_sort_key)
    return tuple(rows)


def amount_by_customer_salesperson(records: Iterable[Record]) -> tuple[PairAmount, ...]:
    """Sum of effective amount per (customer, salesperson)."""
    sums: dict[tuple[str, str], list[float]] = {}
    for r in records:
        if not r.customer or not r.salesperson:
            continue
        bucket = sums.setdefault((r.customer, r.salesperson), [0.0, 0])
        bucket[0] += r.effective_amount
        bucket[1] += 1
    rows = [
        PairAmount(customer=c, salesperson=s, total_amount=amount, count=int(n))
        for (c, s), (amount, n) in sums.items()
    ]
    rows.sort(key=lambda p: (-p.total_amount, -p.count, name_key(p.customer), name_key(p.salesperson)))
    return tuple(rows)


def top_customers_by_volume(
    records: Iterable[Record], mode: VolumeMode = VolumeMode.BOTH
) -> tuple[CustomerVolume, ...]:
    """RFQ volume per customer with converted / not-converted split.

    ``mode`` picks the ranking metric; in the single-status modes customers
    with zero of that status are left out.
    """
    split: dict[str, list[int]] = {}
    for r in records:
        customer = r.customer.strip()
        if not customer:
            continue
        bucket = split.setdefault(customer, [0, 0])
        if r.is_converted:
            bucket[0] += 1
        else:
            bucket[1] += 1
    rows = [CustomerVolume(customer=c, converted=yes, not_converted=no) for c, (yes, no) in split.items()]
    rows = [v for v in rows if v.metric(mode) > 0]
    rows.sort(key=lambda v: (-v.metric(mode), name_key(v.customer)))
    return tuple(rows)


def option_counts(
    records: Iterable[Record],
    field: str,
    *,
    customer: str | None = None,
    salesperson: str | None = None,
) -> tuple[NameCount, ...]:
    """Choices for a linked customer / salesperson dropdown, with RFQ counts.

    ``field`` is ``"customer"`` or ``"salesperson"``. The other field may be
    pinned (case-insensitive exact match) to narrow the choices.
    """
    if field not in ("customer", "salesperson"):
        raise ValueError(f"unsupported option field: {field}")
    want_customer = customer.strip().lower() if customer and customer.strip() else None
    want_sales = salesperson.strip().lower() if salesperson and salesperson.strip() else None

    def keep(r: Record) -> bool:
        if want_customer is not None and r.customer.strip().lower() != want_customer:
            return False
        if want_sales is not None and r.salesperson.strip().lower() != want_sales:
            return False
        return True

    return _count_by(getattr(r, field).strip() for r in records if keep(r))


def compute_kpis(records: Iterable[Record]) -> KpiSummary:
    total = 0
    converted = 0
    for r in records:
        total += 1
        if r.is_converted:
            converted += 1
    return KpiSummary(total=total, converted=converted, conversion_rate=_rate(converted, total))


def date_bounds(records: Iterable[Record]) -> tuple[date, date] | None:
    """Earliest and latest record date, or None when no record has a date."""
    dates = [r.date for r in records if r.date is not None]
    if not dates:
        return None
    return min(dates), max(dates)


def price_band(amount: float) -> str:
    if amount <= 0:
        return NO_PRICE
    for label, upper in PRICE_BANDS:
        if amount < upper:
            return label
    return PRICE_BANDS[-1][0]


_BAND_ORDER = {label: i for i, label in enumerate((NO_PRICE, *(label for label, _ in PRICE_BANDS)))}


def _group_value(r: Record, by: BreakdownKind) -> str:
    if by is BreakdownKind.SALESPERSON:
        return r.salesperson.strip() or "(No Sales)"
    if by is BreakdownKind.PRICE_BAND:
        return price_band(r.primary_amount)
    if by is BreakdownKind.MONTH:
        return r.date.strftime("%Y-%m") if r.date is not None else NO_DATE
    if by is BreakdownKind.STATUS:
        return r.status_raw or "(No Status)"
    return r.remark.strip() or "(No Remark)"


def customer_breakdown(
    records: Iterable[Record],
    customer: str,
    by: BreakdownKind = BreakdownKind.SALESPERSON,
) -> tuple[BreakdownRow, ...]:
    """Break down one customer's RFQs by salesperson, price band, month, status or remark.

    ``customer`` matches case-insensitively after trimming. Ordering:
    price bands in band order, months newest first with undated rows last,
    every other kind by total descending then value.
    """
    wanted = customer.strip().lower()
    groups: dict[str, list[float]] = {}
    for r in records:
        if not wanted or r.customer.strip().lower() != wanted:
            continue
        bucket = groups.setdefault(_group_value(r, by), [0, 0, 0.0])
        bucket[0] += 1
        if r.is_converted:
            bucket[1] += 1
        bucket[2] += r.primary_amount
    rows = [
        BreakdownRow(
            value=value,
            total=int(total),
            converted=int(converted),
            not_converted=int(total - converted),
            price_total=amount,
        )
        for value, (total, converted, amount) in groups.items()
    ]
    if by is BreakdownKind.PRICE_BAND:
        rows.sort(key=lambda b: _BAND_ORDER[b.value])
    elif by is BreakdownKind.MONTH:
        # "YYYY-MM" labels: newest first, undated last
        rows.sort(key=lambda b: (b.value != NO_DATE, b.value), reverse=True)
    else:
        rows.sort(key=lambda b: (-b.total, name_key(b.value)))
    return tuple(rows)

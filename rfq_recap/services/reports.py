from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import asdict, fields, is_dataclass
from datetime import date
from typing import Any

from ..models.aggregates import BreakdownKind, VolumeMode
from ..models.dataset import Dataset
from ..models.filter_spec import FilterSpec
from ..models.record import Record
from .aggregators import (
    amount_by_customer_salesperson,
    conversion_by_customer,
    count_by_customer,
    count_by_customer_salesperson,
    count_by_salesperson,
    customer_breakdown,
    top_customers_by_volume,
)
from .filters import filter_records
from .summary import analyze_dataset, build_insights, format_thousands

"""Named reports for the command line.

A report is a query over one dataset: filter the full record set, run one
aggregator (or the insights / analysis bundle) and render the result either
as aligned text lines or as JSON-ready dicts.
"""

__all__ = [
    "TABLE_REPORTS",
    "REPORT_NAMES",
    "run_report",
    "render_rows",
    "to_jsonable",
]

TABLE_REPORTS: dict[str, Callable[[tuple[Record, ...], VolumeMode], tuple[Any, ...]]] = {
    "pairs": lambda records, _mode: count_by_customer_salesperson(records),
    "customers": lambda records, _mode: count_by_customer(records),
    "salespeople": lambda records, _mode: count_by_salesperson(records),
    "conversion": lambda records, _mode: conversion_by_customer(records),
    "amount": lambda records, _mode: amount_by_customer_salesperson(records),
    "volume": lambda records, mode: top_customers_by_volume(records, mode),
}

REPORT_NAMES = ("insights", *TABLE_REPORTS, "breakdown", "analysis")


def run_report(
    dataset: Dataset,
    report: str,
    *,
    spec: FilterSpec | None = None,
    top_n: int = 10,
    mode: VolumeMode = VolumeMode.BOTH,
    sample_size: int = 100,
    customer: str | None = None,
    breakdown: BreakdownKind = BreakdownKind.SALESPERSON,
) -> Any:
    """Run a named report. Table reports return at most ``top_n`` rows.

    ``analysis`` describes the whole dataset and ignores ``spec``.
    ``breakdown`` splits one customer's RFQs by ``breakdown``; without
    ``customer`` the top customer by volume (under ``mode``) is used.
    """
    if report == "analysis":
        return analyze_dataset(dataset, sample_size=sample_size)
    records = filter_records(dataset.records, spec)
    if report == "insights":
        return build_insights(records, top_n=top_n)
    if report == "breakdown":
        if customer is None:
            top = top_customers_by_volume(records, mode)
            if not top:
                return ()
            customer = top[0].customer
        return customer_breakdown(records, customer, breakdown)[:top_n]
    try:
        aggregate = TABLE_REPORTS[report]
    except KeyError:
        raise ValueError(f"unknown report: {report}") from None
    return aggregate(records, mode)[:top_n]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        return f"{value:.2f}" if value < 1000 else format_thousands(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def render_rows(rows: Sequence[Any]) -> list[str]:
    """Render dataclass rows as left-aligned text columns with a rank column."""
    if not rows:
        return ["(no rows)"]
    names = [f.name for f in fields(rows[0])]
    table = [["#", *names]]
    for rank, row in enumerate(rows, start=1):
        table.append([str(rank), *(_format_value(getattr(row, n)) for n in names)])
    widths = [max(len(r[i]) for r in table) for i in range(len(table[0]))]
    return ["  ".join(cell.ljust(w) for cell, w in zip(r, widths)).rstrip() for r in table]


def to_jsonable(value: Any) -> Any:
    """Convert report results (dataclasses, tuples, dates, enums) to JSON-ready data."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (VolumeMode, BreakdownKind)):
        return value.value
    return value

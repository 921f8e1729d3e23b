from __future__ import annotations

from ..models.aggregates import NameCount
from ..models.column_roles import Role
from ..models.dataset import Dataset
from ..models.record import Record
from ..models.report import DatasetAnalysis, Insights
from .aggregators import (
    amount_by_customer_salesperson,
    compute_kpis,
    conversion_by_customer,
    count_by_customer,
    count_by_customer_salesperson,
    name_key,
)
from .column_resolver import detect_field_types

"""Summary services: SUMMARY line, headline insights, dataset analysis.

SUMMARY line format:
SUMMARY source={name} rows={raw} records={kept} dropped={dropped}
customers={n} salespeople={n} converted={n} conversion_rate={x.xx}
"""

__all__ = [
    "format_currency",
    "format_thousands",
    "render_summary_line",
    "build_insights",
    "analyze_dataset",
]


def format_thousands(value: float) -> str:
    """Indonesian digit grouping: 1234567 -> '1.234.567'."""
    return f"{value:,.0f}".replace(",", ".")


def format_currency(value: float) -> str:
    """Compact amount rendering used on KPI cards.

    >>> format_currency(1_500_000_000)
    '1.50B'
    >>> format_currency(2_500_000)
    '2.5M'
    >>> format_currency(950)
    '950'
    """
    if value >= 1_000_000_000:
        return f"{value / 1_000_000_000:.2f}B"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return format_thousands(value)


def render_summary_line(dataset: Dataset) -> str:
    """Render the SUMMARY line for one loaded dataset.

    The source name is quoted when it contains whitespace so the line stays
    splittable on spaces.
    """
    records = dataset.records
    kpis = compute_kpis(records)
    customers = len({r.customer for r in records if r.customer})
    salespeople = len({r.salesperson for r in records if r.salesperson})
    source = f'"{dataset.source}"' if any(ch.isspace() for ch in dataset.source) else dataset.source
    return (
        f"SUMMARY source={source} "
        f"rows={len(dataset.table.rows)} "
        f"records={len(records)} "
        f"dropped={dataset.dropped_rows} "
        f"customers={customers} "
        f"salespeople={salespeople} "
        f"converted={kpis.converted} "
        f"conversion_rate={kpis.conversion_rate:.2f}"
    )


def build_insights(records: tuple[Record, ...], top_n: int = 10) -> Insights:
    pairs = count_by_customer_salesperson(records)
    customers = count_by_customer(records)
    conversion = tuple(c for c in conversion_by_customer(records) if c.total > 0)
    amounts = amount_by_customer_salesperson(records)
    return Insights(
        top_pairs_by_count=pairs[:top_n],
        top_customers=customers[:top_n],
        top_conversion=conversion[:top_n],
        top_pairs_by_amount=amounts[:top_n],
        pair_combinations=len(pairs),
        customer_count=len(customers),
        total_amount=sum(a.total_amount for a in amounts),
    )


def analyze_dataset(dataset: Dataset, sample_size: int = 100) -> DatasetAnalysis:
    """Column inventory and distributions for a loaded dataset.

    Status breakdown counts every non-empty status value (count descending);
    conversion uses the same strict rule as the records themselves.
    """
    records = dataset.records
    headers = dataset.table.headers
    kpis = compute_kpis(records)

    statuses: dict[str, int] = {}
    for r in records:
        if r.status_raw:
            statuses[r.status_raw] = statuses.get(r.status_raw, 0) + 1
    breakdown = sorted(
        (NameCount(name=s, count=n) for s, n in statuses.items()),
        key=lambda nc: (-nc.count, name_key(nc.name)),
    )

    return DatasetAnalysis(
        source=dataset.source,
        total_rows=len(dataset.table.rows),
        total_records=len(records),
        field_names=headers,
        field_types=detect_field_types(dataset.table, sample_size=sample_size),
        role_headers={role.value: dataset.roles.header_of(role, headers) for role in Role},
        unique_customers=len({r.customer for r in records if r.customer}),
        unique_salespeople=len({r.salesperson for r in records if r.salesperson}),
        converted=kpis.converted,
        not_converted=kpis.not_converted,
        conversion_rate=kpis.conversion_rate,
        orders_with_value=sum(1 for r in records if r.secondary_amount > 0),
        status_breakdown=tuple(breakdown),
    )

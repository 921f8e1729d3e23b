from __future__ import annotations

from dataclasses import dataclass, field

from .aggregates import CustomerConversion, NameCount, PairAmount, PairCount

"""Report models: headline insights and raw-table diagnostics.

Both are built fresh per request from a record sequence or a Dataset and
are safe to serialize with ``dataclasses.asdict``.
"""

__all__ = [
    "Insights",
    "DatasetAnalysis",
]


@dataclass(frozen=True)
class Insights:
    """The four headline tables of the recap, each cut to ``top_n`` rows."""
    top_pairs_by_count: tuple[PairCount, ...]
    top_customers: tuple[NameCount, ...]
    top_conversion: tuple[CustomerConversion, ...]
    top_pairs_by_amount: tuple[PairAmount, ...]
    pair_combinations: int  # distinct (customer, salesperson) pairs before the cut
    customer_count: int
    total_amount: float  # sum over all pairs, not just the top rows


@dataclass(frozen=True)
class DatasetAnalysis:
    """Diagnostics over a loaded dataset (column inventory + distributions)."""
    source: str
    total_rows: int  # data rows in the raw table
    total_records: int  # rows kept after normalization
    field_names: tuple[str, ...]
    field_types: dict[str, str]
    role_headers: dict[str, str | None]  # role value -> header, None when not found
    unique_customers: int
    unique_salespeople: int
    converted: int
    not_converted: int
    conversion_rate: float
    orders_with_value: int  # records with a positive secondary (final total) amount
    status_breakdown: tuple[NameCount, ...] = field(default_factory=tuple)

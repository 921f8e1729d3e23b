from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Aggregate result rows returned by the aggregators.

All rows are frozen; aggregators return them in tuples already sorted.
"""

__all__ = [
    "PairCount",
    "NameCount",
    "CustomerConversion",
    "PairAmount",
    "CustomerVolume",
    "VolumeMode",
    "KpiSummary",
    "BreakdownKind",
    "BreakdownRow",
]


@dataclass(frozen=True)
class PairCount:
    customer: str
    salesperson: str
    count: int


@dataclass(frozen=True)
class NameCount:
    """Count keyed by a single name (customer, salesperson or dropdown option)."""
    name: str
    count: int

    @property
    def label(self) -> str:
        return f"{self.name} ({self.count} RFQ)" if self.name else ""


@dataclass(frozen=True)
class CustomerConversion:
    customer: str
    total: int
    converted: int
    not_converted: int
    conversion_rate: float  # percent, 0-100


@dataclass(frozen=True)
class PairAmount:
    customer: str
    salesperson: str
    total_amount: float
    count: int

    @property
    def average_amount(self) -> float:
        return self.total_amount / self.count if self.count else 0.0


class VolumeMode(Enum):
    """Display mode for the status-aware top-customer ranking."""
    BOTH = "both"
    CONVERTED = "converted"
    NOT_CONVERTED = "not_converted"


@dataclass(frozen=True)
class CustomerVolume:
    customer: str
    converted: int
    not_converted: int

    @property
    def total(self) -> int:
        return self.converted + self.not_converted

    def metric(self, mode: VolumeMode) -> int:
        if mode is VolumeMode.CONVERTED:
            return self.converted
        if mode is VolumeMode.NOT_CONVERTED:
            return self.not_converted
        return self.total


@dataclass(frozen=True)
class KpiSummary:
    total: int
    converted: int
    conversion_rate: float  # percent, 0-100

    @property
    def not_converted(self) -> int:
        return self.total - self.converted


class BreakdownKind(Enum):
    """Dimension used to break down the RFQs of a single customer."""
    SALESPERSON = "salesperson"
    PRICE_BAND = "price_band"
    MONTH = "month"
    STATUS = "status"
    REMARK = "remark"


@dataclass(frozen=True)
class BreakdownRow:
    """One group of a customer breakdown.

    ``price_total`` sums the primary (HARGA NEW) amounts of the group.
    """
    value: str
    total: int
    converted: int
    not_converted: int
    price_total: float

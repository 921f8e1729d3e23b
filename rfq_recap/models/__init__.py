"""Domain models for the RFQ recap engine.

Raw input (RawTable), column roles, canonical records, filter criteria,
aggregate result rows and the loaded Dataset.
"""

from .aggregates import (
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
from .column_roles import ColumnRoleMap, KeywordRule, Role
from .dataset import Dataset
from .filter_spec import FilterSpec
from .raw_table import Cell, RawTable
from .record import NOT_CONVERTED_MARKER, Record, is_converted_status

__all__ = [
    # Input models
    "Cell",
    "RawTable",
    "ColumnRoleMap",
    "KeywordRule",
    "Role",
    # Canonical dataset
    "Record",
    "Dataset",
    "NOT_CONVERTED_MARKER",
    "is_converted_status",
    # Queries
    "FilterSpec",
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

"""RFQ recap engine.

Parses RFQ recap files (CSV text or spreadsheet grids), infers column roles
from typo-prone headers, normalizes rows into canonical records and answers
grouping queries: counts, conversion rates and amounts per customer and
salesperson.
"""

from .models import (
    BreakdownKind,
    BreakdownRow,
    ColumnRoleMap,
    CustomerConversion,
    CustomerVolume,
    Dataset,
    FilterSpec,
    KpiSummary,
    NameCount,
    PairAmount,
    PairCount,
    RawTable,
    Record,
    Role,
    VolumeMode,
)
from .services.aggregators import (
    amount_by_customer_salesperson,
    compute_kpis,
    conversion_by_customer,
    count_by_customer,
    count_by_customer_salesperson,
    count_by_salesperson,
    customer_breakdown,
    date_bounds,
    option_counts,
    top_customers_by_volume,
)
from .services.column_resolver import ROLE_RULES, detect_field_types, resolve_columns
from .services.filters import build_predicate, filter_records, normalize_filters
from .services.normalizer import normalize, parse_date, parse_number
from .services.orchestrator import build_dataset, load_dataset, load_grid, load_text
from .services.summary import analyze_dataset, build_insights, format_currency, render_summary_line
from .tabular.parser import parse_grid, parse_line, parse_text
from .tabular.reader import DatasetLoadError, EmptyDatasetError, UnreadableInputError, read_table

__version__ = "0.1.0"

__all__ = [
    # parsing
    "parse_line",
    "parse_text",
    "parse_grid",
    "read_table",
    # column roles
    "ROLE_RULES",
    "resolve_columns",
    "detect_field_types",
    # normalization
    "normalize",
    "parse_number",
    "parse_date",
    # loading
    "build_dataset",
    "load_dataset",
    "load_text",
    "load_grid",
    "DatasetLoadError",
    "UnreadableInputError",
    "EmptyDatasetError",
    # filtering
    "build_predicate",
    "filter_records",
    "normalize_filters",
    # aggregation
    "count_by_customer_salesperson",
    "count_by_customer",
    "count_by_salesperson",
    "conversion_by_customer",
    "amount_by_customer_salesperson",
    "top_customers_by_volume",
    "option_counts",
    "compute_kpis",
    "customer_breakdown",
    "date_bounds",
    # summaries
    "build_insights",
    "analyze_dataset",
    "format_currency",
    "render_summary_line",
    # models
    "RawTable",
    "ColumnRoleMap",
    "Role",
    "Record",
    "Dataset",
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

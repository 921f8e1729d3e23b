from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import ConfigError, RecapConfig, load_config
from ..logging.init import log_summary, setup_logging
from ..models.aggregates import BreakdownKind, VolumeMode
from ..models.dataset import Dataset
from ..models.report import DatasetAnalysis, Insights
from ..services.column_resolver import resolve_columns
from ..services.filters import normalize_filters
from ..services.orchestrator import load_all
from ..services.reports import REPORT_NAMES, render_rows, run_report, to_jsonable
from ..services.summary import format_currency, render_summary_line
from ..tabular.reader import DatasetLoadError, read_table

"""CLI entrypoint.

Flow:
- load .env (may point RFQ_RECAP_CONFIG at another config file) and the config
- load every given file (or the configured default file), one load event each
- run the selected report per dataset and print it, then a SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{value}'") from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rfq-recap", description="RFQ recap: counts, conversion and amounts")
    p.add_argument("files", nargs="*", type=Path, help="CSV / spreadsheet files (default: config source_file)")
    p.add_argument("--report", choices=REPORT_NAMES, default="insights", help="Report to print")
    p.add_argument(
        "--volume-mode",
        choices=[m.value for m in VolumeMode],
        default=VolumeMode.BOTH.value,
        help="Ranking metric for the volume report",
    )
    p.add_argument(
        "--breakdown-by",
        choices=[k.value for k in BreakdownKind],
        default=BreakdownKind.SALESPERSON.value,
        help="Grouping for the breakdown report",
    )
    p.add_argument("--breakdown-customer", help="Customer for the breakdown report (default: top customer by volume)")
    p.add_argument("--customer", help="Customer name contains (case-insensitive)")
    p.add_argument("--sales", help="Salesperson name equals (case-insensitive)")
    p.add_argument("--status", help="Status contains (case-insensitive)")
    p.add_argument("--date-from", type=_iso_date, help="Earliest RFQ date (inclusive)")
    p.add_argument("--date-to", type=_iso_date, help="Latest RFQ date (inclusive)")
    p.add_argument("--exclude-converted", action="store_true", help="Drop converted RFQs")
    p.add_argument("--exclude-not-converted", action="store_true", help="Drop not-converted RFQs")
    p.add_argument("--top", type=int, default=None, help="Rows per table (default: config top_n)")
    p.add_argument("--json", action="store_true", help="Print results as JSON")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, column roles & first rows then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _inspect_data(paths: list[Path], cfg: RecapConfig) -> int:
    failed = 0
    for path in paths:
        print(f"FILE: {path.name}")
        try:
            table = read_table(path, encoding=cfg.encoding)
        except DatasetLoadError as e:
            print(f"  read_error: {e}")
            failed += 1
            continue
        roles = resolve_columns(table.headers)
        print(f"  cols={list(table.headers)} rows={len(table.rows)}")
        for role, idx in roles.indices.items():
            print(f"  role {role.value}: {table.headers[idx]} (priority {roles.priorities[role]})")
        for role in roles.unresolved:
            print(f"  role {role.value}: NOT FOUND")
        for row in table.rows[: cfg.preview_rows]:
            print("    ", [c.isoformat() if hasattr(c, "isoformat") else c for c in row])
    return EXIT_PARTIAL_FAILURE if failed else EXIT_SUCCESS_ALL


def _print_insights(insights: Insights) -> None:
    print(f"RFQ per customer per sales (combinations: {insights.pair_combinations})")
    for line in render_rows(insights.top_pairs_by_count):
        print(f"  {line}")
    print(f"Customers with most RFQs (customers: {insights.customer_count})")
    for line in render_rows(insights.top_customers):
        print(f"  {line}")
    print("Conversion per customer")
    for line in render_rows(insights.top_conversion):
        print(f"  {line}")
    print(f"Amount per customer per sales (total: Rp {format_currency(insights.total_amount)})")
    for line in render_rows(insights.top_pairs_by_amount):
        print(f"  {line}")


def _print_analysis(analysis: DatasetAnalysis) -> None:
    print(f"Rows: {analysis.total_rows}  Records: {analysis.total_records}  Fields: {len(analysis.field_names)}")
    for idx, name in enumerate(analysis.field_names, start=1):
        print(f"  {idx:2d}. {name:<25} ({analysis.field_types.get(name, 'empty')})")
    for role, header in analysis.role_headers.items():
        print(f"  {role:<16}: {header or 'NOT FOUND'}")
    print(f"Unique customers: {analysis.unique_customers}  Unique sales: {analysis.unique_salespeople}")
    print(
        f"Converted: {analysis.converted}  Not converted: {analysis.not_converted}  "
        f"Rate: {analysis.conversion_rate:.2f}%  Orders with value: {analysis.orders_with_value}"
    )
    for line in render_rows(analysis.status_breakdown[:5]):
        print(f"  {line}")


def _print_result(dataset: Dataset, report: str, result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps({"source": dataset.source, "report": report, "result": to_jsonable(result)}, ensure_ascii=False))
        return
    print(f"== {dataset.source} [{report}]")
    if isinstance(result, Insights):
        _print_insights(result)
    elif isinstance(result, DatasetAnalysis):
        _print_analysis(result)
    else:
        for line in render_rows(result):
            print(line)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    try:
        cfg = load_config()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    paths: list[Path] = list(args.files) or [Path(cfg.source_file)]
    if args.inspect_data:
        return _inspect_data(paths, cfg)

    top_n = args.top if args.top is not None else cfg.top_n
    if top_n < 1:
        logger.error(f"--top must be >= 1, got {top_n}")
        return EXIT_FATAL

    if args.exclude_converted and args.exclude_not_converted:
        logger.warning("both status groups excluded -> keeping converted RFQs")
    spec = normalize_filters(
        {
            "customer": args.customer,
            "sales": args.sales,
            "status": args.status,
            "date_from": args.date_from,
            "date_to": args.date_to,
            "include_converted": not args.exclude_converted,
            "include_not_converted": not args.exclude_not_converted,
        }
    )

    logger.info(f"Loading {len(paths)} file(s)")
    result = load_all(paths, encoding=cfg.encoding)

    for dataset in result.datasets:
        report = run_report(
            dataset,
            args.report,
            spec=spec,
            top_n=top_n,
            mode=VolumeMode(args.volume_mode),
            sample_size=cfg.type_sample_size,
            customer=args.breakdown_customer,
            breakdown=BreakdownKind(args.breakdown_by),
        )
        _print_result(dataset, args.report, report, args.json)
        # log_summary adds the "SUMMARY " label itself
        log_summary(render_summary_line(dataset)[len("SUMMARY "):])

    if result.errors_path:
        logger.info(f"error log written: {result.errors_path}")

    if result.failed_files == 0:
        return EXIT_SUCCESS_ALL
    if result.success_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.column_roles import Role
from ..models.dataset import Dataset
from ..models.load_result import FileOutcome, FileStatus, LoadResult
from ..models.raw_table import RawTable
from ..tabular.parser import parse_grid, parse_text
from ..tabular.reader import DatasetLoadError, EmptyDatasetError, read_table
from .column_resolver import resolve_columns
from .normalizer import normalize
from .progress import ProgressTracker

"""Load orchestration: Parser -> Column Resolver -> Normalizer -> Dataset.

A load event always builds a fresh Dataset; nothing from an earlier load is
reused. Multi-file runs load each file independently and collect outcomes.
"""

__all__ = [
    "build_dataset",
    "load_text",
    "load_grid",
    "load_dataset",
    "load_all",
]

logger = logging.getLogger(__name__)

# Roles without which most reports come out empty
_KEY_ROLES = (Role.CUSTOMER, Role.SALESPERSON, Role.STATUS)


def build_dataset(table: RawTable, source: str) -> Dataset:
    """Resolve columns and normalize rows of an already parsed table.

    Raises:
        EmptyDatasetError: no header row, or no record survives normalization
    """
    if table.is_empty:
        raise EmptyDatasetError(f"{source}: no header row")
    roles = resolve_columns(table.headers)
    for role in _KEY_ROLES:
        if not roles.is_resolved(role):
            logger.warning(f"{source}: no column found for role '{role.value}'")
    records = normalize(table, roles)
    if not records:
        raise EmptyDatasetError(f"{source}: no records with a customer or salesperson")
    logger.debug(
        f"{source}: headers={len(table.headers)} rows={len(table.rows)} records={len(records)}"
    )
    return Dataset(
        source=source,
        table=table,
        roles=roles,
        records=records,
        loaded_at=datetime.now(UTC),
    )


def load_text(text: str, source: str = "<text>") -> Dataset:
    return build_dataset(parse_text(text), source)


def load_grid(grid: Iterable[Sequence[Any]], source: str = "<grid>") -> Dataset:
    return build_dataset(parse_grid(grid), source)


def load_dataset(path: Path, *, encoding: str = "utf-8-sig") -> Dataset:
    """Load one CSV / spreadsheet file.

    Raises:
        UnreadableInputError: the file cannot be read
        EmptyDatasetError: the file has no header or no usable records
    """
    table = read_table(path, encoding=encoding)
    return build_dataset(table, path.name)


def load_all(
    paths: Sequence[Path],
    *,
    encoding: str = "utf-8-sig",
    error_log: ErrorLogBuffer | None = None,
) -> LoadResult:
    """Load several files, one load event each.

    Fatal load errors are logged, recorded in ``error_log`` (flushed at the
    end) and reported as FAILED outcomes; the remaining files still load.
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    datasets: list[Dataset] = []
    outcomes: list[FileOutcome] = []

    with ProgressTracker(len(paths), description="Loading files") as progress:
        for path in paths:
            progress.start_file(path)
            try:
                dataset = load_dataset(path, encoding=encoding)
            except DatasetLoadError as e:
                logger.error(f"{path.name}: {e}")
                error_log.record_failure(path.name, e.error_type, str(e))
                outcomes.append(
                    FileOutcome(
                        file_name=path.name,
                        status=FileStatus.FAILED,
                        error_type=e.error_type,
                        error=str(e),
                    )
                )
                progress.finish_file(success=False)
                continue
            datasets.append(dataset)
            outcomes.append(
                FileOutcome(file_name=path.name, status=FileStatus.SUCCESS, records=len(dataset))
            )
            progress.set_postfix(records=len(dataset))
            progress.finish_file(success=True)

    errors_path = str(error_log.flush()) if len(error_log) else None
    end_time = datetime.now(UTC)
    return LoadResult(
        datasets=tuple(datasets),
        outcomes=tuple(outcomes),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        errors_path=errors_path,
    )

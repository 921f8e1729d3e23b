from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .dataset import Dataset

"""Load result models for multi-file runs.

Each input file is its own load event; a failed file does not stop the
remaining ones. LoadResult aggregates the per-file outcomes.
"""

__all__ = [
    "FileStatus",
    "FileOutcome",
    "LoadResult",
]


class FileStatus(Enum):
    """Outcome of loading one input file.

    - SUCCESS: dataset built with at least one record
    - FAILED: UnreadableInputError / EmptyDatasetError was raised
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileOutcome:
    file_name: str
    status: FileStatus
    records: int = 0
    error_type: str | None = None  # UNREADABLE_INPUT / EMPTY_DATASET
    error: str | None = None


@dataclass(frozen=True)
class LoadResult:
    datasets: tuple[Dataset, ...]
    outcomes: tuple[FileOutcome, ...]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    errors_path: str | None = None  # error log file, when something was written

    @property
    def success_files(self) -> int:
        return sum(1 for o in self.outcomes if o.status is FileStatus.SUCCESS)

    @property
    def failed_files(self) -> int:
        return sum(1 for o in self.outcomes if o.status is FileStatus.FAILED)

    @property
    def total_records(self) -> int:
        return sum(o.records for o in self.outcomes)

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.raw_table import RawTable
from .parser import parse_grid, parse_text

"""File reader: CSV / spreadsheet file -> RawTable.

CSV and plain text files go through the text tokenizer. Spreadsheets are read
with pandas (first sheet, no header inference) and handed to the grid parser,
so header detection and blank-row rules are identical for both. Cell text is
never turned into NA by pandas: "NA" or "null" in a sheet stays text, as it
does in a CSV. Legacy .xls workbooks are not supported.
"""

__all__ = [
    "DatasetLoadError",
    "UnreadableInputError",
    "EmptyDatasetError",
    "TEXT_SUFFIXES",
    "SPREADSHEET_SUFFIXES",
    "read_first_sheet",
    "frame_to_grid",
    "read_table",
]

TEXT_SUFFIXES = {".csv", ".txt"}
SPREADSHEET_SUFFIXES = {".xlsx", ".xlsm"}


class DatasetLoadError(Exception):
    """Base class for fatal load failures shown to the user as a message."""

    error_type = "LOAD_ERROR"


class UnreadableInputError(DatasetLoadError):
    """Raised when the input file is missing, undecodable or not a supported format."""

    error_type = "UNREADABLE_INPUT"


class EmptyDatasetError(DatasetLoadError):
    """Raised when the input has no header row or yields no usable records."""

    error_type = "EMPTY_DATASET"


def read_first_sheet(path: Path) -> pd.DataFrame:
    """Read the first sheet of a workbook as a raw DataFrame.

    Parsed with ``header=None`` so the grid parser locates the header row.
    Only the first sheet is parsed; later sheets are never touched.
    """
    with pd.ExcelFile(path) as xls:
        if not xls.sheet_names:
            raise EmptyDatasetError(f"spreadsheet {path.name} has no sheets")
        return xls.parse(xls.sheet_names[0], header=None, keep_default_na=False, na_values=[])


def frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    """Convert a raw sheet DataFrame to plain Python rows (NaN/NaT -> "")."""
    boxed = df.astype(object)
    boxed = boxed.where(pd.notna(boxed), "")
    grid: list[list[Any]] = []
    for row in boxed.itertuples(index=False, name=None):
        grid.append([v.to_pydatetime() if isinstance(v, pd.Timestamp) else v for v in row])
    return grid


def _read_text_table(path: Path, encoding: str) -> RawTable:
    try:
        text = path.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        raise UnreadableInputError(f"cannot decode {path.name} as {encoding}: {e}") from e
    except OSError as e:
        raise UnreadableInputError(f"cannot read {path.name}: {e}") from e
    return parse_text(text)


def _read_spreadsheet_table(path: Path) -> RawTable:
    try:
        frame = read_first_sheet(path)
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
        raise UnreadableInputError(f"cannot read spreadsheet {path.name}: {e}") from e
    return parse_grid(frame_to_grid(frame))


def read_table(path: Path, *, encoding: str = "utf-8-sig") -> RawTable:
    """Read a CSV or spreadsheet file into a RawTable.

    Raises:
        UnreadableInputError: file missing, unreadable or of unsupported type
        EmptyDatasetError: no non-blank header row found
    """
    if not path.exists():
        raise UnreadableInputError(f"file not found: {path}")
    if not path.is_file():
        raise UnreadableInputError(f"not a file: {path}")
    suffix = path.suffix.lower()
    if suffix in TEXT_SUFFIXES:
        table = _read_text_table(path, encoding)
    elif suffix in SPREADSHEET_SUFFIXES:
        table = _read_spreadsheet_table(path)
    else:
        raise UnreadableInputError(f"unsupported file type '{path.suffix}': {path.name}")
    if table.is_empty:
        raise EmptyDatasetError(f"{path.name} contains no header row")
    return table

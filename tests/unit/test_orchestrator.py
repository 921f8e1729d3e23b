from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from rfq_recap.logging.error_log import ErrorLogBuffer
from rfq_recap.models.column_roles import Role
from rfq_recap.models.load_result import FileStatus
from rfq_recap.models.raw_table import RawTable
from rfq_recap.services.orchestrator import build_dataset, load_all, load_dataset, load_grid, load_text
from rfq_recap.tabular.reader import EmptyDatasetError, UnreadableInputError


def test_load_dataset_from_csv(sample_csv: Path):
    dataset = load_dataset(sample_csv)
    assert dataset.source == "recap.csv"
    assert len(dataset) == 5
    assert dataset.dropped_rows == 1
    assert dataset.roles.is_resolved(Role.AMOUNT)
    assert dataset.loaded_at.tzinfo is not None


def test_each_load_builds_a_fresh_dataset(sample_csv_text: str):
    first = load_text(sample_csv_text, "a.csv")
    second = load_text("CUSTOMER,SALES\nZeta,Yan\n", "b.csv")
    assert [r.customer for r in second.records] == ["Zeta"]
    assert len(first) == 5


def test_load_grid():
    dataset = load_grid([[None, None], ["CUSTOMER", "SALES"], ["Acme", "Bob"]], source="sheet")
    assert dataset.source == "sheet"
    assert dataset.table.headers == ("CUSTOMER", "SALES")
    assert len(dataset) == 1


def test_build_dataset_without_header():
    with pytest.raises(EmptyDatasetError):
        build_dataset(RawTable(headers=(), rows=()), "empty.csv")


def test_build_dataset_without_records():
    with pytest.raises(EmptyDatasetError, match="no records"):
        load_text("CUSTOMER,SALES,HARGA\n,,100\n", "blank.csv")


def test_missing_key_roles_are_warned(clean_logging, caplog):
    caplog.set_level(logging.WARNING, logger="rfq_recap")
    load_text("CUSTOMER\nAcme\n", "thin.csv")
    messages = [r.getMessage() for r in caplog.records]
    assert "thin.csv: no column found for role 'salesperson'" in messages
    assert "thin.csv: no column found for role 'status'" in messages


def test_load_dataset_missing_file(temp_workdir: Path):
    with pytest.raises(UnreadableInputError):
        load_dataset(temp_workdir / "nope.csv")


def test_load_all_partial_failure(sample_csv: Path, temp_workdir: Path):
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("\n\n", encoding="utf-8")
    missing = temp_workdir / "data" / "missing.csv"
    logs_dir = temp_workdir / "logs"

    result = load_all([sample_csv, empty, missing], error_log=ErrorLogBuffer(logs_dir=logs_dir))

    assert [o.status for o in result.outcomes] == [FileStatus.SUCCESS, FileStatus.FAILED, FileStatus.FAILED]
    assert [o.error_type for o in result.outcomes] == [None, "EMPTY_DATASET", "UNREADABLE_INPUT"]
    assert result.success_files == 1
    assert result.failed_files == 2
    assert result.total_records == 5
    assert len(result.datasets) == 1
    assert result.elapsed_seconds >= 0

    assert result.errors_path is not None
    lines = Path(result.errors_path).read_text(encoding="utf-8").splitlines()
    assert [json.loads(ln)["file"] for ln in lines] == ["empty.csv", "missing.csv"]
    assert all(json.loads(ln)["row"] == -1 for ln in lines)


def test_load_all_success_writes_no_error_log(sample_csv: Path, temp_workdir: Path):
    result = load_all([sample_csv])
    assert result.failed_files == 0
    assert result.errors_path is None
    assert not (temp_workdir / "logs").exists()

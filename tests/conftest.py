# Shared pytest fixtures
from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from rfq_recap.logging.init import reset_logging
from rfq_recap.models.record import Record

SAMPLE_CSV = """NO. PENAWARAN,DATE,MARKERTING,CUSTOMER NAME,HARGA,HARGA (NEW),KETERANGAN,QUANTITY,TOTAL
RFQ-001,15-Mar-23,Bob,"Acme, Inc.","1,000,000","1,200,000",JADI OC,2,"2,400,000"
RFQ-002,16-Mar-23,Bob,"Acme, Inc.","500,000","500,000",TIDAK JADI OC,1,0

RFQ-003,2023-04-01,Ani,PT Maju,"750,000","800,000",JADI OC,1,
RFQ-004,2023-04-02,Ani,"Acme, Inc.",,"300,000",,1,
,,,,,,,,
RFQ-005,2023-05-10,,,100,,JADI OC,,
RFQ-006,10-Mei-23,Cici,PT Maju,"200,000",,TIDAK JADI OC,1,
"""


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RFQ_RECAP_CONFIG", raising=False)
    return tmp_path


@pytest.fixture()
def sample_csv_text() -> str:
    return SAMPLE_CSV


@pytest.fixture()
def sample_csv(temp_workdir: Path) -> Path:
    p = temp_workdir / "data" / "recap.csv"
    p.write_text(SAMPLE_CSV, encoding="utf-8")
    return p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_file: data/recap.csv
top_n: 5
type_sample_size: 50
preview_rows: 3
encoding: utf-8
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "recap.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


def make_record(
    customer: str = "Acme",
    salesperson: str = "Bob",
    status: str = "JADI OC",
    *,
    primary: float = 0.0,
    secondary: float = 0.0,
    day: date | None = None,
    rfq_id: str = "",
    remark: str = "",
) -> Record:
    return Record(
        rfq_id=rfq_id,
        date=day,
        customer=customer,
        salesperson=salesperson,
        primary_amount=primary,
        secondary_amount=secondary,
        status_raw=status,
        remark=remark,
    )


@pytest.fixture()
def record_factory():
    return make_record

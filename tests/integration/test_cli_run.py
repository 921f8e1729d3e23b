from __future__ import annotations

import json
from pathlib import Path

import pandas as pd  # type: ignore
import pytest

from rfq_recap.cli.__main__ import main

"""End-to-end CLI runs: load files, print a report, log SUMMARY, pick the exit code.

0 = every file loaded, 2 = some files failed, 1 = nothing loaded or fatal setup error.
"""


def _make_excel(tmp_path: Path, name: str, rows: list[list[object]]) -> Path:
    path = tmp_path / name
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="RECAP", header=False, index=False)
    return path


def _summary_lines(out: str) -> list[str]:
    return [ln for ln in out.splitlines() if ln.startswith("SUMMARY ")]


def test_run_default_insights(sample_csv: Path, clean_logging, capsys):
    code = main([str(sample_csv)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Loading 1 file(s)" in out
    assert "== recap.csv [insights]" in out
    assert "RFQ per customer per sales (combinations: 4)" in out
    assert "Amount per customer per sales (total: Rp 4.0M)" in out
    assert _summary_lines(out) == [
        "SUMMARY source=recap.csv rows=6 records=5 dropped=1 customers=2 salespeople=3 "
        "converted=2 conversion_rate=40.00"
    ]


def test_run_uses_configured_source_file(sample_csv: Path, write_config: Path, clean_logging, capsys):
    code = main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "== recap.csv [insights]" in out


def test_run_table_report_with_filters(sample_csv: Path, clean_logging, capsys):
    code = main([str(sample_csv), "--report", "customers", "--sales", "ani", "--top", "1"])
    out = capsys.readouterr().out
    assert code == 0
    lines = out.splitlines()
    header_idx = lines.index("== recap.csv [customers]")
    assert lines[header_idx + 1].split() == ["#", "name", "count"]
    assert lines[header_idx + 2].split() == ["1", "Acme,", "Inc.", "1"]
    assert lines[header_idx + 3].startswith("SUMMARY ")


def test_run_volume_report_json(sample_csv: Path, clean_logging, capsys):
    code = main([str(sample_csv), "--report", "volume", "--volume-mode", "not_converted", "--json"])
    out = capsys.readouterr().out
    assert code == 0
    payload = json.loads(next(ln for ln in out.splitlines() if ln.startswith("{")))
    assert payload["source"] == "recap.csv"
    assert payload["report"] == "volume"
    assert payload["result"] == [
        {"customer": "Acme, Inc.", "converted": 1, "not_converted": 2},
        {"customer": "PT Maju", "converted": 1, "not_converted": 1},
    ]


def test_run_status_gates_and_dates(sample_csv: Path, clean_logging, capsys):
    code = main(
        [
            str(sample_csv),
            "--report", "pairs", "--json",
            "--exclude-converted",
            "--date-from", "2023-03-16",
            "--date-to", "2023-04-30",
        ]
    )
    out = capsys.readouterr().out
    assert code == 0
    payload = json.loads(next(ln for ln in out.splitlines() if ln.startswith("{")))
    assert payload["result"] == [
        {"customer": "Acme, Inc.", "salesperson": "Ani", "count": 1},
        {"customer": "Acme, Inc.", "salesperson": "Bob", "count": 1},
    ]


def test_run_both_gates_excluded_keeps_converted(sample_csv: Path, clean_logging, capsys):
    code = main([str(sample_csv), "--report", "customers", "--json", "--exclude-converted", "--exclude-not-converted"])
    out = capsys.readouterr().out
    assert code == 0
    assert "WARN both status groups excluded -> keeping converted RFQs" in out
    payload = json.loads(next(ln for ln in out.splitlines() if ln.startswith("{")))
    assert payload["result"] == [{"name": "Acme, Inc.", "count": 1}, {"name": "PT Maju", "count": 1}]


def test_run_analysis_report(sample_csv: Path, clean_logging, capsys):
    code = main([str(sample_csv), "--report", "analysis"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Rows: 6  Records: 5  Fields: 9" in out
    assert "Rate: 40.00%  Orders with value: 1" in out


def test_run_excel_with_serial_dates(temp_workdir: Path, clean_logging, capsys):
    xlsx = _make_excel(
        temp_workdir / "data",
        "recap.xlsx",
        [
            ["NO. PENAWARAN", "DATE", "MARKERTING", "CUSTOMER NAME", "HARGA (NEW)", "KETERANGAN"],
            ["RFQ-001", 45000, "Bob", "Acme", 1500000, "JADI OC"],
            ["RFQ-002", 45001, "Bob", "Acme", 500000, "TIDAK JADI OC"],
        ],
    )
    code = main([str(xlsx), "--report", "pairs", "--date-from", "2023-03-16", "--json"])
    out = capsys.readouterr().out
    assert code == 0
    payload = json.loads(next(ln for ln in out.splitlines() if ln.startswith("{")))
    assert payload["result"] == [{"customer": "Acme", "salesperson": "Bob", "count": 1}]
    assert "SUMMARY source=recap.xlsx rows=2 records=2 dropped=0" in out


def test_run_partial_failure(sample_csv: Path, temp_workdir: Path, clean_logging, capsys):
    missing = temp_workdir / "data" / "missing.csv"
    code = main([str(sample_csv), str(missing)])
    out = capsys.readouterr().out
    assert code == 2
    assert len(_summary_lines(out)) == 1
    assert "ERROR missing.csv:" in out
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["error_type"] == "UNREADABLE_INPUT"


def test_run_all_failed(temp_workdir: Path, clean_logging, capsys):
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("CUSTOMER,SALES\n", encoding="utf-8")
    code = main([str(empty)])
    out = capsys.readouterr().out
    assert code == 1
    assert _summary_lines(out) == []


def test_run_invalid_config(temp_workdir: Path, clean_logging, capsys):
    (temp_workdir / "config" / "recap.yml").write_text("top_n: 0\n", encoding="utf-8")
    code = main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config validation failed" in out


def test_run_top_must_be_positive(sample_csv: Path, clean_logging, capsys):
    assert main([str(sample_csv), "--top", "0"]) == 1
    assert "ERROR --top must be >= 1, got 0" in capsys.readouterr().out


def test_run_rejects_bad_date(sample_csv: Path, clean_logging):
    with pytest.raises(SystemExit) as exc:
        main([str(sample_csv), "--date-from", "15/03/2023"])
    assert exc.value.code == 2


def test_env_file_selects_config(sample_csv: Path, temp_workdir: Path, clean_logging, capsys, monkeypatch):
    # register the variable so monkeypatch removes whatever .env sets
    monkeypatch.setenv("RFQ_RECAP_CONFIG", "unset")
    monkeypatch.delenv("RFQ_RECAP_CONFIG")
    (temp_workdir / "alt.yml").write_text("source_file: data/recap.csv\ntop_n: 1\n", encoding="utf-8")
    (temp_workdir / ".env").write_text("RFQ_RECAP_CONFIG=alt.yml\n", encoding="utf-8")
    code = main(["--report", "salespeople", "--json"])
    out = capsys.readouterr().out
    assert code == 0
    payload = json.loads(next(ln for ln in out.splitlines() if ln.startswith("{")))
    assert payload["result"] == [{"name": "Ani", "count": 2}]


def test_inspect_data(sample_csv: Path, clean_logging, capsys):
    code = main([str(sample_csv), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: recap.csv" in out
    assert "  role amount: HARGA (NEW) (priority 1)" in out
    assert "  role customer: CUSTOMER NAME (priority 1)" in out
    assert "rows=6" in out
    assert _summary_lines(out) == []


def test_inspect_data_reports_missing_roles_and_unreadable(temp_workdir: Path, clean_logging, capsys):
    thin = temp_workdir / "data" / "thin.csv"
    thin.write_text("CUSTOMER\nAcme\n", encoding="utf-8")
    code = main([str(thin), str(temp_workdir / "data" / "nope.csv"), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 2
    assert "  role salesperson: NOT FOUND" in out
    assert "FILE: nope.csv" in out
    assert "read_error:" in out


def test_run_breakdown_report(sample_csv: Path, clean_logging, capsys):
    code = main(
        [str(sample_csv), "--report", "breakdown", "--breakdown-by", "status", "--breakdown-customer", "Acme, Inc.", "--json"]
    )
    out = capsys.readouterr().out
    assert code == 0
    payload = json.loads(next(ln for ln in out.splitlines() if ln.startswith("{")))
    assert payload["report"] == "breakdown"
    assert [(r["value"], r["total"]) for r in payload["result"]] == [
        ("(No Status)", 1),
        ("JADI OC", 1),
        ("TIDAK JADI OC", 1),
    ]

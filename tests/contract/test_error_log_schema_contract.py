from __future__ import annotations

import json
import re
from pathlib import Path

from rfq_recap.logging.error_log import ErrorLogBuffer
from rfq_recap.services.orchestrator import load_all

"""Error log contract: one JSON object per line with exactly
timestamp (ISO8601 UTC, Z suffix), file, row (-1 = whole file), error_type, message.
"""

REQUIRED_KEYS = {"timestamp", "file", "row", "error_type", "message"}
ERROR_TYPES = {"UNREADABLE_INPUT", "EMPTY_DATASET"}
TS_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def test_error_log_lines_follow_schema(temp_workdir: Path):
    bad = temp_workdir / "data" / "bad.xlsx"
    bad.write_bytes(b"not a zip archive")
    blank = temp_workdir / "data" / "blank.csv"
    blank.write_text("CUSTOMER,SALES\n,,\n", encoding="utf-8")

    result = load_all([bad, blank], error_log=ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    assert result.errors_path is not None

    lines = Path(result.errors_path).read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    for line in lines:
        obj = json.loads(line)
        assert set(obj) == REQUIRED_KEYS
        assert TS_PATTERN.match(obj["timestamp"])
        assert obj["row"] == -1
        assert obj["error_type"] in ERROR_TYPES
        assert obj["message"]
    assert [json.loads(ln)["error_type"] for ln in lines] == ["UNREADABLE_INPUT", "EMPTY_DATASET"]

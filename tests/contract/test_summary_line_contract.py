from __future__ import annotations

import re

from rfq_recap.services.orchestrator import load_text
from rfq_recap.services.summary import render_summary_line

"""SUMMARY line format contract.

SUMMARY source=<name> rows=<n> records=<n> dropped=<n> customers=<n>
salespeople=<n> converted=<n> conversion_rate=<x.xx>
"""

SUMMARY_PATTERN = re.compile(
    r'^SUMMARY\s+source=(\S+|"[^"]+")\s+rows=([0-9]+)\s+records=([0-9]+)\s+dropped=([0-9]+)\s+'
    r"customers=([0-9]+)\s+salespeople=([0-9]+)\s+converted=([0-9]+)\s+"
    r"conversion_rate=([0-9]+\.[0-9]{2})$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY source=recap.csv rows=6 records=5 dropped=1 customers=2 "
        "salespeople=3 converted=2 conversion_rate=40.00"
    )
    assert SUMMARY_PATTERN.match(line)


def test_rendered_line_matches_contract(sample_csv_text: str):
    m = SUMMARY_PATTERN.match(render_summary_line(load_text(sample_csv_text, "RECAP PENAWARAN 2025.csv")))
    assert m
    source, rows, records, dropped = m.group(1), int(m.group(2)), int(m.group(3)), int(m.group(4))
    assert source == '"RECAP PENAWARAN 2025.csv"'
    assert rows == records + dropped
    assert int(m.group(7)) <= records
    assert 0.0 <= float(m.group(8)) <= 100.0


def test_full_conversion_rate_renders_two_decimals():
    line = render_summary_line(load_text("CUSTOMER,SALES,STATUS\nA,B,JADI OC\n", "one.csv"))
    assert line.endswith("converted=1 conversion_rate=100.00")
    assert SUMMARY_PATTERN.match(line)

"""
Tests for CSV export.
"""

import csv

import pytest

from defender_plan_auditor.core.exceptions import ExportError
from defender_plan_auditor.core.models import ResourceScope, ScanResultRecord
from defender_plan_auditor.reporting.csv_export import CSV_HEADERS, export_to_csv


def make_record(subscription_id, name, plan="P2", error=None, scope=ResourceScope.VM):
    return ScanResultRecord(
        subscription_id=subscription_id,
        resource_name=name,
        resource_id=f"/subscriptions/{subscription_id}/resourceGroups/rg/providers/x/{name}",
        plan=plan,
        scope=scope,
        error_message=error,
    )


def test_rows_are_sorted_by_subscription_then_name(tmp_path):
    records = [
        make_record("sub-b", "web01"),
        make_record("sub-a", "Zeta"),
        make_record("sub-a", "alpha", plan="Error", error="HTTP 403: denied", scope=ResourceScope.ARC),
    ]
    output = tmp_path / "nested" / "plans.csv"

    path = export_to_csv(records, str(output))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == CSV_HEADERS
    assert [row[1] for row in rows[1:]] == ["alpha", "Zeta", "web01"]
    assert rows[1][3:] == ["Error", "Arc", "HTTP 403: denied"]
    assert rows[2][5] == ""


def test_non_ascii_names_are_written_as_utf8(tmp_path):
    output = tmp_path / "plans.csv"

    export_to_csv([make_record("sub-1", "vm-münchen")], str(output))

    assert "vm-münchen" in output.read_text(encoding="utf-8")


def test_empty_result_still_writes_header(tmp_path):
    output = tmp_path / "plans.csv"

    export_to_csv([], str(output))

    assert output.read_text(encoding="utf-8").splitlines() == [",".join(CSV_HEADERS)]


def test_write_failure_raises_export_error(tmp_path):
    with pytest.raises(ExportError):
        export_to_csv([make_record("sub-1", "vm1")], str(tmp_path))

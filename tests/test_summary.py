"""Tests for the analysis report and console summary."""

import json

import pandas as pd
import pytest

from noshow_eda.analysis.aggregate import add_bands, group_rates, rates_by_keys
from noshow_eda.analysis.correlation import correlate_with_no_show
from noshow_eda.data.clean import CleaningReport
from noshow_eda.data.schema import NO_SHOW, WEEKDAY
from noshow_eda.reporting.summary import (
    build_report,
    print_summary,
    save_report,
    table_to_records,
)


@pytest.fixture
def cleaning(synthetic_records):
    return CleaningReport(
        rows_in=len(synthetic_records) + 2,
        dropped_negative_age=1,
        dropped_wait_range=1,
        rows_out=len(synthetic_records),
    )


class TestBuildReport:
    """Tests for report assembly."""

    def test_report_contents(self, synthetic_records, cleaning):
        records = add_bands(synthetic_records)
        tables = rates_by_keys(records, keys=["age_band", WEEKDAY])
        correlations = [correlate_with_no_show(records, "age")]

        report = build_report(cleaning, records, tables, correlations)

        assert report["records"] == len(records)
        assert report["no_shows"] == int(records[NO_SHOW].sum())
        assert report["overall_no_show_rate"] == pytest.approx(records[NO_SHOW].mean())
        assert set(report["groups"]) == {"age_band", WEEKDAY}
        assert report["cleaning"]["dropped_negative_age"] == 1
        assert report["trends"] == []

    def test_report_is_strict_json(self, synthetic_records, cleaning):
        """Undefined statistics are stored as null."""
        records = synthetic_records.assign(**{NO_SHOW: False})
        tables = {"age": group_rates(records, "age")}
        correlations = [correlate_with_no_show(records, "age")]

        report = build_report(cleaning, records, tables, correlations)

        text = json.dumps(report, allow_nan=False)
        assert report["correlations"][0]["coefficient"] is None
        assert report["groups"]["age"][0]["relative_rate"] is None
        assert '"defined": false' in text

    def test_table_to_records_native_types(self):
        table = group_rates(pd.DataFrame({"k": [1, 1, 2], NO_SHOW: [True, False, True]}), "k")

        rows = table_to_records(table)

        assert rows[0] == {"k": 1, "count": 2, "no_show_rate": 0.5, "relative_rate": pytest.approx(-25.0)}
        assert type(rows[0]["count"]) is int


class TestSaveAndPrint:
    """Tests for JSON output and the console summary."""

    def test_save_report(self, tmp_path, synthetic_records, cleaning):
        report = build_report(cleaning, synthetic_records, {}, [])

        path = save_report(report, tmp_path / "nested" / "report.json")

        assert json.loads(path.read_text())["records"] == len(synthetic_records)

    def test_print_summary(self, capsys, synthetic_records, cleaning):
        records = synthetic_records.assign(**{NO_SHOW: True})
        tables = {WEEKDAY: group_rates(records, WEEKDAY)}
        report = build_report(cleaning, records, tables, [correlate_with_no_show(records, "age")])

        print_summary(report)

        out = capsys.readouterr().out
        assert "NO-SHOW ANALYSIS SUMMARY" in out
        assert "Overall no-show rate:  100.0%" in out
        assert "By weekday" in out
        assert "age: undefined" in out

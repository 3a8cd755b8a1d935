"""End-to-end tests for the analysis pipeline."""

import json
import logging

import pandas as pd
import pytest

from noshow_eda.config import AnalysisConfig
from noshow_eda.data.clean import DataCleaningError
from noshow_eda.data.generate_synthetic import generate_dataset
from noshow_eda.data.schema import GENDER, GROUPING_KEYS, TREND_KEYS, WEEKDAY
from noshow_eda.reporting.summary import REPORT_FILENAME
from noshow_eda.run_analysis import CLEAN_FILENAME, main, run_analysis


@pytest.fixture
def dataset(tmp_path):
    """Raw CSV with 400 valid appointments plus one negative age and one long wait."""
    return generate_dataset(tmp_path / "appointments.csv", count=400, seed=21)


@pytest.fixture
def config(tmp_path, dataset):
    return AnalysisConfig(data_path=dataset, output_dir=tmp_path / "out")


class TestRunAnalysis:
    """Tests for the full pipeline."""

    def test_outliers_removed(self, config):
        report = run_analysis(config)

        assert report["cleaning"] == {
            "rows_in": 402,
            "dropped_negative_age": 1,
            "dropped_wait_range": 1,
            "rows_out": 400,
        }
        assert report["records"] == 400

    def test_every_key_partitions_records(self, config):
        report = run_analysis(config)

        assert set(report["groups"]) == set(GROUPING_KEYS)
        for key, rows in report["groups"].items():
            assert sum(row["count"] for row in rows) == 400, key

    def test_trends_reported(self, config):
        report = run_analysis(config)

        assert [t["variable"] for t in report["trends"]] == TREND_KEYS

    def test_categorical_correlations_reported(self, config):
        report = run_analysis(config)

        results = {c["variable"]: c for c in report["correlations"]}
        for column in (WEEKDAY, GENDER):
            assert results[column]["defined"], column
            assert results[column]["n"] == 400

    def test_overall_rate_logged(self, config, caplog):
        with caplog.at_level(logging.INFO, logger="noshow_eda.run_analysis"):
            report = run_analysis(config)

        assert f"No-show rate: {report['overall_no_show_rate']:.1%}" in caplog.text

    def test_selected_keys(self, config):
        report = run_analysis(config, keys=["weekday", "sms_reminders"])

        assert list(report["groups"]) == ["weekday", "sms_reminders"]

    def test_report_written(self, config):
        report = run_analysis(config)

        saved = json.loads((config.output_dir / REPORT_FILENAME).read_text())
        assert saved["records"] == report["records"]

    def test_save_clean(self, config):
        run_analysis(config, save_clean=True)

        cleaned = pd.read_parquet(config.output_dir / CLEAN_FILENAME)
        assert len(cleaned) == 400
        assert (cleaned["age"] >= 0).all()
        assert cleaned["wait_days"].between(0, 364).all()

    def test_malformed_file_aborts(self, tmp_path, dataset):
        df = pd.read_csv(dataset, dtype=str)
        df.loc[3, "ApointmentData"] = "not a date"
        broken = tmp_path / "broken.csv"
        df.to_csv(broken, index=False)

        with pytest.raises(DataCleaningError, match="not a date"):
            run_analysis(AnalysisConfig(data_path=broken, output_dir=tmp_path / "out"))

    def test_nothing_left_after_cleaning(self, tmp_path, make_raw):
        path = tmp_path / "negative.csv"
        make_raw({"Age": "-1"}, {"Age": "-2"}).to_csv(path, index=False)

        with pytest.raises(ValueError, match="No valid appointments"):
            run_analysis(AnalysisConfig(data_path=path, output_dir=tmp_path / "out"))


class TestMain:
    """Tests for the command-line entry point."""

    def test_main_prints_summary(self, tmp_path, dataset, capsys):
        out_dir = tmp_path / "cli"

        main(["--data", str(dataset), "--output-dir", str(out_dir), "--keys", "age_band"])

        assert (out_dir / REPORT_FILENAME).exists()
        assert "By age_band" in capsys.readouterr().out

    def test_main_max_wait_flag(self, tmp_path, dataset):
        out_dir = tmp_path / "cli"

        main(["--data", str(dataset), "--output-dir", str(out_dir), "--max-wait-days", "30"])

        saved = json.loads((out_dir / REPORT_FILENAME).read_text())
        assert saved["cleaning"]["dropped_wait_range"] > 1
        assert max(row["wait_days"] for row in saved["groups"]["wait_days"]) < 30


@pytest.mark.slow
class TestFullPipeline:
    """Full-scale generation and analysis (marked slow)."""

    def test_wait_band_signal(self, tmp_path):
        path = generate_dataset(tmp_path / "large.csv", count=20000, seed=99)

        report = run_analysis(AnalysisConfig(data_path=path, output_dir=tmp_path / "out"))

        bands = {row["wait_band"]: row for row in report["groups"]["wait_band"]}
        assert bands["0"]["no_show_rate"] < bands["31-90"]["no_show_rate"]
        assert bands["0"]["relative_rate"] < 0 < bands["31-90"]["relative_rate"]

"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest

from noshow_eda.config import DEFAULT_DATA_PATH, DEFAULT_MAX_WAIT_DAYS, AnalysisConfig


class TestAnalysisConfig:
    """Tests for AnalysisConfig.from_env."""

    def test_defaults(self):
        config = AnalysisConfig.from_env({})

        assert config.data_path == Path(DEFAULT_DATA_PATH)
        assert config.max_wait_days == DEFAULT_MAX_WAIT_DAYS
        assert config.separator == ","

    def test_environment_overrides(self):
        config = AnalysisConfig.from_env(
            {
                "NOSHOW_DATA_PATH": "/data/raw.csv",
                "NOSHOW_OUTPUT_DIR": "/tmp/out",
                "NOSHOW_MAX_WAIT_DAYS": "180",
                "NOSHOW_SEPARATOR": ";",
            }
        )

        assert config.data_path == Path("/data/raw.csv")
        assert config.output_dir == Path("/tmp/out")
        assert config.max_wait_days == 180
        assert config.separator == ";"

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("NOSHOW_MAX_WAIT_DAYS", "90")

        assert AnalysisConfig.from_env().max_wait_days == 90

    def test_non_integer_max_wait(self):
        with pytest.raises(ValueError, match="NOSHOW_MAX_WAIT_DAYS"):
            AnalysisConfig.from_env({"NOSHOW_MAX_WAIT_DAYS": "a year"})

    def test_non_positive_max_wait(self):
        with pytest.raises(ValueError):
            AnalysisConfig(data_path="a.csv", output_dir="out", max_wait_days=0)

    def test_empty_separator(self):
        with pytest.raises(ValueError):
            AnalysisConfig(data_path="a.csv", output_dir="out", separator="")

"""Runtime configuration for the no-show analysis.

Values come from environment variables and may be overridden by CLI flags:

    NOSHOW_DATA_PATH      Raw appointment file (default: data/No-show-Issue-Comma-300k.csv)
    NOSHOW_OUTPUT_DIR     Directory for the JSON report and cleaned parquet (default: outputs/analysis)
    NOSHOW_MAX_WAIT_DAYS  Exclusive upper bound on accepted wait time (default: 365)
    NOSHOW_SEPARATOR      Field separator of the raw file (default: ",")
"""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_PATH = "data/No-show-Issue-Comma-300k.csv"
DEFAULT_OUTPUT_DIR = "outputs/analysis"
DEFAULT_MAX_WAIT_DAYS = 365
DEFAULT_SEPARATOR = ","


@dataclass
class AnalysisConfig:
    data_path: Path
    output_dir: Path
    max_wait_days: int = DEFAULT_MAX_WAIT_DAYS
    separator: str = DEFAULT_SEPARATOR

    def __post_init__(self) -> None:
        self.data_path = Path(self.data_path)
        self.output_dir = Path(self.output_dir)
        if self.max_wait_days <= 0:
            raise ValueError(f"max_wait_days must be positive, got {self.max_wait_days}")
        if not self.separator:
            raise ValueError("separator must not be empty")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AnalysisConfig":
        """Build configuration from NOSHOW_* environment variables."""
        env = os.environ if environ is None else environ

        raw_max_wait = env.get("NOSHOW_MAX_WAIT_DAYS", str(DEFAULT_MAX_WAIT_DAYS))
        try:
            max_wait_days = int(raw_max_wait)
        except ValueError:
            raise ValueError(f"NOSHOW_MAX_WAIT_DAYS must be an integer, got {raw_max_wait!r}") from None

        return cls(
            data_path=Path(env.get("NOSHOW_DATA_PATH", DEFAULT_DATA_PATH)),
            output_dir=Path(env.get("NOSHOW_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)),
            max_wait_days=max_wait_days,
            separator=env.get("NOSHOW_SEPARATOR", DEFAULT_SEPARATOR),
        )

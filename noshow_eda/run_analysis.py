"""Run the no-show analysis end to end.

Loads the raw appointment export, cleans it, computes grouped no-show rates
and correlations, prints a summary and saves a JSON report.

Usage:
    python -m noshow_eda.run_analysis --data data/No-show-Issue-Comma-300k.csv [--save-clean]
"""

import argparse
import logging
from dataclasses import replace
from pathlib import Path

import pandas as pd

from .analysis.aggregate import add_bands, rates_by_keys
from .analysis.correlation import correlate_with_no_show, rate_trend
from .config import AnalysisConfig
from .data.clean import DataCleaningError, clean_appointments
from .data.load import load_raw_appointments
from .data.schema import (
    AGE,
    APPOINTMENT_DAY_OF_YEAR,
    APPOINTMENT_MONTH,
    CONDITION_FLAGS,
    GENDER,
    HANDICAP,
    NO_SHOW,
    SMS_REMINDERS,
    TREND_KEYS,
    WAIT_DAYS,
    WEEKDAY,
)
from .reporting.summary import REPORT_FILENAME, build_report, print_summary, save_report

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

CLEAN_FILENAME = "appointments_clean.parquet"

CORRELATION_COLUMNS = [
    AGE,
    GENDER,
    WEEKDAY,
    WAIT_DAYS,
    SMS_REMINDERS,
    APPOINTMENT_MONTH,
    APPOINTMENT_DAY_OF_YEAR,
    HANDICAP,
    *CONDITION_FLAGS,
]


def analyze(records: pd.DataFrame, keys: list[str] | None = None) -> tuple[dict, list, list]:
    """Group and correlate a cleaned dataset.

    Returns:
        Tuple of (group tables by key, record-level correlations, rate trends)
    """
    records = add_bands(records)
    tables = rates_by_keys(records, keys)

    correlations = [
        correlate_with_no_show(records, column)
        for column in CORRELATION_COLUMNS
        if column in records.columns
    ]
    trends = [rate_trend(tables[key], key) for key in TREND_KEYS if key in tables]

    return tables, correlations, trends


def run_analysis(
    config: AnalysisConfig,
    keys: list[str] | None = None,
    save_clean: bool = False,
) -> dict:
    """Run the full pipeline for one input file.

    Args:
        config: Analysis configuration
        keys: Grouping keys to report (default: every available key)
        save_clean: Also write the cleaned dataset as parquet

    Returns:
        The analysis report dictionary
    """
    logger.info("=== No-Show Analysis ===")

    raw = load_raw_appointments(config.data_path, sep=config.separator)

    try:
        records, cleaning = clean_appointments(raw, max_wait_days=config.max_wait_days)
    except DataCleaningError as e:
        logger.error(f"Cannot clean {config.data_path}: {e}")
        raise

    if records.empty:
        raise ValueError(f"No valid appointments left after cleaning {config.data_path}")

    logger.info(f"No-show rate: {records[NO_SHOW].mean():.1%}")

    tables, correlations, trends = analyze(records, keys)
    report = build_report(cleaning, records, tables, correlations, trends)

    config.output_dir.mkdir(parents=True, exist_ok=True)
    save_report(report, config.output_dir / REPORT_FILENAME)

    if save_clean:
        clean_path = config.output_dir / CLEAN_FILENAME
        records.to_parquet(clean_path, index=False)
        logger.info(f"Saved cleaned data to {clean_path}")

    logger.info("=== Analysis Complete ===")
    return report


def main(argv: list[str] | None = None) -> None:
    config = AnalysisConfig.from_env()

    parser = argparse.ArgumentParser(description="Analyse appointment no-show rates")
    parser.add_argument(
        "--data",
        type=Path,
        default=config.data_path,
        help="Path to the raw appointment file",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output_dir,
        help="Output directory for the report",
    )
    parser.add_argument(
        "--max-wait-days",
        type=int,
        default=config.max_wait_days,
        help="Drop records whose wait is this many days or more",
    )
    parser.add_argument(
        "--separator",
        type=str,
        default=config.separator,
        help="Field separator of the raw file",
    )
    parser.add_argument(
        "--keys",
        nargs="+",
        default=None,
        help="Grouping keys to report (default: all available)",
    )
    parser.add_argument(
        "--save-clean",
        action="store_true",
        help="Also save the cleaned dataset as parquet",
    )

    args = parser.parse_args(argv)

    config = replace(
        config,
        data_path=args.data,
        output_dir=args.output_dir,
        max_wait_days=args.max_wait_days,
        separator=args.separator,
    )

    report = run_analysis(config, keys=args.keys, save_clean=args.save_clean)
    print_summary(report)


if __name__ == "__main__":
    main()

"""Summary statistics for a completed analysis run.

Builds one report dict (cleaning counts, overall rate, per-key group tables,
correlations) that is printed to the console and saved as JSON.
"""

import json
import logging
import math
from pathlib import Path

import numpy as np
import pandas as pd

from ..analysis.aggregate import COUNT, RATE, RELATIVE_RATE, overall_rate
from ..analysis.correlation import CorrelationResult
from ..data.clean import CleaningReport
from ..data.schema import NO_SHOW

logger = logging.getLogger(__name__)

REPORT_FILENAME = "analysis_report.json"


def _jsonable(value):
    """Convert numpy scalars to Python values and NaN to None."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def table_to_records(table: pd.DataFrame) -> list[dict]:
    return [
        {str(key): _jsonable(value) for key, value in row.items()}
        for row in table.to_dict(orient="records")
    ]


def build_report(
    cleaning: CleaningReport,
    records: pd.DataFrame,
    tables: dict[str, pd.DataFrame],
    correlations: list[CorrelationResult],
    trends: list[CorrelationResult] | None = None,
) -> dict:
    """Assemble the analysis report.

    Args:
        cleaning: Row counts from the cleaning stage
        records: Cleaned appointments DataFrame
        tables: Group tables keyed by grouping key
        correlations: Record-level correlations with the no-show flag
        trends: Correlations between numeric keys and their group rates

    Returns:
        JSON-serializable report dictionary
    """
    return {
        "cleaning": cleaning.to_dict(),
        "records": len(records),
        "no_shows": int(records[NO_SHOW].sum()),
        "overall_no_show_rate": _jsonable(overall_rate(records)) if len(records) else None,
        "groups": {key: table_to_records(table) for key, table in tables.items()},
        "correlations": [result.to_dict() for result in correlations],
        "trends": [result.to_dict() for result in trends or []],
    }


def save_report(report: dict, output_path: Path) -> Path:
    """Save the analysis report to JSON."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)

    logger.info(f"Saved analysis report to {output_path}")
    return output_path


def _format_correlation(result: dict) -> str:
    if not result["defined"]:
        return f"  - {result['variable']}: undefined (n={result['n']:,})"
    level = int(round(result["confidence_level"] * 100))
    return (
        f"  - {result['variable']}: r={result['coefficient']:+.3f} "
        f"(p={result['p_value']:.3g}, {level}% CI [{result['ci_low']:+.3f}, {result['ci_high']:+.3f}], "
        f"n={result['n']:,})"
    )


def print_summary(report: dict, max_rows: int = 12) -> None:
    """Print the report in console form."""
    cleaning = report["cleaning"]

    print("\n" + "=" * 60)
    print("NO-SHOW ANALYSIS SUMMARY")
    print("=" * 60)
    print(f"Raw rows:              {cleaning['rows_in']:,}")
    print(f"Dropped (age < 0):     {cleaning['dropped_negative_age']:,}")
    print(f"Dropped (wait range):  {cleaning['dropped_wait_range']:,}")
    print(f"Records analysed:      {report['records']:,}")
    print(f"No-shows:              {report['no_shows']:,}")
    if report["overall_no_show_rate"] is not None:
        print(f"Overall no-show rate:  {report['overall_no_show_rate']:.1%}")

    for key, rows in report["groups"].items():
        print(f"\nBy {key} ({len(rows)} groups):")
        for row in rows[:max_rows]:
            relative = row.get(RELATIVE_RATE)
            relative_text = "n/a" if relative is None else f"{relative:+.1f}%"
            print(f"  {str(row[key]):>12}  n={row[COUNT]:>7,}  rate={row[RATE]:.1%}  relative={relative_text}")
        if len(rows) > max_rows:
            print(f"  ... {len(rows) - max_rows} more")

    if report["correlations"]:
        print("\nCorrelation with no-show:")
        for result in report["correlations"]:
            print(_format_correlation(result))

    if report["trends"]:
        print("\nGroup rate trends:")
        for result in report["trends"]:
            print(_format_correlation(result))

    print("=" * 60)

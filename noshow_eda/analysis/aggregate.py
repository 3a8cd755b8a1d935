"""Grouped no-show statistics over the cleaned appointment data.

For a grouping key, computes the per-group record count and mean no-show
rate, plus the relative rate: the group's percentage deviation from the
dataset-wide mean rate. Empty groups never appear in the output.
"""

import logging

import numpy as np
import pandas as pd

from ..data.schema import (
    AGE,
    AGE_BAND,
    GROUPING_KEYS,
    NO_SHOW,
    WAIT_BAND,
    WAIT_DAYS,
    AgeBand,
    WaitBand,
)

logger = logging.getLogger(__name__)

COUNT = "count"
RATE = "no_show_rate"
RELATIVE_RATE = "relative_rate"

# Left-closed bin edges; the last band is open-ended.
AGE_BAND_EDGES = [0, 18, 40, 65, np.inf]
WAIT_BAND_EDGES = [0, 1, 8, 15, 31, 91, np.inf]


def overall_rate(records: pd.DataFrame) -> float:
    """Mean no-show rate across all records."""
    if records.empty:
        raise ValueError("Cannot compute a no-show rate over an empty dataset")
    return float(records[NO_SHOW].mean())


def relative_rate(rate: float | pd.Series, baseline: float) -> float | pd.Series:
    """Percentage deviation of a rate from the baseline rate.

    Undefined (NaN) when the baseline is zero.
    """
    if baseline == 0 or np.isnan(baseline):
        if isinstance(rate, pd.Series):
            return pd.Series(np.nan, index=rate.index)
        return float("nan")
    return 100.0 * (rate - baseline) / baseline


def add_bands(records: pd.DataFrame) -> pd.DataFrame:
    """Add categorical age_band and wait_band columns."""
    df = records.copy()
    df[AGE_BAND] = pd.cut(
        df[AGE],
        bins=AGE_BAND_EDGES,
        right=False,
        labels=[band.value for band in AgeBand],
    )
    df[WAIT_BAND] = pd.cut(
        df[WAIT_DAYS],
        bins=WAIT_BAND_EDGES,
        right=False,
        labels=[band.value for band in WaitBand],
    )
    return df


def group_rates(records: pd.DataFrame, key: str, relative: bool = True) -> pd.DataFrame:
    """Compute per-group count and no-show rate for one grouping key.

    Args:
        records: Cleaned appointments DataFrame
        key: Column to group by
        relative: Whether to add the relative_rate column

    Returns:
        DataFrame with columns [key, count, no_show_rate(, relative_rate)],
        one row per non-empty group, ordered by key
    """
    if key not in records.columns:
        raise KeyError(f"Unknown grouping key: {key!r}")

    baseline = overall_rate(records)

    table = records.groupby(key, observed=True, sort=True)[NO_SHOW].agg(
        **{COUNT: "count", RATE: "mean"}
    )
    table = table[table[COUNT] > 0].copy()
    table[RATE] = table[RATE].astype(float)

    if relative:
        table[RELATIVE_RATE] = relative_rate(table[RATE], baseline)

    return table.reset_index()


def rates_by_keys(records: pd.DataFrame, keys: list[str] | None = None) -> dict[str, pd.DataFrame]:
    """Run group_rates for every available grouping key.

    Keys whose column is absent (e.g. a condition flag missing from the
    export) are skipped.
    """
    keys = keys if keys is not None else GROUPING_KEYS
    tables = {}
    for key in keys:
        if key not in records.columns:
            logger.warning(f"Grouping key not available, skipping: {key}")
            continue
        tables[key] = group_rates(records, key)
        logger.info(f"Grouped by {key}: {len(tables[key]):,} groups")
    return tables

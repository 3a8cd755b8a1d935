"""Correlation tests between appointment attributes and the no-show outcome.

Wraps scipy's Pearson test (point-biserial when one side is boolean) and
reports undefined correlations, such as a constant outcome, as NaN instead
of raising.
"""

import logging
import math
from dataclasses import asdict, dataclass

import pandas as pd
from scipy import stats

from ..data.schema import NO_SHOW
from .aggregate import RATE

logger = logging.getLogger(__name__)

# Fisher's z interval needs n > 3.
MIN_RECORDS = 4


@dataclass
class CorrelationResult:
    """Pearson correlation with its p-value and confidence interval."""

    variable: str
    target: str
    n: int
    coefficient: float
    p_value: float
    ci_low: float
    ci_high: float
    confidence_level: float = 0.95

    @property
    def defined(self) -> bool:
        return not math.isnan(self.coefficient)

    def to_dict(self) -> dict:
        """JSON-friendly dict; NaN fields become None."""
        result = {
            key: (None if isinstance(value, float) and math.isnan(value) else value)
            for key, value in asdict(self).items()
        }
        result["defined"] = self.defined
        return result


def _undefined(variable: str, target: str, n: int, confidence_level: float) -> CorrelationResult:
    nan = float("nan")
    return CorrelationResult(
        variable=variable,
        target=target,
        n=n,
        coefficient=nan,
        p_value=nan,
        ci_low=nan,
        ci_high=nan,
        confidence_level=confidence_level,
    )


def _as_numeric(series: pd.Series) -> pd.Series:
    """Numeric view of a variable for correlation.

    Ordered categories (e.g. weekday) use their category codes; a column
    with at most two distinct values (e.g. gender) becomes a 0/1 flag in
    sorted value order.
    """
    if pd.api.types.is_bool_dtype(series) or pd.api.types.is_numeric_dtype(series):
        return series.astype(float)

    if isinstance(series.dtype, pd.CategoricalDtype) and series.cat.ordered:
        return series.cat.codes.astype(float).where(series.notna())

    levels = sorted(pd.unique(series.dropna().astype(str)))
    if len(levels) > 2:
        raise TypeError(
            f"Cannot correlate unordered column {series.name!r} with {len(levels)} levels"
        )
    codes = {level: float(code) for code, level in enumerate(levels)}
    return series.astype(str).map(codes).astype(float).where(series.notna())


def correlate(x: pd.Series, y: pd.Series, confidence_level: float = 0.95) -> CorrelationResult:
    """Pearson correlation between two aligned series.

    Args:
        x: Independent variable (numeric, boolean, ordered categorical or
            two-level)
        y: Dependent variable (numeric or boolean)
        confidence_level: Confidence level of the reported interval

    Returns:
        CorrelationResult; every statistic is NaN when the correlation is
        undefined (fewer than MIN_RECORDS pairs or a constant series)
    """
    variable = str(x.name) if x.name is not None else "x"
    target = str(y.name) if y.name is not None else "y"

    pairs = pd.DataFrame({"x": _as_numeric(x), "y": _as_numeric(y)}).dropna()
    n = len(pairs)

    if n < MIN_RECORDS:
        logger.warning(f"Correlation {variable} ~ {target} undefined: only {n} records")
        return _undefined(variable, target, n, confidence_level)
    if pairs["x"].nunique() < 2 or pairs["y"].nunique() < 2:
        logger.warning(f"Correlation {variable} ~ {target} undefined: constant input")
        return _undefined(variable, target, n, confidence_level)

    result = stats.pearsonr(pairs["x"].to_numpy(), pairs["y"].to_numpy())
    interval = result.confidence_interval(confidence_level=confidence_level)

    return CorrelationResult(
        variable=variable,
        target=target,
        n=n,
        coefficient=float(result.statistic),
        p_value=float(result.pvalue),
        ci_low=float(interval.low),
        ci_high=float(interval.high),
        confidence_level=confidence_level,
    )


def correlate_with_no_show(records: pd.DataFrame, column: str, confidence_level: float = 0.95) -> CorrelationResult:
    """Record-level correlation between one column and the no-show flag."""
    if column not in records.columns:
        raise KeyError(f"Unknown column: {column!r}")
    return correlate(records[column], records[NO_SHOW], confidence_level)


def rate_trend(table: pd.DataFrame, key: str, confidence_level: float = 0.95) -> CorrelationResult:
    """Correlation between a numeric grouping key and its per-group rates.

    Args:
        table: Output of group_rates for the key
        key: The grouping key column of the table
    """
    if not pd.api.types.is_numeric_dtype(table[key]):
        raise ValueError(f"Trend needs a numeric key, {key!r} is {table[key].dtype}")
    return correlate(table[key], table[RATE], confidence_level)

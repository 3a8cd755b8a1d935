"""Clean the raw appointment export into the canonical analysis schema.

Coerces status text and flags, parses registration and appointment dates,
derives the calendar and wait-time fields, and filters records that are
statistically invalid (negative age, wait outside the accepted range).
Malformed input aborts the load with DataCleaningError.
"""

import logging
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd

from .schema import (
    AGE,
    APPOINTMENT_DATE,
    APPOINTMENT_DAY,
    APPOINTMENT_DAY_OF_YEAR,
    APPOINTMENT_MONTH,
    APPOINTMENT_YEAR,
    CONDITION_FLAGS,
    GENDER,
    HANDICAP,
    NO_SHOW,
    RAW_COLUMN_ALIASES,
    REGISTRATION_DATE,
    REQUIRED_COLUMNS,
    SMS_REMINDERS,
    STATUS,
    STATUS_VALUES,
    WAIT_DAYS,
    WEEKDAY,
    WEEKDAY_ORDER,
    Gender,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_WAIT_DAYS = 365
VALID_SMS_COUNTS = {0, 1, 2}
INT64_LIMIT = 2.0**63

# Trailing zone designator of an ISO 8601 timestamp: Z, +HH, +HHMM or +HH:MM.
ZONE_SUFFIX = r"([T ]\d{2}:[\d:.,]*)(?:Z|[+-]\d{2}(?::?\d{2})?)$"


class DataCleaningError(ValueError):
    """Raised when a raw appointment file cannot be parsed."""


@dataclass
class CleaningReport:
    """Row counts through the cleaning stage."""

    rows_in: int
    dropped_negative_age: int
    dropped_wait_range: int
    rows_out: int

    def to_dict(self) -> dict:
        return asdict(self)


def _sample(values: pd.Series, limit: int = 5) -> str:
    unique = pd.unique(values.astype(str))
    shown = ", ".join(repr(v) for v in unique[:limit])
    if len(unique) > limit:
        shown += ", ..."
    return shown


def _require_present(series: pd.Series, column: str) -> None:
    missing = series.isna()
    if missing.any():
        raise DataCleaningError(f"Column '{column}' has {int(missing.sum()):,} missing values")


def _parse_integers(series: pd.Series, column: str) -> pd.Series:
    """Parse a text column into int64, rejecting blanks and non-integers."""
    _require_present(series, column)
    if pd.api.types.is_bool_dtype(series):
        return series.astype("int64")

    text = series.astype(str).str.strip()
    numeric = pd.to_numeric(text, errors="coerce").astype(float)
    bad = ~np.isfinite(numeric) | (numeric != numeric.round()) | (numeric.abs() >= INT64_LIMIT)
    if bad.any():
        raise DataCleaningError(f"Column '{column}' has unparseable integers: {_sample(series[bad])}")
    return numeric.astype("int64")


def _parse_flags(series: pd.Series, column: str) -> pd.Series:
    values = _parse_integers(series, column)
    bad = ~values.isin([0, 1])
    if bad.any():
        raise DataCleaningError(f"Column '{column}' must be 0 or 1, got: {_sample(series[bad])}")
    return values.astype(bool)


def _parse_dates(series: pd.Series, column: str) -> pd.Series:
    """Parse ISO 8601 dates or timestamps into midnight-normalized dates.

    Each value keeps its own wall-clock date; a zone offset is ignored, not
    converted.
    """
    _require_present(series, column)
    if pd.api.types.is_datetime64_any_dtype(series):
        parsed = series.dt.tz_localize(None) if series.dt.tz is not None else series
    else:
        text = series.astype(str).str.strip().str.replace(ZONE_SUFFIX, r"\1", regex=True)
        parsed = pd.to_datetime(text, format="ISO8601", errors="coerce")
    bad = parsed.isna()
    if bad.any():
        raise DataCleaningError(f"Column '{column}' has malformed dates: {_sample(series[bad])}")
    return parsed.dt.normalize()


def _parse_status(series: pd.Series) -> pd.Series:
    _require_present(series, STATUS)
    lookup = {key.lower(): value for key, value in STATUS_VALUES.items()}
    text = series.astype(str).str.strip().str.lower()
    flags = text.map(lookup)
    bad = flags.isna()
    if bad.any():
        raise DataCleaningError(f"Column '{STATUS}' has unknown status values: {_sample(series[bad])}")
    return flags.astype(bool)


def _parse_gender(series: pd.Series) -> pd.Series:
    _require_present(series, GENDER)
    text = series.astype(str).str.strip().str.upper()
    bad = ~text.isin([g.value for g in Gender])
    if bad.any():
        raise DataCleaningError(f"Column '{GENDER}' has unknown gender values: {_sample(series[bad])}")
    return text


def rename_to_canonical(raw: pd.DataFrame) -> pd.DataFrame:
    """Rename raw export columns to canonical names and drop the rest.

    Columns already using a canonical name are kept as they are.
    """
    canonical = set(RAW_COLUMN_ALIASES.values())
    renamed = raw.rename(columns=RAW_COLUMN_ALIASES)

    dropped = [col for col in renamed.columns if col not in canonical]
    if dropped:
        logger.debug(f"Dropping unmapped columns: {dropped}")
    renamed = renamed.loc[:, renamed.columns.isin(canonical)]

    duplicated = renamed.columns[renamed.columns.duplicated()].unique().tolist()
    if duplicated:
        raise DataCleaningError(f"Raw columns map to the same field more than once: {duplicated}")

    missing = [col for col in REQUIRED_COLUMNS if col not in renamed.columns]
    if missing:
        raise DataCleaningError(f"Missing required columns: {missing}")

    return renamed


def typecast_appointments(raw: pd.DataFrame) -> pd.DataFrame:
    """Coerce canonical columns to their analysis types and derive date fields.

    Args:
        raw: DataFrame with canonical column names and raw text values

    Returns:
        DataFrame with typed columns, no_show flag and derived fields
    """
    df = pd.DataFrame(index=raw.index)

    df[AGE] = _parse_integers(raw[AGE], AGE)
    df[GENDER] = _parse_gender(raw[GENDER])
    df[REGISTRATION_DATE] = _parse_dates(raw[REGISTRATION_DATE], REGISTRATION_DATE)
    df[APPOINTMENT_DATE] = _parse_dates(raw[APPOINTMENT_DATE], APPOINTMENT_DATE)
    df[NO_SHOW] = _parse_status(raw[STATUS])

    for flag in CONDITION_FLAGS:
        if flag in raw.columns:
            df[flag] = _parse_flags(raw[flag], flag)

    if HANDICAP in raw.columns:
        df[HANDICAP] = _parse_integers(raw[HANDICAP], HANDICAP)
        negative = df[HANDICAP] < 0
        if negative.any():
            raise DataCleaningError(f"Column '{HANDICAP}' has negative levels: {_sample(raw[HANDICAP][negative])}")

    if SMS_REMINDERS in raw.columns:
        df[SMS_REMINDERS] = _parse_integers(raw[SMS_REMINDERS], SMS_REMINDERS)
        bad = ~df[SMS_REMINDERS].isin(VALID_SMS_COUNTS)
        if bad.any():
            raise DataCleaningError(
                f"Column '{SMS_REMINDERS}' must be 0, 1 or 2, got: {_sample(raw[SMS_REMINDERS][bad])}"
            )

    appointment = df[APPOINTMENT_DATE].dt
    df[APPOINTMENT_YEAR] = appointment.year.astype("int64")
    df[APPOINTMENT_MONTH] = appointment.month.astype("int64")
    df[APPOINTMENT_DAY] = appointment.day.astype("int64")
    df[APPOINTMENT_DAY_OF_YEAR] = appointment.dayofyear.astype("int64")
    df[WEEKDAY] = pd.Categorical(appointment.day_name(), categories=WEEKDAY_ORDER, ordered=True)
    df[WAIT_DAYS] = (df[APPOINTMENT_DATE] - df[REGISTRATION_DATE]).dt.days.astype("int64")

    return df


def filter_outliers(
    df: pd.DataFrame,
    max_wait_days: int = DEFAULT_MAX_WAIT_DAYS,
) -> tuple[pd.DataFrame, int, int]:
    """Drop records with negative age or a wait outside [0, max_wait_days).

    Returns:
        Tuple of (filtered DataFrame, dropped for age, dropped for wait)
    """
    negative_age = df[AGE] < 0
    df = df[~negative_age]

    wait_out_of_range = (df[WAIT_DAYS] < 0) | (df[WAIT_DAYS] >= max_wait_days)
    df = df[~wait_out_of_range]

    return df.reset_index(drop=True), int(negative_age.sum()), int(wait_out_of_range.sum())


def clean_appointments(
    raw: pd.DataFrame,
    max_wait_days: int = DEFAULT_MAX_WAIT_DAYS,
) -> tuple[pd.DataFrame, CleaningReport]:
    """Run the full cleaning stage on a raw appointment export.

    Args:
        raw: Raw DataFrame as returned by load_raw_appointments
        max_wait_days: Exclusive upper bound on the accepted wait time

    Returns:
        Tuple of (cleaned DataFrame, CleaningReport)

    Raises:
        DataCleaningError: If a required column is missing or any value
            cannot be parsed
    """
    if max_wait_days <= 0:
        raise ValueError(f"max_wait_days must be positive, got {max_wait_days}")

    logger.info(f"Cleaning {len(raw):,} raw appointment rows...")

    typed = typecast_appointments(rename_to_canonical(raw))
    cleaned, dropped_age, dropped_wait = filter_outliers(typed, max_wait_days)

    report = CleaningReport(
        rows_in=len(raw),
        dropped_negative_age=dropped_age,
        dropped_wait_range=dropped_wait,
        rows_out=len(cleaned),
    )

    if dropped_age:
        logger.warning(f"Dropped {dropped_age:,} rows with negative age")
    if dropped_wait:
        logger.warning(f"Dropped {dropped_wait:,} rows with wait outside [0, {max_wait_days}) days")
    logger.info(f"Cleaned dataset: {report.rows_out:,} rows")

    return cleaned, report

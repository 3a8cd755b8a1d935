"""Shared fixtures for the no-show analysis tests."""

import pandas as pd
import pytest

from noshow_eda.data.clean import clean_appointments
from noshow_eda.data.generate_synthetic import generate_records, records_to_raw_frame

# One valid raw row in the 300k export layout: a Wednesday appointment
# registered nine days earlier.
BASE_RAW_ROW = {
    "Age": "30",
    "Gender": "F",
    "AppointmentRegistration": "2015-01-05T08:15:00Z",
    "ApointmentData": "2015-01-14T00:00:00Z",
    "DayOfTheWeek": "Wednesday",
    "Status": "Show-Up",
    "Diabetes": "0",
    "Alcoolism": "0",
    "HiperTension": "0",
    "Handcap": "0",
    "Smokes": "0",
    "Scholarship": "0",
    "Tuberculosis": "0",
    "Sms_Reminder": "1",
    "AwaitingTime": "-9",
}


@pytest.fixture
def make_raw():
    """Build a raw DataFrame from per-row overrides of BASE_RAW_ROW."""

    def _make(*overrides: dict, count: int | None = None) -> pd.DataFrame:
        rows = [dict(BASE_RAW_ROW, **row) for row in overrides]
        if count is not None:
            rows += [dict(BASE_RAW_ROW) for _ in range(count - len(rows))]
        return pd.DataFrame(rows)

    return _make


@pytest.fixture
def synthetic_records():
    """Cleaned records built from 600 synthetic appointments."""
    raw = records_to_raw_frame(generate_records(600, seed=7)).astype(str)
    records, _ = clean_appointments(raw)
    return records

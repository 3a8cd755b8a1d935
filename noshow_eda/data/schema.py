"""Data schema definitions for the appointment no-show analysis.

This module defines the canonical appointment record and the column names
shared by the cleaning, aggregation and reporting stages.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class Gender(str, Enum):
    """Patient gender options."""

    MALE = "M"
    FEMALE = "F"


class AttendanceStatus(str, Enum):
    """Raw appointment status values."""

    SHOW_UP = "Show-Up"
    NO_SHOW = "No-Show"


class AgeBand(str, Enum):
    """Patient age range categories."""

    PEDIATRIC = "0-17"
    YOUNG_ADULT = "18-39"
    MIDDLE_AGED = "40-64"
    SENIOR = "65+"


class WaitBand(str, Enum):
    """Wait time categories in days."""

    SAME_DAY = "0"
    WITHIN_WEEK = "1-7"
    WITHIN_TWO_WEEKS = "8-14"
    WITHIN_MONTH = "15-30"
    WITHIN_QUARTER = "31-90"
    LONG = "91+"


# =============================================================================
# Canonical column names
# =============================================================================

AGE = "age"
GENDER = "gender"
REGISTRATION_DATE = "registration_date"
APPOINTMENT_DATE = "appointment_date"
STATUS = "status"
NO_SHOW = "no_show"
SMS_REMINDERS = "sms_reminders"
HANDICAP = "handicap"
WAIT_DAYS = "wait_days"
WEEKDAY = "weekday"
APPOINTMENT_YEAR = "appointment_year"
APPOINTMENT_MONTH = "appointment_month"
APPOINTMENT_DAY = "appointment_day"
APPOINTMENT_DAY_OF_YEAR = "appointment_day_of_year"
AGE_BAND = "age_band"
WAIT_BAND = "wait_band"

CONDITION_FLAGS = [
    "diabetes",
    "alcoholism",
    "hypertension",
    "smoker",
    "welfare",
    "tuberculosis",
]

REQUIRED_COLUMNS = [AGE, GENDER, REGISTRATION_DATE, APPOINTMENT_DATE, STATUS]

WEEKDAY_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Raw export column -> canonical column. Covers the 300k export and the
# later KaggleV2-May-2016 export.
RAW_COLUMN_ALIASES = {
    "Age": AGE,
    "Gender": GENDER,
    "AppointmentRegistration": REGISTRATION_DATE,
    "ScheduledDay": REGISTRATION_DATE,
    "ApointmentData": APPOINTMENT_DATE,
    "AppointmentData": APPOINTMENT_DATE,
    "AppointmentDay": APPOINTMENT_DATE,
    "Status": STATUS,
    "No-show": STATUS,
    "Diabetes": "diabetes",
    "Alcoolism": "alcoholism",
    "Alcoholism": "alcoholism",
    "HiperTension": "hypertension",
    "Hipertension": "hypertension",
    "Hypertension": "hypertension",
    "Smokes": "smoker",
    "Scholarship": "welfare",
    "Tuberculosis": "tuberculosis",
    "Handcap": HANDICAP,
    "Sms_Reminder": SMS_REMINDERS,
    "SMS_received": SMS_REMINDERS,
}

# Status text -> no_show flag. "Yes"/"No" answer the V2 export's "No-show?" column.
STATUS_VALUES = {
    AttendanceStatus.NO_SHOW.value: True,
    AttendanceStatus.SHOW_UP.value: False,
    "Yes": True,
    "No": False,
}

# Keys the analysis groups by, in report order.
GROUPING_KEYS = [
    AGE,
    AGE_BAND,
    GENDER,
    WEEKDAY,
    APPOINTMENT_MONTH,
    APPOINTMENT_DAY_OF_YEAR,
    WAIT_DAYS,
    WAIT_BAND,
    SMS_REMINDERS,
    HANDICAP,
    *CONDITION_FLAGS,
]

# Numeric keys whose group rates are checked for a trend.
TREND_KEYS = [AGE, APPOINTMENT_MONTH, APPOINTMENT_DAY_OF_YEAR, WAIT_DAYS, SMS_REMINDERS]


@dataclass
class AppointmentRecord:
    """Represents one appointment row of the raw export."""

    age: int
    gender: Gender
    registration_date: date
    appointment_date: date
    status: AttendanceStatus
    diabetes: bool = False
    alcoholism: bool = False
    hypertension: bool = False
    smoker: bool = False
    welfare: bool = False
    tuberculosis: bool = False
    handicap: int = 0
    sms_reminders: int = 0

    @property
    def wait_days(self) -> int:
        """Days between registration and the appointment date."""
        return (self.appointment_date - self.registration_date).days

    @property
    def weekday(self) -> str:
        """Weekday name of the appointment."""
        return WEEKDAY_ORDER[self.appointment_date.weekday()]

    @property
    def no_show(self) -> bool:
        """Determine if appointment was a no-show."""
        return self.status == AttendanceStatus.NO_SHOW


AppointmentList = list[AppointmentRecord]

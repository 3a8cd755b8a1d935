"""Synthetic appointment data generation for the no-show analysis.

Generates appointment records shaped like the raw "No-show-Issue-Comma-300k"
export, with evidence-based no-show probability factors (wait time, age,
SMS reminders, weekday, conditions, seasonality) so that every grouping key
shows a realistic signal.

Usage:
    python -m noshow_eda.data.generate_synthetic --output data/synthetic.csv --appointments 20000
"""

import random
from dataclasses import replace
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from faker import Faker

from .schema import (
    AgeBand,
    AppointmentList,
    AppointmentRecord,
    AttendanceStatus,
    Gender,
)

fake = Faker()
Faker.seed(42)
np.random.seed(42)
random.seed(42)


# =============================================================================
# Configuration Constants
# =============================================================================

DEFAULT_START_DATE = date(2014, 1, 1)
DEFAULT_END_DATE = date(2015, 12, 31)

AGE_BAND_WEIGHTS = {
    AgeBand.PEDIATRIC: 0.22,
    AgeBand.YOUNG_ADULT: 0.30,
    AgeBand.MIDDLE_AGED: 0.33,
    AgeBand.SENIOR: 0.15,
}

AGE_BAND_RANGES = {
    AgeBand.PEDIATRIC: (0, 17),
    AgeBand.YOUNG_ADULT: (18, 39),
    AgeBand.MIDDLE_AGED: (40, 64),
    AgeBand.SENIOR: (65, 100),
}

GENDER_WEIGHTS = {
    Gender.FEMALE: 0.67,
    Gender.MALE: 0.33,
}

SMS_REMINDER_WEIGHTS = {
    0: 0.43,
    1: 0.56,
    2: 0.01,
}

# Share of patients with each condition flag.
CONDITION_PREVALENCE = {
    "diabetes": 0.08,
    "alcoholism": 0.03,
    "hypertension": 0.22,
    "smoker": 0.05,
    "welfare": 0.10,
    "tuberculosis": 0.0005,
}

HANDICAP_WEIGHTS = {
    0: 0.98,
    1: 0.018,
    2: 0.0015,
    3: 0.0004,
    4: 0.0001,
}

# Calibrated to an overall no-show rate of roughly 30%
BASE_NO_SHOW_RATE = 0.26

SEASONALITY_MODIFIERS = {
    "holiday_season": {"start": (12, 20), "end": (1, 5), "modifier": 0.06},
    "carnival": {"start": (2, 10), "end": (2, 20), "modifier": 0.04},
    "summer_vacation": {"start": (7, 1), "end": (7, 31), "modifier": 0.02},
}


# =============================================================================
# Weighted Random Selection Helpers
# =============================================================================


def weighted_choice(options: dict) -> Any:
    """Select an option based on weighted probabilities."""
    items = list(options.keys())
    weights = list(options.values())
    return random.choices(items, weights=weights, k=1)[0]


def gamma_wait_time() -> int:
    """Generate wait time using gamma distribution, clipped 0-180 days."""
    value = np.random.gamma(shape=1.5, scale=9)
    return int(np.clip(value, 0, 180))


def seed_generators(seed: int) -> None:
    """Reseed every random source used by the generator."""
    Faker.seed(seed)
    np.random.seed(seed)
    random.seed(seed)


# =============================================================================
# No-Show Probability Calculation
# =============================================================================


def calculate_no_show_probability(
    age: int,
    wait_days: int,
    sms_reminders: int,
    appointment_date: date,
    conditions: dict[str, bool],
) -> float:
    """Calculate no-show probability from the record's attributes.

    Patterns follow the raw export:
    - Wait time is the strongest predictor (same-day visits rarely fail)
    - Younger adults miss more often than seniors
    - Reminders are sent for longer waits, so they correlate with no-shows
    - Welfare members and alcoholics miss slightly more often
    """
    probability = BASE_NO_SHOW_RATE

    # Wait time
    if wait_days <= 0:
        probability -= 0.15
    elif wait_days <= 7:
        probability -= 0.02
    elif wait_days <= 30:
        probability += 0.05
    else:
        probability += 0.08

    # Age
    if age < 18:
        probability += 0.02
    elif age < 40:
        probability += 0.05
    elif age < 65:
        probability -= 0.03
    else:
        probability -= 0.06

    if sms_reminders > 0:
        probability += 0.02

    # Monday and Saturday see more no-shows
    if appointment_date.weekday() in (0, 5):
        probability += 0.03

    if conditions.get("welfare"):
        probability += 0.03
    if conditions.get("alcoholism"):
        probability += 0.04
    if conditions.get("hypertension") or conditions.get("diabetes"):
        probability -= 0.02

    probability += _get_seasonality_modifier(appointment_date)

    return max(0.02, min(0.85, probability))


def _get_seasonality_modifier(appointment_date: date) -> float:
    """Calculate seasonality modifier for a given date."""
    month = appointment_date.month
    day = appointment_date.day

    for config in SEASONALITY_MODIFIERS.values():
        start_month, start_day = config["start"]
        end_month, end_day = config["end"]

        # Year-wrap (e.g., Dec 20 - Jan 5)
        if start_month > end_month:
            if (month == start_month and day >= start_day) or month > start_month:
                return config["modifier"]
            if (month == end_month and day <= end_day) or month < end_month:
                return config["modifier"]
        elif start_month <= month <= end_month:
            if (month > start_month or day >= start_day) and (month < end_month or day <= end_day):
                return config["modifier"]

    return 0.0


# =============================================================================
# Record Generation
# =============================================================================


def generate_records(
    count: int = 10000,
    start_date: date = DEFAULT_START_DATE,
    end_date: date = DEFAULT_END_DATE,
    seed: int | None = None,
) -> AppointmentList:
    """Generate synthetic appointment records.

    Appointment dates fall on weekdays and Saturdays between start_date and
    end_date; registration precedes the appointment by a gamma-distributed
    wait.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if end_date <= start_date:
        raise ValueError("end_date must be after start_date")
    if seed is not None:
        seed_generators(seed)

    records: AppointmentList = []

    for _ in range(count):
        appointment_date = fake.date_between(start_date=start_date, end_date=end_date)
        # No Sunday clinics
        if appointment_date.weekday() == 6:
            appointment_date -= timedelta(days=1)

        wait_days = gamma_wait_time()
        registration_date = appointment_date - timedelta(days=wait_days)

        age_band = weighted_choice(AGE_BAND_WEIGHTS)
        low, high = AGE_BAND_RANGES[age_band]
        age = random.randint(low, high)

        conditions = {
            flag: random.random() < prevalence
            for flag, prevalence in CONDITION_PREVALENCE.items()
        }
        # Children are not smokers or alcoholics in the export
        if age < 18:
            conditions["smoker"] = False
            conditions["alcoholism"] = False

        # Reminders go out for appointments booked ahead
        sms_reminders = weighted_choice(SMS_REMINDER_WEIGHTS) if wait_days > 1 else 0

        probability = calculate_no_show_probability(
            age=age,
            wait_days=wait_days,
            sms_reminders=sms_reminders,
            appointment_date=appointment_date,
            conditions=conditions,
        )
        status = AttendanceStatus.NO_SHOW if random.random() < probability else AttendanceStatus.SHOW_UP

        records.append(
            AppointmentRecord(
                age=age,
                gender=weighted_choice(GENDER_WEIGHTS),
                registration_date=registration_date,
                appointment_date=appointment_date,
                status=status,
                handicap=weighted_choice(HANDICAP_WEIGHTS),
                sms_reminders=sms_reminders,
                **conditions,
            )
        )

    return records


def inject_outliers(records: AppointmentList, negative_ages: int = 0, long_waits: int = 0) -> AppointmentList:
    """Append data-error records the cleaning stage is expected to filter.

    Copies of existing records get a negative age or a registration date
    more than a year before the appointment.
    """
    if not records and (negative_ages or long_waits):
        raise ValueError("Cannot inject outliers into an empty record list")

    result = list(records)
    for i in range(negative_ages):
        template = records[i % len(records)]
        result.append(replace(template, age=-random.randint(1, 5)))
    for i in range(long_waits):
        template = records[i % len(records)]
        wait = random.randint(366, 400)
        result.append(replace(template, registration_date=template.appointment_date - timedelta(days=wait)))
    return result


# =============================================================================
# Data Export Functions
# =============================================================================


def records_to_raw_frame(records: AppointmentList) -> pd.DataFrame:
    """Convert records to a DataFrame in the raw export's column layout."""
    rows = []
    for record in records:
        registration = datetime.combine(record.registration_date, fake.time_object())
        rows.append(
            {
                "Age": record.age,
                "Gender": record.gender.value,
                "AppointmentRegistration": registration.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "ApointmentData": record.appointment_date.strftime("%Y-%m-%dT00:00:00Z"),
                "DayOfTheWeek": record.weekday,
                "Status": record.status.value,
                "Diabetes": int(record.diabetes),
                "Alcoolism": int(record.alcoholism),
                "HiperTension": int(record.hypertension),
                "Handcap": record.handicap,
                "Smokes": int(record.smoker),
                "Scholarship": int(record.welfare),
                "Tuberculosis": int(record.tuberculosis),
                "Sms_Reminder": record.sms_reminders,
                # The export stores the wait as a negative day count
                "AwaitingTime": -record.wait_days,
            }
        )
    return pd.DataFrame(rows)


def generate_dataset(
    output_path: Path | str,
    count: int = 10000,
    negative_ages: int = 1,
    long_waits: int = 1,
    seed: int | None = None,
) -> Path:
    """Generate records and save them as a raw-format CSV.

    Args:
        output_path: CSV file to write
        count: Number of valid appointments
        negative_ages: Extra records with a negative age
        long_waits: Extra records with a wait over 365 days
        seed: Optional random seed

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"Generating {count:,} appointments...")
    records = generate_records(count, seed=seed)
    records = inject_outliers(records, negative_ages=negative_ages, long_waits=long_waits)

    df = records_to_raw_frame(records)
    df.to_csv(output_path, index=False)

    no_show_rate = sum(1 for r in records if r.no_show) / max(1, len(records))
    print("\n=== Generation Summary ===")
    print(f"Appointments: {len(records):,}")
    print(f"Outliers:     {negative_ages + long_waits:,}")
    print(f"No-show rate: {no_show_rate:.1%}")
    print(f"Saved to:     {output_path}")

    return output_path


# =============================================================================
# CLI Entry Point
# =============================================================================


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate synthetic appointment no-show data")
    parser.add_argument(
        "--output",
        type=str,
        default="./data/synthetic/appointments.csv",
        help="Output CSV path",
    )
    parser.add_argument(
        "--appointments",
        type=int,
        default=10000,
        help="Number of appointments to generate",
    )
    parser.add_argument(
        "--negative-ages",
        type=int,
        default=1,
        help="Number of negative-age records to inject",
    )
    parser.add_argument(
        "--long-waits",
        type=int,
        default=1,
        help="Number of records with a wait over 365 days to inject",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed",
    )

    args = parser.parse_args()

    generate_dataset(
        output_path=args.output,
        count=args.appointments,
        negative_ages=args.negative_ages,
        long_waits=args.long_waits,
        seed=args.seed,
    )

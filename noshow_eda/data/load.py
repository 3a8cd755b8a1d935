"""Load the raw appointment export.

Usage:
    from noshow_eda.data.load import load_raw_appointments
    raw = load_raw_appointments(Path("data/No-show-Issue-Comma-300k.csv"))
"""

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


def load_raw_appointments(path: Path | str, sep: str = ",") -> pd.DataFrame:
    """Load the raw appointment file without any type coercion.

    Every column is read as text so that the cleaning stage decides how
    each field is parsed. Only the raw delimited export is accepted; the
    cleaned parquet written by --save-clean is not an input.

    Args:
        path: Path to the delimited text file
        sep: Field separator

    Returns:
        Raw appointments DataFrame
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Appointment file not found: {path}")
    if path.suffix == ".parquet":
        raise ValueError(f"Expected the raw delimited export, got a parquet file: {path}")

    df = pd.read_csv(path, sep=sep, dtype=str, skipinitialspace=True)

    df.columns = [str(col).strip() for col in df.columns]
    logger.info(f"Loaded {path.name}: {len(df):,} rows, {len(df.columns)} columns")
    return df

"""Data loading utilities for the excess mortality pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from mortality_core.exceptions import DataQualityError
from mortality_core.forecasting.config import RAW_COLUMNS

logger = logging.getLogger(__name__)


def normalize_deaths_frame(raw_df: pd.DataFrame) -> pd.DataFrame:
    """Rename raw columns and coerce dates and counts.

    Args:
        raw_df: DataFrame with 'series_name', 'parameter' and 'value' columns.

    Returns:
        DataFrame with columns 'Age', 'Date' (datetime64) and 'Deaths' (float),
        sorted by Age and Date.

    Raises:
        DataQualityError: If required columns are missing or any row has an
            unparseable date, a non-numeric count or a negative count.
    """
    missing_columns = [col for col in RAW_COLUMNS if col not in raw_df.columns]
    if missing_columns:
        raise DataQualityError(
            f"Missing required columns in deaths data: {missing_columns}. "
            f"Required: {list(RAW_COLUMNS)}"
        )

    df = raw_df[list(RAW_COLUMNS)].rename(columns=RAW_COLUMNS)
    df["Age"] = df["Age"].astype(str).str.strip()
    df["Date"] = pd.to_datetime(df["Date"], errors="coerce")
    df["Deaths"] = pd.to_numeric(df["Deaths"], errors="coerce")

    bad_dates = df["Date"].isna()
    if bad_dates.any():
        rows = df.index[bad_dates].tolist()[:5]
        raise DataQualityError(
            f"{int(bad_dates.sum())} rows have unparseable dates (e.g. rows {rows})"
        )

    bad_values = df["Deaths"].isna()
    if bad_values.any():
        rows = df.index[bad_values].tolist()[:5]
        raise DataQualityError(
            f"{int(bad_values.sum())} rows have non-numeric death counts (e.g. rows {rows})"
        )

    negative = df["Deaths"] < 0
    if negative.any():
        rows = df.index[negative].tolist()[:5]
        raise DataQualityError(
            f"{int(negative.sum())} rows have negative death counts (e.g. rows {rows})"
        )

    df["Deaths"] = df["Deaths"].astype(float)
    return df.sort_values(["Age", "Date"]).reset_index(drop=True)


def load_deaths_csv(csv_path: str | Path) -> pd.DataFrame:
    """Load weekly deaths by age from a CSV file.

    Args:
        csv_path: Path to the CSV with 'series_name', 'parameter' and 'value' columns.

    Returns:
        DataFrame with columns 'Age', 'Date' and 'Deaths', sorted by Age and Date.

    Raises:
        FileNotFoundError: If the CSV file does not exist
        DataQualityError: If the file cannot be parsed or has malformed rows
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Deaths data not found at {csv_path}")

    try:
        raw_df = pd.read_csv(csv_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataQualityError(f"Could not parse {csv_path}: {e}") from e

    df = normalize_deaths_frame(raw_df)
    logger.info(f"Loaded {len(df)} rows for {df['Age'].nunique()} cohorts from {csv_path}")
    return df

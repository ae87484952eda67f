"""Data preparation utilities for the excess mortality pipeline.

This module turns raw weekly deaths by age into the single-cohort series the
model is fitted on: one value per period, with zero-valued placeholder rows
covering periods of the current year that have no observations yet.
"""

from __future__ import annotations

import logging

import pandas as pd
from pandas.tseries.frequencies import to_offset

from mortality_core.exceptions import DataQualityError
from mortality_core.forecasting.config import AGGREGATION_FREQ

logger = logging.getLogger(__name__)

SERIES_COLUMNS = ["Date", "Deaths", "is_placeholder"]


def _empty_series() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Date": pd.Series(dtype="datetime64[ns]"),
            "Deaths": pd.Series(dtype=float),
            "is_placeholder": pd.Series(dtype=bool),
        }
    )


def filter_cohort(df: pd.DataFrame, cohort: str) -> pd.DataFrame:
    """Select the rows of one cohort.

    An unknown cohort label yields an empty frame (with a warning), not an error.

    Args:
        df: DataFrame with columns 'Age', 'Date' and 'Deaths'
        cohort: Cohort label, e.g. "80 and over"

    Returns:
        DataFrame with columns 'Date' and 'Deaths', sorted by Date
    """
    cohort_df = df.loc[df["Age"] == cohort, ["Date", "Deaths"]]
    if cohort_df.empty:
        available = sorted(df["Age"].unique().tolist()) if "Age" in df.columns else []
        logger.warning(f"Cohort '{cohort}' not found in data. Available cohorts: {available}")
    return cohort_df.sort_values("Date").reset_index(drop=True)


def validate_series(series: pd.DataFrame) -> None:
    """Check that a series has unique, increasing dates.

    Raises:
        DataQualityError: If dates are duplicated or out of order
    """
    dates = series["Date"]
    duplicated = dates[dates.duplicated()]
    if not duplicated.empty:
        shown = [d.date().isoformat() for d in duplicated.iloc[:5]]
        raise DataQualityError(f"Series has {len(duplicated)} duplicate dates: {shown}")
    if not dates.is_monotonic_increasing:
        raise DataQualityError("Series dates are not in increasing order")


def aggregate_by_period(series: pd.DataFrame, freq: str = AGGREGATION_FREQ) -> pd.DataFrame:
    """Average observations within each calendar period.

    The result is dated at the start of each period, so aggregating an
    already-aggregated series returns it unchanged.

    Args:
        series: DataFrame with columns 'Date' and 'Deaths'
        freq: Pandas period-start frequency alias (default: "MS", month start)

    Returns:
        DataFrame with columns 'Date' and 'Deaths', one row per period
    """
    if series.empty:
        return series[["Date", "Deaths"]].copy()

    offset = to_offset(freq)
    period_start = series["Date"].dt.normalize().map(offset.rollback)
    grouped = series.groupby(period_start)["Deaths"].mean()
    result = grouped.rename_axis("Date").reset_index()
    return result.sort_values("Date").reset_index(drop=True)


def add_placeholder_rows(
    series: pd.DataFrame,
    freq: str,
    through: str | pd.Timestamp | None = None,
) -> pd.DataFrame:
    """Append zero-valued placeholder rows up to the end of the horizon.

    Placeholders start one period after the last observation and run through
    `through` (default: the last period of the last observed year). They are
    flagged with is_placeholder=True and must never be used as observations.

    Args:
        series: DataFrame with columns 'Date' and 'Deaths'
        freq: Pandas frequency alias of the series
        through: Last date to pad to (inclusive)

    Returns:
        DataFrame with columns 'Date', 'Deaths' and 'is_placeholder'
    """
    observed = series[["Date", "Deaths"]].copy()
    observed["is_placeholder"] = False
    if observed.empty:
        return _empty_series()

    last_date = observed["Date"].iloc[-1]
    if through is None:
        through = pd.Timestamp(year=last_date.year, month=12, day=31)
    through = pd.Timestamp(through)

    offset = to_offset(freq)
    pad_dates = pd.date_range(start=last_date + offset, end=through, freq=offset)
    if len(pad_dates) == 0:
        return observed.reset_index(drop=True)

    logger.debug(f"Adding {len(pad_dates)} placeholder rows through {through.date()}")
    placeholders = pd.DataFrame({"Date": pad_dates, "Deaths": 0.0, "is_placeholder": True})
    return pd.concat([observed, placeholders], ignore_index=True)


def build_cohort_series(
    df: pd.DataFrame,
    cohort: str,
    freq: str | None = AGGREGATION_FREQ,
    through: str | pd.Timestamp | None = None,
) -> pd.DataFrame:
    """Build the per-period series for one cohort.

    Args:
        df: DataFrame with columns 'Age', 'Date' and 'Deaths' (see load_deaths_csv)
        cohort: Cohort label to select
        freq: Aggregation frequency. None keeps the native (weekly) series.
        through: Last date for placeholder rows (default: end of last observed year)

    Returns:
        DataFrame with columns 'Date', 'Deaths' and 'is_placeholder'. Empty if
        the cohort is not present.

    Raises:
        DataQualityError: If the cohort's raw dates are duplicated, or the native
            series has no inferable frequency
    """
    cohort_df = filter_cohort(df, cohort)
    if cohort_df.empty:
        return _empty_series()

    validate_series(cohort_df)

    if freq is None:
        freq = pd.infer_freq(cohort_df["Date"]) if len(cohort_df) >= 3 else None
        if freq is None:
            raise DataQualityError(
                "Could not infer a regular frequency for the native series; "
                "aggregate it by period instead"
            )
        series = cohort_df
    else:
        series = aggregate_by_period(cohort_df, freq)

    return add_placeholder_rows(series, freq, through)


def training_frame(series: pd.DataFrame, cutoff: str | pd.Timestamp) -> pd.DataFrame:
    """Select the rows the model is trained on.

    Only observed rows strictly before the cutoff are kept, so placeholder
    rows never reach the model.

    Args:
        series: DataFrame with columns 'Date', 'Deaths' and 'is_placeholder'
        cutoff: First date excluded from training

    Returns:
        DataFrame with columns 'ds' and 'y'
    """
    mask = series["Date"] < pd.Timestamp(cutoff)
    if "is_placeholder" in series.columns:
        mask &= ~series["is_placeholder"].astype(bool)
    train = series.loc[mask, ["Date", "Deaths"]]
    return train.rename(columns={"Date": "ds", "Deaths": "y"}).reset_index(drop=True)

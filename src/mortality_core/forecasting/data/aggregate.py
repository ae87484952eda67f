"""Descriptive aggregates used by the bar charts."""

from __future__ import annotations

import pandas as pd


def yearly_totals(df: pd.DataFrame) -> pd.DataFrame:
    """Total deaths per cohort and calendar year.

    Args:
        df: DataFrame with columns 'Age', 'Date' and 'Deaths'

    Returns:
        DataFrame with columns 'Age', 'Year', 'Deaths' and 'weeks' (number of
        observations summed, so partial years can be told apart)
    """
    if df.empty:
        return pd.DataFrame(columns=["Age", "Year", "Deaths", "weeks"])

    totals = (
        df.assign(Year=df["Date"].dt.year)
        .groupby(["Age", "Year"])
        .agg(Deaths=("Deaths", "sum"), weeks=("Deaths", "size"))
        .reset_index()
    )
    return totals.sort_values(["Age", "Year"]).reset_index(drop=True)


def period_means(series: pd.DataFrame) -> pd.DataFrame:
    """Observed rows of a prepared series with their year and month.

    Args:
        series: DataFrame with columns 'Date', 'Deaths' and 'is_placeholder'

    Returns:
        DataFrame with columns 'Date', 'Year', 'Month' and 'Deaths'
    """
    observed = series.loc[~series["is_placeholder"].astype(bool), ["Date", "Deaths"]]
    return observed.assign(
        Year=observed["Date"].dt.year,
        Month=observed["Date"].dt.month,
    )[["Date", "Year", "Month", "Deaths"]].reset_index(drop=True)

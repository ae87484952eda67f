"""Cumulative excess mortality with credible bands.

For every chain the signed difference (yhat - observed) is accumulated over
time from the cutoff onward. The per-date distribution across chains is then
collapsed to its mean and empirical percentiles. Percentiles use linear
interpolation between order statistics (pandas/numpy "linear", Hyndman & Fan
type 7). The trajectory is not monotone: it may rise and fall.
"""

from __future__ import annotations

import logging

import pandas as pd

from mortality_core.exceptions import AlignmentError, DataQualityError
from mortality_core.forecasting.config import LOWER_PERCENTILE, UPPER_PERCENTILE

logger = logging.getLogger(__name__)

EXCESS_COLUMNS = ["date", "cum_delta_mean", "cum_delta_lower", "cum_delta_upper"]


def cumulative_excess(
    samples: pd.DataFrame,
    cutoff: str | pd.Timestamp,
    lower: float = LOWER_PERCENTILE,
    upper: float = UPPER_PERCENTILE,
) -> pd.DataFrame:
    """Summarise per-chain cumulative (yhat - Deaths) from the cutoff onward.

    Placeholder rows carry no observation and are left out of the sum.

    Args:
        samples: Long table with 'chain', 'Date', 'yhat', 'Deaths' and 'is_placeholder'
        cutoff: First date included in the accumulation
        lower: Lower percentile of the band (0-100)
        upper: Upper percentile of the band (0-100)

    Returns:
        DataFrame with EXCESS_COLUMNS, one row per date on/after the cutoff.
        Empty if there are no observed rows after the cutoff.

    Raises:
        DataQualityError: If required columns are missing
    """
    required = ["chain", "Date", "yhat", "Deaths", "is_placeholder"]
    missing_columns = [col for col in required if col not in samples.columns]
    if missing_columns:
        raise DataQualityError(f"Missing required columns in samples: {missing_columns}")

    post = samples.loc[samples["Date"] >= pd.Timestamp(cutoff)]
    placeholders = post["is_placeholder"].astype(bool)
    if placeholders.any():
        logger.debug(f"Skipping {post.loc[placeholders, 'Date'].nunique()} placeholder dates")
    post = post.loc[~placeholders]

    if post.empty:
        logger.warning(
            f"No observed rows on or after {pd.Timestamp(cutoff).date()}; excess is empty"
        )
        return pd.DataFrame(columns=EXCESS_COLUMNS)

    post = post.sort_values(["chain", "Date"])
    delta = post["yhat"] - post["Deaths"]
    cum_delta = delta.groupby(post["chain"]).cumsum()

    by_date = cum_delta.groupby(post["Date"])
    stats = pd.DataFrame(
        {
            "cum_delta_mean": by_date.mean(),
            "cum_delta_lower": by_date.quantile(lower / 100.0, interpolation="linear"),
            "cum_delta_upper": by_date.quantile(upper / 100.0, interpolation="linear"),
        }
    )
    stats = stats.rename_axis("date").reset_index()[EXCESS_COLUMNS]

    out_of_band = (stats["cum_delta_mean"] < stats["cum_delta_lower"]) | (
        stats["cum_delta_mean"] > stats["cum_delta_upper"]
    )
    if out_of_band.any():
        logger.warning(
            f"Mean cumulative excess falls outside the {lower:g}-{upper:g} percentile band "
            f"on {int(out_of_band.sum())} dates"
        )

    return stats


def join_forecast(forecast: pd.DataFrame, series: pd.DataFrame) -> pd.DataFrame:
    """Full join of the forecast table with the prepared series.

    Placeholder rows take the forecast values and their observed deaths become
    missing. A placeholder without a matching forecast date is an error.

    Args:
        forecast: Forecast table with a 'date' column
        series: Prepared series with 'Date', 'Deaths' and 'is_placeholder'

    Returns:
        DataFrame with the forecast columns plus 'Deaths' and 'is_placeholder',
        sorted by date

    Raises:
        AlignmentError: If a placeholder date has no forecast row
    """
    placeholders = series.loc[series["is_placeholder"].astype(bool), "Date"]
    unmatched = placeholders[~placeholders.isin(forecast["date"])]
    if not unmatched.empty:
        shown = [d.date().isoformat() for d in unmatched.iloc[:5]]
        raise AlignmentError(
            f"{len(unmatched)} placeholder dates have no forecast row (e.g. {shown}); "
            "increase the forecast horizon"
        )

    observed = series.rename(columns={"Date": "date"})
    joined = forecast.merge(observed, on="date", how="outer", validate="one_to_one")
    joined["is_placeholder"] = joined["is_placeholder"].eq(True)
    joined.loc[joined["is_placeholder"], "Deaths"] = float("nan")
    return joined.sort_values("date").reset_index(drop=True)


def summarize_excess(excess: pd.DataFrame) -> dict[str, object]:
    """Headline numbers of a cumulative excess trajectory.

    Returns:
        Dictionary with the final date and band, plus the dates and values of the
        highest and lowest mean. Empty if `excess` is empty.
    """
    if excess.empty:
        return {}

    final = excess.iloc[-1]
    peak = excess.loc[excess["cum_delta_mean"].idxmax()]
    trough = excess.loc[excess["cum_delta_mean"].idxmin()]
    return {
        "final_date": pd.Timestamp(final["date"]).date(),
        "final_mean": float(final["cum_delta_mean"]),
        "final_lower": float(final["cum_delta_lower"]),
        "final_upper": float(final["cum_delta_upper"]),
        "peak_date": pd.Timestamp(peak["date"]).date(),
        "peak_mean": float(peak["cum_delta_mean"]),
        "trough_date": pd.Timestamp(trough["date"]).date(),
        "trough_mean": float(trough["cum_delta_mean"]),
    }

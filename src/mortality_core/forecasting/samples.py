"""Reshaping utilities for posterior sample matrices.

Sample matrices are wide (one row per time step, one column per chain). The
pipeline works on long tables keyed by (chain, time_step); every join between
them is checked so that mismatched keys fail loudly instead of dropping rows.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from mortality_core.exceptions import AlignmentError
from mortality_core.forecasting.types import PosteriorSamples

logger = logging.getLogger(__name__)

SAMPLE_KEYS = ["chain", "time_step"]


def samples_to_long(matrix: np.ndarray, name: str) -> pd.DataFrame:
    """Reshape a (time_step x chain) matrix into a long table.

    Args:
        matrix: 2-D array, one row per time step and one column per chain
        name: Name of the value column (e.g. "trend", "yhat")

    Returns:
        DataFrame with columns 'chain', 'time_step' and `name`, ordered by
        chain then time_step
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2:
        raise AlignmentError(f"'{name}' samples must be 2-D, got shape {matrix.shape}")

    n_steps, n_chains = matrix.shape
    return pd.DataFrame(
        {
            "chain": np.repeat(np.arange(n_chains), n_steps),
            "time_step": np.tile(np.arange(n_steps), n_chains),
            name: matrix.T.ravel(),
        }
    )


def merge_sample_tables(trend_long: pd.DataFrame, yhat_long: pd.DataFrame) -> pd.DataFrame:
    """Merge long 'trend' and 'yhat' tables on (chain, time_step).

    Raises:
        AlignmentError: If either table has duplicate keys or the key sets differ
    """
    left = pd.MultiIndex.from_frame(trend_long[SAMPLE_KEYS])
    right = pd.MultiIndex.from_frame(yhat_long[SAMPLE_KEYS])

    for name, keys in (("trend", left), ("yhat", right)):
        if keys.has_duplicates:
            raise AlignmentError(f"'{name}' samples have duplicate (chain, time_step) keys")

    if not left.sort_values().equals(right.sort_values()):
        only_trend = len(left.difference(right))
        only_yhat = len(right.difference(left))
        raise AlignmentError(
            f"Sample tables are misaligned: {only_trend} keys only in 'trend', "
            f"{only_yhat} keys only in 'yhat'"
        )

    return trend_long.merge(yhat_long, on=SAMPLE_KEYS, how="inner", validate="one_to_one")


def posterior_to_long(samples: PosteriorSamples) -> pd.DataFrame:
    """Long table of both sampled quantities with the date of each time step.

    Returns:
        DataFrame with columns 'chain', 'time_step', 'Date', 'trend' and 'yhat'
    """
    merged = merge_sample_tables(
        samples_to_long(samples.trend, "trend"),
        samples_to_long(samples.yhat, "yhat"),
    )
    merged.insert(2, "Date", samples.dates[merged["time_step"].to_numpy()])
    return merged


def attach_observations(samples: pd.DataFrame, series: pd.DataFrame) -> pd.DataFrame:
    """Join observed deaths onto the long sample table by time step.

    Time step i corresponds to row i of the prepared series.

    Args:
        samples: Long sample table with 'chain', 'time_step' and 'Date'
        series: Prepared series with 'Date', 'Deaths' and 'is_placeholder'

    Returns:
        Long sample table with 'Deaths' and 'is_placeholder' added

    Raises:
        AlignmentError: If the time steps do not match the series rows or dates
    """
    n_steps = samples["time_step"].nunique()
    if n_steps != len(series):
        raise AlignmentError(
            f"Samples cover {n_steps} time steps but the series has {len(series)} rows"
        )

    observed = series[["Date", "Deaths", "is_placeholder"]].reset_index(drop=True)
    observed = observed.rename(columns={"Date": "series_date"})
    observed.insert(0, "time_step", np.arange(len(observed)))

    joined = samples.merge(observed, on="time_step", how="left", validate="many_to_one")
    mismatched = joined["Date"] != joined["series_date"]
    if mismatched.any():
        raise AlignmentError(
            f"{int(mismatched.sum())} sample rows have a date that differs from the series"
        )

    logger.debug(f"Attached observations to {len(joined)} sample rows")
    return joined.drop(columns="series_date")

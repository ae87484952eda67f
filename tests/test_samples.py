"""Tests for reshaping and aligning posterior sample tables."""

import numpy as np
import pandas as pd
import pytest

from mortality_core.exceptions import AlignmentError
from mortality_core.forecasting.samples import (
    attach_observations,
    merge_sample_tables,
    posterior_to_long,
    samples_to_long,
)
from mortality_core.forecasting.types import PosteriorSamples


@pytest.fixture
def series() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Date": pd.date_range("2019-11-01", periods=3, freq="MS"),
            "Deaths": [500.0, 510.0, 0.0],
            "is_placeholder": [False, False, True],
        }
    )


def test_samples_to_long_orders_by_chain_then_step() -> None:
    """A (time_step x chain) matrix becomes one row per (chain, time_step)."""
    matrix = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    long = samples_to_long(matrix, "yhat")

    assert list(long.columns) == ["chain", "time_step", "yhat"]
    assert len(long) == 6
    assert long.loc[long["chain"] == 0, "yhat"].tolist() == [1.0, 3.0, 5.0]
    assert long.loc[long["chain"] == 1, "yhat"].tolist() == [2.0, 4.0, 6.0]
    assert long.loc[long["chain"] == 1, "time_step"].tolist() == [0, 1, 2]


def test_samples_to_long_rejects_1d() -> None:
    with pytest.raises(AlignmentError):
        samples_to_long(np.arange(3.0), "trend")


def test_merge_sample_tables_aligned() -> None:
    trend = samples_to_long(np.zeros((4, 3)), "trend")
    yhat = samples_to_long(np.ones((4, 3)), "yhat")
    merged = merge_sample_tables(trend, yhat)

    assert len(merged) == 12
    assert (merged["trend"] == 0.0).all()
    assert (merged["yhat"] == 1.0).all()


def test_merge_sample_tables_missing_key_is_fatal() -> None:
    """Unmatched keys are never dropped silently."""
    trend = samples_to_long(np.zeros((4, 3)), "trend")
    yhat = samples_to_long(np.ones((4, 3)), "yhat").iloc[:-1]

    with pytest.raises(AlignmentError, match="misaligned"):
        merge_sample_tables(trend, yhat)


def test_merge_sample_tables_shifted_keys_are_fatal() -> None:
    """Same row count but different keys still fails."""
    trend = samples_to_long(np.zeros((4, 3)), "trend")
    yhat = samples_to_long(np.ones((4, 3)), "yhat")
    yhat["time_step"] = yhat["time_step"] + 1

    with pytest.raises(AlignmentError, match="misaligned"):
        merge_sample_tables(trend, yhat)


def test_merge_sample_tables_duplicate_keys_are_fatal() -> None:
    trend = samples_to_long(np.zeros((2, 2)), "trend")
    trend = pd.concat([trend, trend.iloc[[0]]], ignore_index=True)
    yhat = samples_to_long(np.ones((2, 2)), "yhat")

    with pytest.raises(AlignmentError, match="duplicate"):
        merge_sample_tables(trend, yhat)


def test_posterior_samples_shape_must_match_dates() -> None:
    dates = pd.date_range("2020-01-01", periods=3, freq="MS")
    with pytest.raises(AlignmentError):
        PosteriorSamples(dates=dates, trend=np.zeros((2, 5)), yhat=np.zeros((2, 5)))
    with pytest.raises(AlignmentError):
        PosteriorSamples(dates=dates, trend=np.zeros((3, 5)), yhat=np.zeros((3, 4)))


def test_time_steps_match_series_rows(series) -> None:
    """Distinct time steps in the long table equal the number of series rows."""
    rng = np.random.default_rng(0)
    posterior = PosteriorSamples(
        dates=pd.DatetimeIndex(series["Date"]),
        trend=rng.normal(size=(3, 50)),
        yhat=rng.normal(size=(3, 50)),
    )
    joined = attach_observations(posterior_to_long(posterior), series)

    assert joined["time_step"].nunique() == len(series)
    assert len(joined) == 3 * 50
    assert set(joined.columns) >= {"chain", "time_step", "Date", "trend", "yhat", "Deaths"}
    step_two = joined[joined["time_step"] == 2]
    assert step_two["is_placeholder"].all()
    assert (step_two["Date"] == pd.Timestamp("2020-01-01")).all()


def test_attach_observations_length_mismatch_is_fatal(series) -> None:
    posterior = PosteriorSamples(
        dates=pd.DatetimeIndex(series["Date"].iloc[:2]),
        trend=np.zeros((2, 10)),
        yhat=np.zeros((2, 10)),
    )
    with pytest.raises(AlignmentError, match="time steps"):
        attach_observations(posterior_to_long(posterior), series)


def test_attach_observations_date_mismatch_is_fatal(series) -> None:
    posterior = PosteriorSamples(
        dates=pd.DatetimeIndex(series["Date"]) + pd.Timedelta(days=1),
        trend=np.zeros((3, 10)),
        yhat=np.zeros((3, 10)),
    )
    with pytest.raises(AlignmentError, match="date"):
        attach_observations(posterior_to_long(posterior), series)

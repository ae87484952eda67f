"""Tests for the cumulative excess aggregation and the forecast join."""

import numpy as np
import pandas as pd
import pytest

from mortality_core.exceptions import AlignmentError, DataQualityError
from mortality_core.forecasting.excess import (
    EXCESS_COLUMNS,
    cumulative_excess,
    join_forecast,
    summarize_excess,
)


def _long_samples(dates, deaths, yhat, placeholders=None) -> pd.DataFrame:
    """Build a long sample table from a (time_step x chain) yhat matrix."""
    yhat = np.asarray(yhat, dtype=float)
    n_steps, n_chains = yhat.shape
    placeholders = placeholders or [False] * n_steps
    return pd.DataFrame(
        {
            "chain": np.repeat(np.arange(n_chains), n_steps),
            "time_step": np.tile(np.arange(n_steps), n_chains),
            "Date": np.tile(pd.to_datetime(dates), n_chains),
            "yhat": yhat.T.ravel(),
            "trend": yhat.T.ravel(),
            "Deaths": np.tile(deaths, n_chains),
            "is_placeholder": np.tile(placeholders, n_chains),
        }
    )


@pytest.fixture
def small_samples() -> pd.DataFrame:
    """Three chains predicting 100, 101 and 102 deaths at every date."""
    dates = ["2019-11-01", "2019-12-01", "2020-01-01", "2020-02-01"]
    deaths = [100.0, 100.0, 90.0, 95.0]
    yhat = np.tile([100.0, 101.0, 102.0], (4, 1))
    return _long_samples(dates, deaths, yhat)


def test_cumulative_excess_values(small_samples) -> None:
    """Per-chain running sums of (yhat - observed) summarised per date."""
    excess = cumulative_excess(small_samples, "2020-01-01", lower=5.0, upper=95.0)

    assert list(excess.columns) == EXCESS_COLUMNS
    assert excess["date"].tolist() == [pd.Timestamp("2020-01-01"), pd.Timestamp("2020-02-01")]
    # Chain c: 10 + c after January, 15 + 2c after February
    assert excess["cum_delta_mean"].tolist() == pytest.approx([11.0, 17.0])
    # Linear interpolation between order statistics
    assert excess["cum_delta_lower"].tolist() == pytest.approx([10.1, 15.2])
    assert excess["cum_delta_upper"].tolist() == pytest.approx([11.9, 18.8])


def test_cumulative_excess_skips_placeholders() -> None:
    """Placeholder zeros never enter the running sum."""
    dates = ["2020-01-01", "2020-02-01", "2020-03-01"]
    yhat = np.full((3, 2), 100.0)
    samples = _long_samples(dates, [90.0, 90.0, 0.0], yhat, placeholders=[False, False, True])

    excess = cumulative_excess(samples, "2020-01-01")
    assert excess["date"].tolist() == [pd.Timestamp("2020-01-01"), pd.Timestamp("2020-02-01")]
    assert excess["cum_delta_mean"].iloc[-1] == pytest.approx(20.0)


def test_percentile_ordering_holds() -> None:
    """upper >= mean >= lower at every date for a realistic sample cloud."""
    rng = np.random.default_rng(42)
    dates = pd.date_range("2020-01-01", periods=12, freq="MS")
    deaths = np.full(12, 500.0)
    yhat = rng.normal(505.0, 20.0, size=(12, 1000))
    excess = cumulative_excess(_long_samples(dates, deaths, yhat), "2020-01-01")

    assert len(excess) == 12
    assert (excess["cum_delta_upper"] >= excess["cum_delta_mean"]).all()
    assert (excess["cum_delta_mean"] >= excess["cum_delta_lower"]).all()


def test_trajectory_can_fall_back_toward_zero() -> None:
    """The cumulative trajectory is not forced to be monotone."""
    dates = pd.date_range("2020-01-01", periods=4, freq="MS")
    deaths = [90.0, 90.0, 110.0, 110.0]
    yhat = np.full((4, 5), 100.0)
    excess = cumulative_excess(_long_samples(dates, deaths, yhat), "2020-01-01")

    assert excess["cum_delta_mean"].tolist() == pytest.approx([10.0, 20.0, 10.0, 0.0])


def test_cumulative_excess_empty_after_cutoff(small_samples) -> None:
    excess = cumulative_excess(small_samples, "2030-01-01")
    assert excess.empty
    assert list(excess.columns) == EXCESS_COLUMNS
    assert summarize_excess(excess) == {}


def test_cumulative_excess_requires_columns(small_samples) -> None:
    with pytest.raises(DataQualityError, match="Deaths"):
        cumulative_excess(small_samples.drop(columns="Deaths"), "2020-01-01")


def test_summarize_excess(small_samples) -> None:
    summary = summarize_excess(cumulative_excess(small_samples, "2020-01-01"))
    assert summary["final_mean"] == pytest.approx(17.0)
    assert summary["peak_mean"] == pytest.approx(17.0)
    assert summary["trough_mean"] == pytest.approx(11.0)
    assert str(summary["final_date"]) == "2020-02-01"


def _forecast(dates) -> pd.DataFrame:
    n = len(dates)
    return pd.DataFrame(
        {
            "date": pd.to_datetime(dates),
            "point_estimate": np.full(n, 100.0),
            "lower_bound": np.full(n, 90.0),
            "upper_bound": np.full(n, 110.0),
            "trend_component": np.full(n, 100.0),
            "seasonal_component": np.zeros(n),
        }
    )


def test_join_forecast_blanks_placeholder_deaths() -> None:
    """Matched placeholders keep forecast values and lose their zero."""
    series = pd.DataFrame(
        {
            "Date": pd.to_datetime(["2020-01-01", "2020-02-01"]),
            "Deaths": [95.0, 0.0],
            "is_placeholder": [False, True],
        }
    )
    joined = join_forecast(_forecast(["2019-12-01", "2020-01-01", "2020-02-01"]), series)

    assert len(joined) == 3
    row = joined[joined["date"] == pd.Timestamp("2020-02-01")].iloc[0]
    assert row["is_placeholder"]
    assert np.isnan(row["Deaths"])
    assert row["point_estimate"] == 100.0
    assert not joined.loc[joined["date"] == pd.Timestamp("2019-12-01"), "is_placeholder"].iloc[0]


def test_join_forecast_unmatched_placeholder_is_fatal() -> None:
    series = pd.DataFrame(
        {
            "Date": pd.to_datetime(["2020-01-01", "2020-02-01"]),
            "Deaths": [95.0, 0.0],
            "is_placeholder": [False, True],
        }
    )
    with pytest.raises(AlignmentError, match="placeholder"):
        join_forecast(_forecast(["2019-12-01", "2020-01-01"]), series)

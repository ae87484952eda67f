"""Tests for cohort series preparation."""

import pandas as pd
import pytest

from mortality_core.exceptions import DataQualityError
from mortality_core.forecasting.data.aggregate import period_means, yearly_totals
from mortality_core.forecasting.data.preparation import (
    add_placeholder_rows,
    aggregate_by_period,
    build_cohort_series,
    filter_cohort,
    training_frame,
    validate_series,
)


def test_filter_cohort_unknown_label_returns_empty(weekly_deaths) -> None:
    """An unknown cohort is not an error at this stage; it yields an empty frame."""
    result = filter_cohort(weekly_deaths, "90 and over")
    assert result.empty
    assert list(result.columns) == ["Date", "Deaths"]


def test_build_cohort_series_unknown_label_returns_empty(weekly_deaths) -> None:
    series = build_cohort_series(weekly_deaths, "90 and over")
    assert series.empty
    assert list(series.columns) == ["Date", "Deaths", "is_placeholder"]


def test_aggregate_by_period_averages_weeks_within_month() -> None:
    """Weekly values are averaged per calendar month and dated at the month start."""
    series = pd.DataFrame(
        {
            "Date": pd.to_datetime(["2020-01-05", "2020-01-12", "2020-01-19", "2020-02-02"]),
            "Deaths": [100.0, 110.0, 120.0, 90.0],
        }
    )
    monthly = aggregate_by_period(series, "MS")

    assert monthly["Date"].tolist() == [pd.Timestamp("2020-01-01"), pd.Timestamp("2020-02-01")]
    assert monthly["Deaths"].tolist() == [110.0, 90.0]


def test_aggregate_by_period_is_idempotent(weekly_deaths) -> None:
    """Averaging an already-monthly series by month returns it unchanged."""
    cohort = filter_cohort(weekly_deaths, "80 and over")
    monthly = aggregate_by_period(cohort, "MS")
    again = aggregate_by_period(monthly, "MS")

    pd.testing.assert_frame_equal(monthly, again)


def test_add_placeholder_rows_pads_to_end_of_year() -> None:
    """Months after the last observation up to December get zero placeholders."""
    series = pd.DataFrame(
        {"Date": pd.date_range("2021-01-01", "2021-05-01", freq="MS"), "Deaths": 500.0}
    )
    padded = add_placeholder_rows(series, "MS")

    placeholders = padded[padded["is_placeholder"]]
    assert len(padded) == 12
    assert len(placeholders) == 7
    assert placeholders["Date"].iloc[0] == pd.Timestamp("2021-06-01")
    assert placeholders["Date"].iloc[-1] == pd.Timestamp("2021-12-01")
    assert (placeholders["Deaths"] == 0.0).all()
    assert not padded.loc[~padded["is_placeholder"], "Deaths"].eq(0.0).any()


def test_add_placeholder_rows_respects_through() -> None:
    series = pd.DataFrame(
        {"Date": pd.date_range("2021-01-01", "2021-05-01", freq="MS"), "Deaths": 500.0}
    )
    padded = add_placeholder_rows(series, "MS", through="2021-07-15")
    assert padded["is_placeholder"].sum() == 2


def test_add_placeholder_rows_full_year_adds_nothing() -> None:
    series = pd.DataFrame(
        {"Date": pd.date_range("2020-01-01", "2020-12-01", freq="MS"), "Deaths": 500.0}
    )
    padded = add_placeholder_rows(series, "MS")
    assert not padded["is_placeholder"].any()
    assert len(padded) == 12


def test_build_cohort_series_monthly(weekly_deaths) -> None:
    """The fixture runs to mid-2021, so the rest of 2021 is padded."""
    series = build_cohort_series(weekly_deaths, "80 and over", freq="MS")

    assert series["Date"].is_monotonic_increasing
    assert not series["Date"].duplicated().any()
    assert series["Date"].iloc[-1] == pd.Timestamp("2021-12-01")
    assert series["is_placeholder"].any()
    # Placeholders only follow observations
    last_observed = series.loc[~series["is_placeholder"], "Date"].max()
    assert (series.loc[series["is_placeholder"], "Date"] > last_observed).all()


def test_build_cohort_series_native_weekly(weekly_deaths) -> None:
    """freq=None keeps the weekly rows."""
    series = build_cohort_series(weekly_deaths, "80 and over", freq=None, through="2021-06-30")
    observed = series[~series["is_placeholder"]]
    assert len(observed) == len(weekly_deaths[weekly_deaths["Age"] == "80 and over"])
    assert (series["Date"].diff().dropna() == pd.Timedelta(days=7)).all()


def test_build_cohort_series_rejects_duplicate_dates(weekly_deaths) -> None:
    """Duplicate dates fail instead of being averaged away."""
    cohort = weekly_deaths[weekly_deaths["Age"] == "80 and over"]
    duplicated = pd.concat([weekly_deaths, cohort.iloc[[10]]], ignore_index=True)

    with pytest.raises(DataQualityError, match="duplicate"):
        build_cohort_series(duplicated, "80 and over")


def test_validate_series_rejects_unordered_dates() -> None:
    series = pd.DataFrame(
        {"Date": pd.to_datetime(["2020-02-01", "2020-01-01"]), "Deaths": [1.0, 2.0]}
    )
    with pytest.raises(DataQualityError, match="increasing"):
        validate_series(series)


def test_training_frame_excludes_cutoff_and_placeholders() -> None:
    """Only observed rows strictly before the cutoff are used for training."""
    series = pd.DataFrame(
        {
            "Date": pd.to_datetime(["2019-11-01", "2019-12-01", "2020-01-01", "2020-02-01"]),
            "Deaths": [500.0, 0.0, 480.0, 0.0],
            "is_placeholder": [False, True, False, True],
        }
    )
    train = training_frame(series, "2020-01-01")

    assert list(train.columns) == ["ds", "y"]
    assert train["ds"].tolist() == [pd.Timestamp("2019-11-01")]
    assert train["y"].tolist() == [500.0]


def test_yearly_totals_counts_weeks(weekly_deaths) -> None:
    totals = yearly_totals(weekly_deaths)
    old = totals[totals["Age"] == "80 and over"].set_index("Year")

    assert old.loc[2013, "weeks"] == 52
    assert old.loc[2021, "weeks"] < 52
    expected = weekly_deaths[
        (weekly_deaths["Age"] == "80 and over") & (weekly_deaths["Date"].dt.year == 2013)
    ]["Deaths"].sum()
    assert old.loc[2013, "Deaths"] == pytest.approx(expected)


def test_period_means_drops_placeholders(weekly_deaths) -> None:
    series = build_cohort_series(weekly_deaths, "80 and over")
    observed = period_means(series)
    assert len(observed) == int((~series["is_placeholder"]).sum())
    assert list(observed.columns) == ["Date", "Year", "Month", "Deaths"]

"""Shared synthetic data for the excess mortality tests."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

COHORT = "80 and over"


def make_weekly_deaths(
    start: str = "2011-01-02",
    weeks: int = 522,
    level: float = 500.0,
    amplitude: float = 60.0,
    noise: float = 5.0,
    drop_from: str | None = None,
    drop: float = 0.10,
    cohort: str = COHORT,
    seed: int = 0,
) -> pd.DataFrame:
    """Weekly deaths with a yearly cycle and an optional level drop.

    Returns:
        DataFrame with columns 'Age', 'Date' and 'Deaths'
    """
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, periods=weeks, freq="W-SUN")
    seasonal = amplitude * np.cos(2 * np.pi * (dates.dayofyear.to_numpy() - 15) / 365.25)
    values = level + seasonal + rng.normal(0.0, noise, weeks)
    if drop_from is not None:
        values = np.where(dates >= pd.Timestamp(drop_from), values * (1.0 - drop), values)
    return pd.DataFrame({"Age": cohort, "Date": dates, "Deaths": values})


@pytest.fixture
def weekly_deaths() -> pd.DataFrame:
    """Two cohorts of weekly deaths from 2011 through mid-2021."""
    old = make_weekly_deaths(weeks=548)
    young = make_weekly_deaths(weeks=548, level=40.0, amplitude=5.0, cohort="Less than 30", seed=1)
    return pd.concat([old, young], ignore_index=True)


@pytest.fixture
def raw_deaths_csv(tmp_path, weekly_deaths):
    """The weekly_deaths fixture written with the raw CSV column names."""
    raw = weekly_deaths.rename(columns={"Age": "series_name", "Date": "parameter", "Deaths": "value"})
    raw["parameter"] = raw["parameter"].dt.strftime("%Y-%m-%d")
    path = tmp_path / "weekly_deaths_by_age.csv"
    raw.to_csv(path, index=False)
    return path

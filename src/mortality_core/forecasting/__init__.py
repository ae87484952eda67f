"""Excess mortality forecasting module.

This module fits a trend + yearly seasonality model to deaths before a cutoff
and measures how far observed deaths drift from the model afterwards.

Example:
    >>> from mortality_core.forecasting import ExcessMortalityConfig, run_excess_mortality
    >>> from mortality_core.forecasting.data import load_deaths_csv
    >>>
    >>> deaths_df = load_deaths_csv("data/weekly_deaths_by_age.csv")
    >>> config = ExcessMortalityConfig(cohort="80 and over", cutoff="2020-01-01")
    >>> result = run_excess_mortality(deaths_df, config)
    >>>
    >>> print(result.forecast.head())  # point estimate, interval, components
    >>> print(result.excess.tail())    # cumulative excess with 5%/95% band

"""

from mortality_core.forecasting.api import (
    ExcessMortalityConfig,
    ExcessMortalityResult,
    run_excess_mortality,
)

__all__ = ["ExcessMortalityConfig", "ExcessMortalityResult", "run_excess_mortality"]

"""Mortality Core - excess mortality estimation for a single age cohort.

This package reproduces an excess-mortality analysis of weekly death counts:

- **Data preparation**: filter one cohort, average by month, pad the
  forecast horizon with placeholder rows
- **Model fit**: Bayesian trend + yearly seasonality fitted to pre-cutoff data
- **Posterior sampling**: forecast table plus thousands of posterior draws
- **Excess mortality**: cumulative (predicted - observed) deaths per draw,
  summarised as a mean and a 5%/95% credible band

Module Structure:
    mortality_core.forecasting: Pipeline API, models and formatters
    mortality_core.forecasting.data: CSV loading and series preparation
    mortality_core.config: DataPaths configuration

Quick Start:
    >>> from mortality_core import DataPaths
    >>> from mortality_core.forecasting import ExcessMortalityConfig, run_excess_mortality
    >>> from mortality_core.forecasting.data import load_deaths_csv
    >>>
    >>> paths = DataPaths.from_root("data", "output")
    >>> deaths_df = load_deaths_csv(paths.input_csv)
    >>> result = run_excess_mortality(deaths_df, ExcessMortalityConfig(cohort="80 and over"))
    >>> print(result.excess.tail())
"""

__version__ = "0.1.0"

from mortality_core.config import DataPaths
from mortality_core.exceptions import (
    AlignmentError,
    ConfigError,
    DataQualityError,
    ModelFitError,
    MortalityAPIError,
)

__all__ = [
    "AlignmentError",
    "ConfigError",
    "DataPaths",
    "DataQualityError",
    "ModelFitError",
    "MortalityAPIError",
    "__version__",
]

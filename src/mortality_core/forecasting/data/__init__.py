"""Data loading and preparation utilities."""

from mortality_core.forecasting.data.aggregate import period_means, yearly_totals
from mortality_core.forecasting.data.loaders import load_deaths_csv, normalize_deaths_frame
from mortality_core.forecasting.data.preparation import (
    add_placeholder_rows,
    aggregate_by_period,
    build_cohort_series,
    filter_cohort,
    training_frame,
    validate_series,
)

__all__ = [
    "add_placeholder_rows",
    "aggregate_by_period",
    "build_cohort_series",
    "filter_cohort",
    "load_deaths_csv",
    "normalize_deaths_frame",
    "period_means",
    "training_frame",
    "validate_series",
    "yearly_totals",
]

"""Base model interface for trend + seasonality backends.

This module defines the abstract base class every statistical backend
implements, so the pipeline only depends on fit / forecast / posterior
sampling and any compliant backend can be swapped in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import pandas as pd

from mortality_core.exceptions import ModelFitError
from mortality_core.forecasting.config import (
    MIN_TRAINING_OBSERVATIONS,
    N_SAMPLES,
    RANDOM_SEED,
)
from mortality_core.forecasting.types import ModelDebugInfo, ModelFit, PosteriorSamples

FORECAST_COLUMNS = [
    "date",
    "point_estimate",
    "lower_bound",
    "upper_bound",
    "trend_component",
    "seasonal_component",
]


class ForecastModel(ABC):
    """Abstract base class for trend + seasonality models.

    Subclasses implement fit(), forecast() and posterior_samples(). The shared
    check_training() enforces the training-data contract before any backend
    sees the data.
    """

    name = "base"

    def __init__(
        self,
        n_samples: int = N_SAMPLES,
        seed: int | None = RANDOM_SEED,
        min_observations: int = MIN_TRAINING_OBSERVATIONS,
    ) -> None:
        self.n_samples = n_samples
        self.seed = seed
        self.min_observations = min_observations
        self.debug_: ModelDebugInfo | None = None

    def check_training(self, training: pd.DataFrame) -> pd.DataFrame:
        """Validate a training frame with 'ds' and 'y' columns.

        Raises:
            ModelFitError: If the frame is empty, too short, has missing values,
                or has duplicate / non-monotonic dates
        """
        if training is None or training.empty:
            raise ModelFitError("No training observations before the cutoff")

        missing_columns = [col for col in ("ds", "y") if col not in training.columns]
        if missing_columns:
            raise ModelFitError(f"Training frame is missing columns: {missing_columns}")

        if training["y"].isna().any() or training["ds"].isna().any():
            raise ModelFitError("Training frame contains missing dates or values")

        ds = pd.to_datetime(training["ds"])
        if ds.duplicated().any():
            duplicates = sorted({d.date().isoformat() for d in ds[ds.duplicated()]})
            raise ModelFitError(f"Training dates are duplicated: {duplicates[:5]}")
        if not ds.is_monotonic_increasing:
            raise ModelFitError("Training dates are not in increasing order")

        if len(training) < self.min_observations:
            raise ModelFitError(
                f"Insufficient data: only {len(training)} observations "
                f"(need at least {self.min_observations})"
            )

        return pd.DataFrame({"ds": ds.values, "y": training["y"].astype(float).values})

    @abstractmethod
    def fit(self, training: pd.DataFrame) -> ModelFit:
        """Fit the model on a training frame.

        Args:
            training: DataFrame with columns 'ds' (dates) and 'y' (values)

        Returns:
            ModelFit wrapping the fitted backend object

        Raises:
            ModelFitError: If the data are unusable or the backend fails
        """

    @abstractmethod
    def forecast(self, fit: ModelFit, horizon_days: int) -> pd.DataFrame:
        """Forecast from the first training date to horizon_days past the last.

        Returns:
            DataFrame with FORECAST_COLUMNS, one row per forecast date
        """

    @abstractmethod
    def posterior_samples(self, fit: ModelFit, dates: pd.DatetimeIndex) -> PosteriorSamples:
        """Draw n_samples posterior realisations of 'trend' and 'yhat' for dates."""

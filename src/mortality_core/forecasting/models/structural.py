"""Structural state-space backend built on statsmodels UnobservedComponents.

The model is a local linear trend plus a trigonometric yearly seasonal
component. Posterior draws come from the simulation smoother for dates inside
the training range and from forward simulation of the state equation after it.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd
from pandas.tseries.frequencies import to_offset
from statsmodels.tools.sm_exceptions import ConvergenceWarning
from statsmodels.tsa.statespace.structural import UnobservedComponents

from mortality_core.exceptions import AlignmentError, ModelFitError
from mortality_core.forecasting.config import (
    INTERVAL_WIDTH,
    MIN_TRAINING_OBSERVATIONS,
    N_SAMPLES,
    RANDOM_SEED,
)
from mortality_core.forecasting.models.base import FORECAST_COLUMNS, ForecastModel
from mortality_core.forecasting.types import ModelDebugInfo, ModelFit, PosteriorSamples

logger = logging.getLogger(__name__)

# The level is always the first state of a local linear trend model
LEVEL_STATE = 0


def yearly_period(freq: str) -> float:
    """Number of observations per year for a pandas frequency (12 for "MS", ~52.2 for weekly)."""
    offset = to_offset(freq)
    span = pd.date_range("2001-01-01", "2004-12-31", freq=offset)
    return len(span) / 4.0


def _time_invariant(matrix) -> np.ndarray:
    matrix = np.asarray(matrix)
    return matrix[..., 0] if matrix.ndim == 3 else matrix


class StructuralModel(ForecastModel):
    """Local linear trend + trigonometric yearly seasonality (Kalman filter MLE)."""

    name = "structural"

    def __init__(
        self,
        n_samples: int = N_SAMPLES,
        seed: int | None = RANDOM_SEED,
        min_observations: int = MIN_TRAINING_OBSERVATIONS,
        harmonics: int = 2,
        seasonal_period: float | None = None,
        interval_width: float = INTERVAL_WIDTH,
    ) -> None:
        """Initialize the structural backend.

        Args:
            n_samples: Posterior draws per time step
            seed: Seed for the simulation smoother and forward simulation
            min_observations: Minimum number of training rows
            harmonics: Number of Fourier harmonics in the yearly component
            seasonal_period: Observations per year; inferred from the data frequency if None
            interval_width: Width of the forecast interval
        """
        super().__init__(n_samples=n_samples, seed=seed, min_observations=min_observations)
        self.harmonics = harmonics
        self.seasonal_period = seasonal_period
        self.interval_width = interval_width

    def fit(self, training: pd.DataFrame) -> ModelFit:
        df = self.check_training(training)

        freq = pd.infer_freq(df["ds"]) if len(df) >= 3 else None
        if freq is None:
            raise ModelFitError("Training dates are not evenly spaced; cannot infer a frequency")

        period = self.seasonal_period or yearly_period(freq)
        endog = pd.Series(df["y"].values, index=pd.DatetimeIndex(df["ds"].values, freq=freq))
        model = UnobservedComponents(
            endog,
            level="local linear trend",
            freq_seasonal=[{"period": period, "harmonics": self.harmonics}],
        )

        logger.debug(f"Fitting UnobservedComponents on {len(df)} observations (period={period})")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            try:
                result = model.fit(disp=False)
            except (ValueError, np.linalg.LinAlgError) as e:
                raise ModelFitError(f"Structural model fit failed: {e}") from e

        if not result.mle_retvals.get("converged", True):
            raise ModelFitError("Structural model likelihood optimisation did not converge")

        self.debug_ = ModelDebugInfo(
            model_name=self.name,
            data={
                "train_size": int(len(df)),
                "freq": freq,
                "seasonal_period": period,
                "aic": float(result.aic),
                "params": {k: float(v) for k, v in result.params.items()},
            },
        )

        return ModelFit(model_name=self.name, training=df, backend=result, freq=freq)

    def _grid(self, fit: ModelFit, end: pd.Timestamp) -> pd.DatetimeIndex:
        end = max(end, fit.last_date)
        return pd.date_range(fit.first_date, end, freq=fit.freq)

    def _mean_states(self, fit: ModelFit, n_total: int) -> np.ndarray:
        """Smoothed states in-sample, propagated forward without noise after it."""
        result = fit.backend
        transition = _time_invariant(result.model.ssm["transition"])
        smoothed = np.asarray(result.smoothed_state)
        nobs = smoothed.shape[1]

        states = np.empty((smoothed.shape[0], n_total))
        states[:, :nobs] = smoothed
        current = smoothed[:, -1]
        for t in range(nobs, n_total):
            current = transition @ current
            states[:, t] = current
        return states

    def forecast(self, fit: ModelFit, horizon_days: int) -> pd.DataFrame:
        grid = self._grid(fit, fit.last_date + pd.Timedelta(days=horizon_days))
        design = _time_invariant(fit.backend.model.ssm["design"])

        states = self._mean_states(fit, len(grid))
        point = (design @ states)[0]
        trend = states[LEVEL_STATE]

        draws = self.posterior_samples(fit, grid)
        tail = (1.0 - self.interval_width) / 2.0
        lower, upper = np.quantile(draws.yhat, [tail, 1.0 - tail], axis=1)

        return pd.DataFrame(
            {
                "date": grid,
                "point_estimate": point,
                "lower_bound": lower,
                "upper_bound": upper,
                "trend_component": trend,
                "seasonal_component": point - trend,
            },
            columns=FORECAST_COLUMNS,
        )

    def posterior_samples(self, fit: ModelFit, dates: pd.DatetimeIndex) -> PosteriorSamples:
        dates = pd.DatetimeIndex(dates)
        if len(dates) == 0:
            empty = np.empty((0, self.n_samples))
            return PosteriorSamples(dates=dates, trend=empty, yhat=empty.copy())

        grid = self._grid(fit, dates.max())
        positions = grid.get_indexer(dates)
        if (positions < 0).any():
            off_grid = [d.date().isoformat() for d in dates[positions < 0][:5]]
            raise AlignmentError(
                f"Sample dates are not on the model's {fit.freq} grid starting "
                f"{fit.first_date.date()}: {off_grid}"
            )

        result = fit.backend
        model = result.model
        design = _time_invariant(model.ssm["design"])
        transition = _time_invariant(model.ssm["transition"])
        selection = _time_invariant(model.ssm["selection"])
        state_sd = np.sqrt(np.clip(np.diag(_time_invariant(model.ssm["state_cov"])), 0.0, None))
        obs_sd = float(np.sqrt(max(_time_invariant(model.ssm["obs_cov"])[0, 0], 0.0)))

        rng = np.random.default_rng(self.seed)
        nobs = int(model.nobs)
        n_total = len(grid)
        k_states = transition.shape[0]

        states = np.empty((k_states, n_total, self.n_samples))
        model.update(result.params)
        simulator = model.simulation_smoother()
        for chain in range(self.n_samples):
            simulator.simulate(random_state=rng)
            states[:, :nobs, chain] = simulator.simulated_state

        current = states[:, nobs - 1, :]
        for t in range(nobs, n_total):
            shocks = rng.standard_normal((selection.shape[1], self.n_samples)) * state_sd[:, None]
            current = transition @ current + selection @ shocks
            states[:, t, :] = current

        signal = np.einsum("k,ktc->tc", design[0], states)
        yhat = signal + rng.normal(0.0, obs_sd, size=signal.shape)
        trend = states[LEVEL_STATE]

        return PosteriorSamples(dates=dates, trend=trend[positions], yhat=yhat[positions])

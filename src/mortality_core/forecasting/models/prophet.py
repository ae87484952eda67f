"""Prophet backend: changepoint trend plus Fourier yearly seasonality.

Weekly and daily seasonality are switched off because the input is already
aggregated to weeks or months.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd
from prophet import Prophet

from mortality_core.exceptions import ModelFitError
from mortality_core.forecasting.config import (
    INTERVAL_WIDTH,
    MIN_TRAINING_OBSERVATIONS,
    N_SAMPLES,
    RANDOM_SEED,
)
from mortality_core.forecasting.models.base import FORECAST_COLUMNS, ForecastModel
from mortality_core.forecasting.types import ModelDebugInfo, ModelFit, PosteriorSamples

logger = logging.getLogger(__name__)

# Stan and Prophet log every optimisation at INFO
logging.getLogger("cmdstanpy").setLevel(logging.WARNING)
logging.getLogger("prophet").setLevel(logging.WARNING)


def _to_datetime_index(x) -> pd.DatetimeIndex:
    """Coerce datelike values to a tz-naive DatetimeIndex (Prophet expects tz-naive)."""
    idx = pd.DatetimeIndex(pd.to_datetime(x))
    if idx.tz is not None:
        idx = idx.tz_localize(None)
    return idx


class ProphetModel(ForecastModel):
    """Additive trend + yearly seasonality model fitted with Prophet.

    With mcmc_samples=0 (default) parameters are MAP estimates and the
    posterior draws simulate trend changepoint uncertainty plus observation
    noise. With mcmc_samples > 0 the parameters are sampled with MCMC.
    """

    name = "prophet"

    def __init__(
        self,
        n_samples: int = N_SAMPLES,
        seed: int | None = RANDOM_SEED,
        min_observations: int = MIN_TRAINING_OBSERVATIONS,
        interval_width: float = INTERVAL_WIDTH,
        mcmc_samples: int = 0,
        freq: str | None = None,
        **prophet_params: Any,
    ) -> None:
        """Initialize the Prophet backend.

        Args:
            n_samples: Posterior draws per time step (Prophet's uncertainty_samples)
            seed: Seed for the Stan optimiser/sampler and numpy draws
            min_observations: Minimum number of training rows
            interval_width: Width of the forecast interval
            mcmc_samples: MCMC iterations; 0 uses MAP estimation
            freq: Frequency of the future dates built by forecast(). If None, it is
                inferred from the training dates (daily when that fails)
            **prophet_params: Forwarded to Prophet(...), e.g. changepoint_prior_scale
        """
        super().__init__(n_samples=n_samples, seed=seed, min_observations=min_observations)
        self.interval_width = interval_width
        self.mcmc_samples = mcmc_samples
        self.freq = freq
        self.prophet_params = prophet_params

    def _seed_numpy(self) -> None:
        if self.seed is not None:
            np.random.seed(self.seed)

    def fit(self, training: pd.DataFrame) -> ModelFit:
        df = self.check_training(training)

        model = Prophet(
            yearly_seasonality=True,
            weekly_seasonality=False,
            daily_seasonality=False,
            interval_width=self.interval_width,
            uncertainty_samples=self.n_samples,
            mcmc_samples=self.mcmc_samples,
            **self.prophet_params,
        )

        fit_kwargs: dict[str, Any] = {}
        if self.seed is not None:
            fit_kwargs["seed"] = self.seed

        logger.debug(f"Fitting Prophet on {len(df)} observations")
        try:
            model.fit(df, **fit_kwargs)
        except (RuntimeError, ValueError) as e:
            raise ModelFitError(f"Prophet fit failed: {e}") from e

        self.debug_ = ModelDebugInfo(
            model_name=self.name,
            data={
                "train_size": int(len(df)),
                "first_date": df["ds"].iloc[0].isoformat(),
                "last_date": df["ds"].iloc[-1].isoformat(),
                "changepoints": [ts.isoformat() for ts in model.changepoints],
                "mcmc_samples": self.mcmc_samples,
                "seed": self.seed,
            },
        )

        freq = self.freq or pd.infer_freq(df["ds"]) or "D"
        return ModelFit(model_name=self.name, training=df, backend=model, freq=freq)

    def forecast(self, fit: ModelFit, horizon_days: int) -> pd.DataFrame:
        model: Prophet = fit.backend
        horizon_end = fit.last_date + pd.Timedelta(days=horizon_days)
        periods = len(pd.date_range(fit.last_date, horizon_end, freq=fit.freq)) - 1
        future = model.make_future_dataframe(periods=max(periods, 0), freq=fit.freq)

        self._seed_numpy()
        fc = model.predict(future)

        return pd.DataFrame(
            {
                "date": _to_datetime_index(fc["ds"]),
                "point_estimate": fc["yhat"].astype(float).values,
                "lower_bound": fc["yhat_lower"].astype(float).values,
                "upper_bound": fc["yhat_upper"].astype(float).values,
                "trend_component": fc["trend"].astype(float).values,
                "seasonal_component": fc["additive_terms"].astype(float).values,
            },
            columns=FORECAST_COLUMNS,
        )

    def posterior_samples(self, fit: ModelFit, dates: pd.DatetimeIndex) -> PosteriorSamples:
        model: Prophet = fit.backend
        dates = _to_datetime_index(dates)

        self._seed_numpy()
        draws = model.predictive_samples(pd.DataFrame({"ds": dates}))

        return PosteriorSamples(
            dates=dates,
            trend=np.asarray(draws["trend"], dtype=float),
            yhat=np.asarray(draws["yhat"], dtype=float),
        )

"""Public API for the excess mortality pipeline.

This module provides a clean, configurable API for running the whole
analysis on an in-memory DataFrame with no side effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import pandas as pd

from mortality_core.exceptions import ConfigError, DataQualityError
from mortality_core.forecasting.config import (
    AGGREGATION_FREQ,
    CUTOFF_DATE,
    DEFAULT_COHORT,
    HORIZON_DAYS,
    LOWER_PERCENTILE,
    MIN_SAMPLES,
    N_SAMPLES,
    RANDOM_SEED,
    UPPER_PERCENTILE,
)
from mortality_core.forecasting.data.preparation import build_cohort_series, training_frame
from mortality_core.forecasting.excess import cumulative_excess, join_forecast, summarize_excess
from mortality_core.forecasting.models.base import ForecastModel
from mortality_core.forecasting.models.prophet import ProphetModel
from mortality_core.forecasting.samples import attach_observations, posterior_to_long
from mortality_core.forecasting.types import HasDebugInfo, ModelDebugInfo

logger = logging.getLogger(__name__)


@dataclass
class ExcessMortalityConfig:
    """Configuration for the excess mortality pipeline.

    Attributes:
        cohort: Cohort label to analyse (default: "80 and over").
        cutoff: Training uses dates strictly before it; excess accumulates from it.
        horizon_days: Days past the last training date covered by the forecast table.
        n_samples: Posterior draws (chains) per time step; at least 1000.
        lower_percentile: Lower edge of the credible band (0-100).
        upper_percentile: Upper edge of the credible band (0-100).
        freq: Aggregation frequency ("MS" = monthly mean). None keeps the native series.
        placeholder_through: Last date padded with placeholder rows. If None, pads
            to the end of the last observed year.
        seed: Random seed for fitting and sampling.
        model: Optional backend instance. If None, uses ProphetModel.
    """

    cohort: str = DEFAULT_COHORT
    cutoff: str | pd.Timestamp = CUTOFF_DATE
    horizon_days: int = HORIZON_DAYS
    n_samples: int = N_SAMPLES
    lower_percentile: float = LOWER_PERCENTILE
    upper_percentile: float = UPPER_PERCENTILE
    freq: Optional[str] = AGGREGATION_FREQ
    placeholder_through: Optional[str | pd.Timestamp] = None
    seed: Optional[int] = RANDOM_SEED
    model: Optional[ForecastModel] = None  # if None, use ProphetModel

    def validate(self) -> None:
        """Check configuration values.

        Raises:
            ConfigError: If any value is out of range
        """
        if self.n_samples < MIN_SAMPLES:
            raise ConfigError(
                f"n_samples={self.n_samples} is too small for stable percentiles "
                f"(need at least {MIN_SAMPLES})"
            )
        if not 0.0 <= self.lower_percentile < self.upper_percentile <= 100.0:
            raise ConfigError(
                f"Percentiles must satisfy 0 <= lower < upper <= 100, got "
                f"{self.lower_percentile} and {self.upper_percentile}"
            )
        if self.horizon_days <= 0:
            raise ConfigError(f"horizon_days must be positive, got {self.horizon_days}")
        if self.model is not None and self.model.n_samples < MIN_SAMPLES:
            raise ConfigError(
                f"Model draws {self.model.n_samples} samples; need at least {MIN_SAMPLES}"
            )

    def build_model(self) -> ForecastModel:
        if self.model is not None:
            return self.model
        return ProphetModel(n_samples=self.n_samples, seed=self.seed)


@dataclass
class ExcessMortalityResult:
    """Result of the excess mortality pipeline.

    Attributes:
        series: Prepared cohort series (Date, Deaths, is_placeholder).
        forecast: Forecast table (date, point_estimate, lower_bound, upper_bound,
            trend_component, seasonal_component) joined with Deaths and is_placeholder.
        samples: Long posterior table (chain, time_step, Date, trend, yhat, Deaths,
            is_placeholder), one row per chain and series row.
        excess: Cumulative excess per date (date, cum_delta_mean, cum_delta_lower,
            cum_delta_upper) from the cutoff onward.
        metadata: Run settings and headline numbers.
        debug: Backend debug info keyed by model name. Only populated when
            run_excess_mortality is called with debug=True.
    """

    series: pd.DataFrame
    forecast: pd.DataFrame
    samples: pd.DataFrame
    excess: pd.DataFrame
    metadata: Dict[str, object] = field(default_factory=dict)
    debug: Optional[Dict[str, ModelDebugInfo]] = None


def _collect_debug(model: HasDebugInfo) -> Optional[ModelDebugInfo]:
    return getattr(model, "debug_", None)


def run_excess_mortality(
    deaths_df: pd.DataFrame,
    config: Optional[ExcessMortalityConfig] = None,
    debug: bool = False,
) -> ExcessMortalityResult:
    """Run the excess mortality pipeline in memory.

    This function:
    - does NOT read or write any files,
    - does NOT render charts or parse CLI arguments,
    - MAY log progress via the logging module.

    Args:
        deaths_df: Deaths by cohort, typically the output of load_deaths_csv.
            Expected columns: 'Age', 'Date', 'Deaths'.
        config: ExcessMortalityConfig. If None, uses defaults.
        debug: If True, includes backend debug information in result.debug.

    Returns:
        ExcessMortalityResult with the prepared series, forecast table, long
        posterior samples and the cumulative excess summary.

    Raises:
        ConfigError: If the configuration is invalid.
        DataQualityError: If columns are missing, the cohort is absent or dates repeat.
        ModelFitError: If the model cannot be fitted (e.g. no rows before the cutoff).
        AlignmentError: If samples, observations and forecast rows do not line up.
    """
    if config is None:
        config = ExcessMortalityConfig()
    config.validate()

    required_columns = ["Age", "Date", "Deaths"]
    missing_columns = [col for col in required_columns if col not in deaths_df.columns]
    if missing_columns:
        raise DataQualityError(
            f"Missing required columns in deaths_df: {missing_columns}. "
            f"Required: {required_columns}"
        )

    cutoff = pd.Timestamp(config.cutoff)
    df = deaths_df.copy()
    df["Date"] = pd.to_datetime(df["Date"])

    # 1. Data preparation
    series = build_cohort_series(df, config.cohort, config.freq, config.placeholder_through)
    if series.empty:
        raise DataQualityError(
            f"Cohort '{config.cohort}' has no rows. "
            f"Available cohorts: {sorted(df['Age'].unique().tolist())}"
        )
    n_placeholders = int(series["is_placeholder"].sum())
    logger.info(
        f"Prepared {len(series)} rows for '{config.cohort}' "
        f"({n_placeholders} placeholders, freq={config.freq or 'native'})"
    )

    # 2. Model fit (placeholders and post-cutoff rows never reach the model)
    model = config.build_model()
    train = training_frame(series, cutoff)
    logger.info(f"Fitting {model.name} model on {len(train)} rows before {cutoff.date()}")
    fit = model.fit(train)

    # 3. Forecast and posterior sampling
    forecast = model.forecast(fit, config.horizon_days)
    forecast = join_forecast(forecast, series)
    logger.info(
        f"Drawing {model.n_samples} posterior samples for {len(series)} time steps"
    )
    posterior = model.posterior_samples(fit, pd.DatetimeIndex(series["Date"]))
    samples = attach_observations(posterior_to_long(posterior), series)

    # 4. Excess mortality
    excess = cumulative_excess(
        samples,
        cutoff,
        lower=config.lower_percentile,
        upper=config.upper_percentile,
    )
    summary = summarize_excess(excess)
    if summary:
        logger.info(
            f"Cumulative excess at {summary['final_date']}: {summary['final_mean']:.1f} "
            f"({config.lower_percentile:g}%: {summary['final_lower']:.1f}, "
            f"{config.upper_percentile:g}%: {summary['final_upper']:.1f})"
        )

    debug_info: Optional[Dict[str, ModelDebugInfo]] = None
    if debug:
        debug_info = {}
        model_debug = _collect_debug(model)
        if model_debug is not None:
            debug_info[model_debug.model_name] = model_debug

    return ExcessMortalityResult(
        series=series,
        forecast=forecast,
        samples=samples,
        excess=excess,
        metadata={
            "cohort": config.cohort,
            "cutoff": cutoff.date(),
            "model": model.name,
            "freq": config.freq,
            "horizon_days": config.horizon_days,
            "n_samples": posterior.n_chains,
            "train_size": len(train),
            "n_placeholders": n_placeholders,
            "lower_percentile": config.lower_percentile,
            "upper_percentile": config.upper_percentile,
            "summary": summary,
        },
        debug=debug_info,
    )

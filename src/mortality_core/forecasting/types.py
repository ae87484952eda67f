"""Shared types for forecasting models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import numpy as np
import pandas as pd

from mortality_core.exceptions import AlignmentError


@dataclass(frozen=True)
class ModelDebugInfo:
    """Generic container for model-specific debug information.

    Attributes:
        model_name: Short identifier for the model, e.g. "prophet", "structural".
        version: Optional version string if model behavior changes over time.
        data: Arbitrary model-specific payload (dict of JSON-like values).
    """

    model_name: str
    version: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class HasDebugInfo(Protocol):
    """Protocol for models that expose debug information."""

    debug_: ModelDebugInfo | None


@dataclass(frozen=True)
class ModelFit:
    """Result of fitting a trend + seasonality model to the training rows.

    Attributes:
        model_name: Identifier of the backend that produced the fit.
        training: Training frame with columns 'ds' and 'y', sorted by date.
        backend: Backend-specific fitted object (Prophet instance, statsmodels results).
        freq: Pandas frequency alias of the training series, if known.
    """

    model_name: str
    training: pd.DataFrame
    backend: Any
    freq: str | None = None

    @property
    def first_date(self) -> pd.Timestamp:
        return pd.Timestamp(self.training["ds"].iloc[0])

    @property
    def last_date(self) -> pd.Timestamp:
        return pd.Timestamp(self.training["ds"].iloc[-1])


@dataclass(frozen=True)
class PosteriorSamples:
    """Posterior draws of 'trend' and 'yhat' for a sequence of dates.

    Both matrices have one row per date (time step) and one column per chain.

    Raises:
        AlignmentError: If the matrices do not match the dates or each other.
    """

    dates: pd.DatetimeIndex
    trend: np.ndarray
    yhat: np.ndarray

    def __post_init__(self) -> None:
        expected = len(self.dates)
        for name in ("trend", "yhat"):
            matrix = getattr(self, name)
            if matrix.ndim != 2 or matrix.shape[0] != expected:
                raise AlignmentError(
                    f"'{name}' samples have shape {matrix.shape}; "
                    f"expected {expected} rows (one per date)"
                )
        if self.trend.shape != self.yhat.shape:
            raise AlignmentError(
                f"'trend' samples {self.trend.shape} and 'yhat' samples "
                f"{self.yhat.shape} differ in shape"
            )

    @property
    def n_chains(self) -> int:
        return int(self.yhat.shape[1])

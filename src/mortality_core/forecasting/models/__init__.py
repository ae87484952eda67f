"""Trend + seasonality backends.

Adding a backend
================

1. Subclass ForecastModel and implement fit(), forecast() and posterior_samples().
2. Call self.check_training(training) at the top of fit() so every backend
   rejects empty, short, duplicated or unordered training data the same way.
3. Populate self.debug_ with a ModelDebugInfo after fitting:
   ```python
   self.debug_ = ModelDebugInfo(
       model_name=self.name,
       data={"train_size": len(df)},  # keep it JSON-like
   )
   ```
4. posterior_samples() must return one row per requested date and
   self.n_samples columns for both 'trend' and 'yhat'.
5. Register the backend in MODELS so the CLI can select it.
"""

from mortality_core.forecasting.models.base import FORECAST_COLUMNS, ForecastModel
from mortality_core.forecasting.models.prophet import ProphetModel
from mortality_core.forecasting.models.structural import StructuralModel

MODELS = {
    ProphetModel.name: ProphetModel,
    StructuralModel.name: StructuralModel,
}

__all__ = ["FORECAST_COLUMNS", "MODELS", "ForecastModel", "ProphetModel", "StructuralModel"]

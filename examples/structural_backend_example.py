"""Example: Swapping the statistical backend

The pipeline only talks to the backend through fit / forecast /
posterior_samples, so the statsmodels structural model can replace Prophet.
Both runs use the same data, cutoff and number of samples.
"""

from pathlib import Path

from mortality_core.forecasting import ExcessMortalityConfig, run_excess_mortality
from mortality_core.forecasting.data import load_deaths_csv
from mortality_core.forecasting.models import ProphetModel, StructuralModel

deaths_df = load_deaths_csv(Path("data") / "weekly_deaths_by_age.csv")

for model in (ProphetModel(n_samples=2000), StructuralModel(n_samples=2000)):
    config = ExcessMortalityConfig(n_samples=model.n_samples, model=model)
    result = run_excess_mortality(deaths_df, config)
    summary = result.metadata["summary"]
    print(
        f"{model.name:>10}: cumulative excess at {summary['final_date']} = "
        f"{summary['final_mean']:,.0f} "
        f"[{summary['final_lower']:,.0f}, {summary['final_upper']:,.0f}]"
    )

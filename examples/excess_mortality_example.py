"""Example: Excess mortality for the 80-and-over cohort

This example loads weekly deaths by age, estimates the cumulative excess
mortality from 2020 onward and renders the charts.

Prerequisites:
- data/weekly_deaths_by_age.csv with columns series_name, parameter, value
"""

from pathlib import Path

from mortality_core import DataPaths
from mortality_core.forecasting import ExcessMortalityConfig, run_excess_mortality
from mortality_core.forecasting.data import load_deaths_csv, yearly_totals
from mortality_core.forecasting.formatters import format_excess_for_console
from mortality_core.forecasting.formatters.charts import render_charts

paths = DataPaths.from_root(Path("data"), Path("output"))

print("Loading deaths data...")
deaths_df = load_deaths_csv(paths.input_csv)
print(f"Loaded {len(deaths_df)} rows for cohorts: {sorted(deaths_df['Age'].unique())}")

config = ExcessMortalityConfig(cohort="80 and over", cutoff="2020-01-01")

print("Running excess mortality pipeline (this fits the model and draws 4000 samples)...")
result = run_excess_mortality(deaths_df, config, debug=True)

print(format_excess_for_console(result))

print("\nForecast table (last 10 rows):")
print(result.forecast.tail(10))

print("\nModel debug info:")
for name, info in (result.debug or {}).items():
    print(f"- {name}: trained on {info.data.get('train_size')} rows")

paths.ensure_dirs()
written = render_charts(result, paths.charts_dir, yearly=yearly_totals(deaths_df))
for name, chart_path in written.items():
    print(f"Saved {name} chart to: {chart_path}")

# Save the excess table for later comparison
excess_output = paths.output_dir / "cumulative_excess.csv"
result.excess.to_csv(excess_output, index=False)
print(f"\nSaved cumulative excess to: {excess_output}")

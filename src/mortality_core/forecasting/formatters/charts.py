"""Chart rendering for the excess mortality analysis.

All functions draw with matplotlib, save a PNG and close the figure.
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from mortality_core.forecasting.api import ExcessMortalityResult  # noqa: E402
from mortality_core.forecasting.data.aggregate import period_means  # noqa: E402

logger = logging.getLogger(__name__)

FIGSIZE = (10, 5)
DPI = 120
OBSERVED_COLOR = "#222222"
MODEL_COLOR = "#1f77b4"
BAND_COLOR = "#9ecae1"


def _save(fig, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    logger.debug(f"Saved chart to {path}")
    return path


def plot_yearly_totals(yearly: pd.DataFrame, cohort: str, path: Path) -> Path:
    """Bar chart of total deaths per year for one cohort.

    Partial years are drawn lighter.
    """
    data = yearly[yearly["Age"] == cohort]
    full_year = data["weeks"] >= 52

    fig, ax = plt.subplots(figsize=FIGSIZE)
    colors = [MODEL_COLOR if full else BAND_COLOR for full in full_year]
    ax.bar(data["Year"].astype(str), data["Deaths"], color=colors)
    ax.set_xlabel("Year")
    ax.set_ylabel("Deaths")
    ax.set_title(f"Deaths per year, {cohort}")
    ax.tick_params(axis="x", rotation=45)
    return _save(fig, path)


def plot_period_means(result: ExcessMortalityResult, path: Path) -> Path:
    """Bar chart of the prepared (per-period mean) series."""
    observed = period_means(result.series)
    spacing = observed["Date"].diff().dt.days.median() if len(observed) > 1 else 30

    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.bar(observed["Date"], observed["Deaths"], width=0.8 * spacing, color=MODEL_COLOR)
    ax.axvline(pd.Timestamp(result.metadata["cutoff"]), color="red", linestyle="--", linewidth=1)
    ax.set_ylabel("Mean weekly deaths")
    ax.set_title(f"Mean weekly deaths per period, {result.metadata['cohort']}")
    ax.xaxis.set_major_locator(mdates.YearLocator())
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y"))
    return _save(fig, path)


def plot_forecast(result: ExcessMortalityResult, path: Path) -> Path:
    """Forecast with interval, observed points and the training cutoff."""
    fc = result.forecast.dropna(subset=["point_estimate"])
    observed = result.forecast.dropna(subset=["Deaths"])

    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.fill_between(
        fc["date"],
        fc["lower_bound"],
        fc["upper_bound"],
        color=BAND_COLOR,
        alpha=0.6,
        label="Interval",
    )
    ax.plot(fc["date"], fc["point_estimate"], color=MODEL_COLOR, label="Model")
    ax.scatter(
        observed["date"], observed["Deaths"], s=8, color=OBSERVED_COLOR, label="Observed", zorder=3
    )
    ax.axvline(pd.Timestamp(result.metadata["cutoff"]), color="red", linestyle="--", linewidth=1)
    ax.set_ylabel("Deaths")
    ax.set_title(f"Expected vs observed deaths, {result.metadata['cohort']}")
    ax.legend(loc="upper left")
    return _save(fig, path)


def plot_components(result: ExcessMortalityResult, path: Path) -> Path:
    """Trend and seasonal components of the forecast."""
    fc = result.forecast.dropna(subset=["point_estimate"])

    fig, (ax_trend, ax_season) = plt.subplots(
        2, 1, figsize=(FIGSIZE[0], FIGSIZE[1] * 1.4), sharex=True
    )
    ax_trend.plot(fc["date"], fc["trend_component"], color=MODEL_COLOR)
    ax_trend.set_ylabel("Trend")
    ax_season.plot(fc["date"], fc["seasonal_component"], color=MODEL_COLOR)
    ax_season.axhline(0, color="grey", linewidth=0.8)
    ax_season.set_ylabel("Yearly seasonality")
    ax_trend.set_title("Model components")
    return _save(fig, path)


def plot_cumulative_excess(result: ExcessMortalityResult, path: Path) -> Path:
    """Cumulative excess mean with its credible band and a zero reference line."""
    excess = result.excess
    lower = result.metadata.get("lower_percentile", 5.0)
    upper = result.metadata.get("upper_percentile", 95.0)

    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.fill_between(
        excess["date"],
        excess["cum_delta_lower"],
        excess["cum_delta_upper"],
        color=BAND_COLOR,
        alpha=0.6,
        label=f"{lower:g}%-{upper:g}% band",
    )
    ax.plot(excess["date"], excess["cum_delta_mean"], color=MODEL_COLOR, marker="o", label="Mean")
    ax.axhline(0, color="grey", linewidth=0.8)
    ax.set_ylabel("Cumulative predicted - observed deaths")
    ax.set_title(f"Cumulative excess mortality, {result.metadata['cohort']}")
    ax.legend(loc="upper left")
    ax.tick_params(axis="x", rotation=45)
    return _save(fig, path)


def render_charts(
    result: ExcessMortalityResult,
    charts_dir: str | Path,
    yearly: pd.DataFrame | None = None,
) -> dict[str, Path]:
    """Render every chart for a run.

    Args:
        result: ExcessMortalityResult from run_excess_mortality
        charts_dir: Directory for the PNG files
        yearly: Optional output of yearly_totals for the descriptive bar chart

    Returns:
        Mapping of chart name to written file path
    """
    charts_dir = Path(charts_dir)
    written: dict[str, Path] = {}

    if yearly is not None and not yearly.empty:
        written["yearly_totals"] = plot_yearly_totals(
            yearly, result.metadata["cohort"], charts_dir / "yearly_totals.png"
        )
    written["period_means"] = plot_period_means(result, charts_dir / "period_means.png")
    written["forecast"] = plot_forecast(result, charts_dir / "forecast.png")
    written["components"] = plot_components(result, charts_dir / "components.png")
    if not result.excess.empty:
        written["cumulative_excess"] = plot_cumulative_excess(
            result, charts_dir / "cumulative_excess.png"
        )

    logger.info(f"Rendered {len(written)} charts to {charts_dir}")
    return written

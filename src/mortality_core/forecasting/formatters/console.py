"""Console output formatting utilities."""

from __future__ import annotations

import pandas as pd

from mortality_core.forecasting.api import ExcessMortalityResult


def format_excess_for_console(result: ExcessMortalityResult, max_rows: int = 24) -> str:
    """Build a human-readable summary of an excess mortality run.

    Args:
        result: ExcessMortalityResult from run_excess_mortality
        max_rows: Maximum number of dates listed in the excess table

    Returns:
        Human-readable text string for console output
    """
    meta = result.metadata
    lines = []
    lines.append(f"Excess Mortality - {meta.get('cohort', '')}")
    lines.append("=" * 60)
    lines.append(f"Model:        {meta.get('model')} ({meta.get('n_samples')} posterior samples)")
    lines.append(f"Training:     {meta.get('train_size')} rows before {meta.get('cutoff')}")
    n_placeholders = meta.get('n_placeholders', 0)
    lines.append(f"Series rows:  {len(result.series)} ({n_placeholders} placeholders)")
    lines.append("")

    if result.excess.empty:
        lines.append("No observations after the cutoff; no excess computed.")
        return "\n".join(lines)

    lower = meta.get("lower_percentile", 5.0)
    upper = meta.get("upper_percentile", 95.0)
    lines.append("Cumulative excess (predicted - observed deaths):")
    lines.append(f"  {'Date':<12}{'Mean':>12}{f'{lower:g}%':>12}{f'{upper:g}%':>12}")

    shown = result.excess.tail(max_rows)
    if len(result.excess) > max_rows:
        lines.append(f"  ... {len(result.excess) - max_rows} earlier dates omitted")
    for _, row in shown.iterrows():
        date_str = pd.Timestamp(row["date"]).strftime("%Y-%m-%d")
        lines.append(
            f"  {date_str:<12}{row['cum_delta_mean']:>12,.1f}"
            f"{row['cum_delta_lower']:>12,.1f}{row['cum_delta_upper']:>12,.1f}"
        )

    summary = meta.get("summary") or {}
    if summary:
        lines.append("")
        lines.append(f"Highest mean: {summary['peak_mean']:,.1f} on {summary['peak_date']}")
        lines.append(f"Lowest mean:  {summary['trough_mean']:,.1f} on {summary['trough_date']}")
        if summary["final_lower"] > 0:
            verdict = "fewer deaths than expected (band above zero)"
        elif summary["final_upper"] < 0:
            verdict = "more deaths than expected (band below zero)"
        else:
            verdict = "no clear difference from expected (band spans zero)"
        lines.append(f"Final:        {verdict}")

    return "\n".join(lines)

"""CLI wrapper for the excess mortality pipeline.

This module provides a command-line interface for running the analysis.
All core logic is in mortality_core.forecasting.api.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mortality_core.config import DataPaths
from mortality_core.exceptions import MortalityAPIError
from mortality_core.forecasting.api import ExcessMortalityConfig, run_excess_mortality
from mortality_core.forecasting.config import (
    CUTOFF_DATE,
    DEFAULT_COHORT,
    HORIZON_DAYS,
    N_SAMPLES,
    RANDOM_SEED,
)
from mortality_core.forecasting.data.aggregate import yearly_totals
from mortality_core.forecasting.data.loaders import load_deaths_csv
from mortality_core.forecasting.formatters.console import format_excess_for_console
from mortality_core.forecasting.models import MODELS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estimate cumulative excess mortality for one cohort."
    )
    parser.add_argument(
        "--file",
        type=str,
        required=True,
        help="Path to the weekly deaths CSV (series_name, parameter, value).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output",
        help="Directory for rendered charts (default: output)",
    )
    parser.add_argument(
        "--cohort",
        type=str,
        default=DEFAULT_COHORT,
        help=f"Cohort label (default: {DEFAULT_COHORT})",
    )
    parser.add_argument(
        "--cutoff",
        type=str,
        default=CUTOFF_DATE,
        help=f"First date excluded from training (default: {CUTOFF_DATE})",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        default=HORIZON_DAYS,
        help=f"Forecast days past the last training date (default: {HORIZON_DAYS})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=N_SAMPLES,
        help=f"Posterior samples per time step (default: {N_SAMPLES})",
    )
    parser.add_argument(
        "--weekly",
        action="store_true",
        help="Model the native weekly series instead of monthly means",
    )
    parser.add_argument(
        "--model",
        type=str,
        default="prophet",
        choices=sorted(MODELS),
        help="Statistical backend (default: prophet)",
    )
    parser.add_argument(
        "--seed", type=int, default=RANDOM_SEED, help=f"Random seed (default: {RANDOM_SEED})"
    )
    parser.add_argument("--no-charts", action="store_true", help="Skip chart rendering")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point for the excess mortality pipeline.

    Parses command-line arguments, loads data, runs the analysis, prints a
    summary and renders charts.

    Returns:
        Process exit status (0 on success, 1 when a pipeline stage fails).
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = DataPaths(input_csv=Path(args.file), output_dir=Path(args.output))

    print("=" * 60)
    print("Excess Mortality Pipeline")
    print("=" * 60)

    try:
        print("\n[1/3] Loading deaths data...")
        print(f"  Reading from: {paths.input_csv}")
        deaths_df = load_deaths_csv(paths.input_csv)
        print(f"[OK] Loaded {len(deaths_df)} rows")

        print(f"\n[2/3] Fitting {args.model} model and drawing {args.samples} samples...")
        model = MODELS[args.model](n_samples=args.samples, seed=args.seed)
        config = ExcessMortalityConfig(
            cohort=args.cohort,
            cutoff=args.cutoff,
            horizon_days=args.horizon,
            n_samples=args.samples,
            freq=None if args.weekly else "MS",
            seed=args.seed,
            model=model,
        )
        result = run_excess_mortality(deaths_df, config=config)
        print(f"[OK] Estimated excess for {len(result.excess)} dates")

        print("\n" + "=" * 60)
        print(format_excess_for_console(result))
        print("=" * 60)

        if args.no_charts:
            print("\n[3/3] Skipping charts")
        else:
            from mortality_core.forecasting.formatters.charts import render_charts

            print("\n[3/3] Rendering charts...")
            paths.ensure_dirs()
            written = render_charts(result, paths.charts_dir, yearly=yearly_totals(deaths_df))
            for name, chart_path in written.items():
                print(f"  {name}: {chart_path}")

        print("\n[OK] Pipeline completed successfully")

    except MortalityAPIError as e:
        print(f"\n[ERROR] Pipeline failed during {e.stage}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

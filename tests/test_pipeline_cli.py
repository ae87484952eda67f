"""Tests for the command-line entry point that do not fit a model."""

import pytest

from mortality_core.forecasting.pipeline import build_parser, main


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["--file", "deaths.csv"])
    assert args.cohort == "80 and over"
    assert args.cutoff == "2020-01-01"
    assert args.samples == 4000
    assert args.model == "prophet"
    assert not args.weekly


def test_unknown_cohort_reports_failed_stage(raw_deaths_csv, tmp_path, capsys) -> None:
    """A failing stage is named in the output and the exit status is non-zero."""
    status = main(
        [
            "--file",
            str(raw_deaths_csv),
            "--output",
            str(tmp_path / "out"),
            "--cohort",
            "90 and over",
            "--no-charts",
        ]
    )

    assert status == 1
    out = capsys.readouterr().out
    assert "[ERROR] Pipeline failed during data preparation" in out


def test_too_few_samples_is_a_config_error(raw_deaths_csv, capsys) -> None:
    status = main(["--file", str(raw_deaths_csv), "--samples", "10", "--no-charts"])
    assert status == 1
    assert "failed during configuration" in capsys.readouterr().out


def test_missing_file_propagates(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        main(["--file", str(tmp_path / "missing.csv"), "--no-charts"])

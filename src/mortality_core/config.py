"""Filesystem configuration for the excess mortality analysis.

This module provides a single, simple configuration class describing where
the input deaths CSV lives and where rendered charts are written.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_INPUT_NAME = "weekly_deaths_by_age.csv"


@dataclass
class DataPaths:
    """All filesystem paths used by the analysis.

    Attributes:
        input_csv: Weekly deaths CSV with series_name, parameter and value columns.
        output_dir: Root directory for generated artifacts.

    Directory Structure:
        output_dir/
        └── charts/          # PNG charts rendered by the pipeline
    """

    input_csv: Path
    output_dir: Path

    @classmethod
    def from_root(
        cls,
        data_root: str | Path,
        output_dir: str | Path = "output",
        input_name: str = DEFAULT_INPUT_NAME,
    ) -> DataPaths:
        """Create DataPaths from a data directory and an output directory.

        Args:
            data_root: Directory holding the input CSV.
            output_dir: Directory where artifacts are written.
            input_name: File name of the CSV inside data_root.

        Returns:
            DataPaths instance.

        Examples:
            >>> paths = DataPaths.from_root("data", "output")
            >>> paths.input_csv
            PosixPath('data/weekly_deaths_by_age.csv')
        """
        return cls(input_csv=Path(data_root) / input_name, output_dir=Path(output_dir))

    @property
    def charts_dir(self) -> Path:
        """Rendered PNG charts."""
        return self.output_dir / "charts"

    def ensure_dirs(self) -> None:
        """Create all output directories."""
        self.charts_dir.mkdir(parents=True, exist_ok=True)

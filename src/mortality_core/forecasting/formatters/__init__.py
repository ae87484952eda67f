"""Output formatters for excess mortality results."""

from mortality_core.forecasting.formatters.console import format_excess_for_console

__all__ = ["format_excess_for_console"]

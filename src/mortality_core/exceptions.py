"""Domain-specific exceptions for the excess mortality analysis.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from MortalityAPIError for easy catching. Each
exception names the pipeline stage it belongs to, so a failed run can
report where it stopped.
"""


class MortalityAPIError(Exception):
    """Base exception for all excess mortality analysis errors.

    Users can catch this exception to handle any error raised by the package.
    """

    stage = "pipeline"


class ConfigError(MortalityAPIError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - Too few posterior samples are requested
    - Percentile bounds are out of order
    """

    stage = "configuration"


class DataQualityError(MortalityAPIError):
    """Raised when input data checks fail.

    This exception is raised when:
    - Required columns are missing from input data
    - Rows have unparseable dates or non-numeric/negative counts
    - A series has duplicate or non-monotonic dates
    - The requested cohort has no rows
    """

    stage = "data preparation"


class ModelFitError(MortalityAPIError):
    """Raised when the trend + seasonality model cannot be fitted.

    This exception is raised when:
    - There are no (or too few) training rows before the cutoff
    - Training dates are duplicated or out of order
    - The statistical backend fails or does not converge
    """

    stage = "model fit"


class AlignmentError(MortalityAPIError):
    """Raised when posterior samples and observations do not line up.

    This exception is raised when:
    - A sample matrix does not have one row per sampled date
    - The trend and yhat tables have different (chain, time_step) keys
    - The number of time steps differs from the observed series length
    - A placeholder row has no matching forecast row
    """

    stage = "posterior sampling"

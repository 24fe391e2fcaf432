"""
Domain exceptions for analytics app.

Exception Hierarchy:
    InputValidationError (apps.common)
    ├── InvalidPrecisionError
    ├── InvalidVerdictFilterError
    └── InvalidTrendWindowError

Usage:
    from apps.analytics.exceptions import InvalidPrecisionError

    if not 0 <= precision <= MAX_PRECISION:
        raise InvalidPrecisionError()
"""

from apps.common.exceptions import InputValidationError


class InvalidPrecisionError(InputValidationError):
    """
    Raised when the hotspot grid precision is out of range.

    Precision is the number of decimal places kept, 0 to 6.
    """
    default_detail = 'Precision must be an integer between 0 and 6.'
    default_code = 'invalid_precision'


class InvalidVerdictFilterError(InputValidationError):
    """
    Raised when a hotspot verdict filter names an unknown verdict.

    Example:
        raise InvalidVerdictFilterError("Unknown verdicts: FAKE")
    """
    default_detail = 'Unknown verdict in filter.'
    default_code = 'invalid_verdict_filter'


class InvalidTrendWindowError(InputValidationError):
    """Raised when the trend window is not between 1 and 365 days."""
    default_detail = 'Days must be an integer between 1 and 365.'
    default_code = 'invalid_trend_window'

"""
Data quality error classifications for stash and profile data.

These exceptions categorize problems with the data handed to the core,
either by the provider (malformed containers) or by the caller (missing
selections).
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for data quality issues."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedDataError(DataQualityError):
    """Provider data exists but is missing required fields or has the wrong shape."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class ValidationError(DataQualityError):
    """A required input is missing, e.g. no profile selected."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.recoverable = False

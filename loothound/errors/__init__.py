"""
Error classification for the snapshot capture pipeline.

This module provides the exception hierarchy used to separate bad provider
data (recovered locally) from collaborator failures (surfaced to the caller).
"""

from .data_quality import (
    DataQualityError,
    MalformedDataError,
    ValidationError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    TransportError,
)
from .recovery import (
    ContainerFailure,
    GracefulDegradationError,
    PartialAggregationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedDataError",
    "ValidationError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "TransportError",
    # Recovery Categories
    "ContainerFailure",
    "GracefulDegradationError",
    "PartialAggregationError",
]

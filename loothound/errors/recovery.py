"""
Recovery classifications for partially successful operations.

Aggregation keeps going when one container fails; these types carry what
was lost so callers can report it.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ContainerFailure:
    """A container whose items could not be attached."""
    container_id: str
    error: Exception
    item_count: int = 0


class GracefulDegradationError(Exception):
    """Mixin for errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class PartialAggregationError(GracefulDegradationError):
    """Some containers of a snapshot failed to attach."""

    def __init__(self, message: str, snapshot_id: Optional[int] = None,
                 failures: Optional[list[ContainerFailure]] = None, **kwargs):
        super().__init__(
            message,
            degraded_functionality="container_attach",
            fallback_strategy="skip_failed_containers",
            **kwargs
        )
        self.snapshot_id = snapshot_id
        self.failures = failures or []

    @property
    def failed_container_ids(self) -> list[str]:
        return [failure.container_id for failure in self.failures]

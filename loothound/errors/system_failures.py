"""
System failure error classifications for collaborator failures.

These exceptions represent failures of the persistence layer or of the
remote stash provider. They are surfaced to the caller, never swallowed.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for collaborator failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Database persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class TransportError(SystemFailureError):
    """Remote stash fetch failures."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code

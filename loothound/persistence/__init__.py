"""
Snapshot persistence layer.
"""
from .base import PersistenceGateway
from .sqlite_gateway import SqliteGateway

__all__ = ["PersistenceGateway", "SqliteGateway"]

"""
Query cache coordination.
"""
from .query_cache import (
    CacheEntry,
    QueryCache,
    QueryKey,
    QueryStatus,
    get_query_cache,
    init_query_cache,
    shutdown_query_cache,
)

__all__ = [
    "CacheEntry",
    "QueryCache",
    "QueryKey",
    "QueryStatus",
    "get_query_cache",
    "init_query_cache",
    "shutdown_query_cache",
]

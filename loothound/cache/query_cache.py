"""
Read-through query cache for profile, snapshot and item reads.

Entries are keyed by (kind, key, sub_key) and never expire on their own:
they go stale only when a write path invalidates them, and the next read
of a stale entry refetches. A process-wide instance is created with
init_query_cache() and torn down with shutdown_query_cache().
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable, NamedTuple, Optional, Union

from ..logging.config import get_cache_logger, log_cache_transition

logger = get_cache_logger(__name__)


class QueryStatus(Enum):
    """Lifecycle of a cache entry."""
    IDLE = "idle"            # Read disabled or never issued
    FETCHING = "fetching"    # Fetch in flight
    FRESH = "fresh"          # Holds the result of the latest fetch
    STALE = "stale"          # Invalidated; next read refetches
    ERROR = "error"          # Last fetch failed; data is last-known-good


class QueryKey(NamedTuple):
    """Cache key: entity kind, entity key, optional sub-key."""
    kind: str
    key: Hashable = None
    sub_key: Hashable = None

    def matches(self, kind: str, key: Hashable = None) -> bool:
        """True if this key belongs to ``kind`` and, when given, ``key``."""
        return self.kind == kind and (key is None or self.key == key)


KeyLike = Union[QueryKey, tuple, str]
Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[["CacheEntry"], None]


def as_query_key(key: KeyLike) -> QueryKey:
    if isinstance(key, QueryKey):
        return key
    if isinstance(key, str):
        return QueryKey(key)
    return QueryKey(*key)


@dataclass
class CacheEntry:
    """Last-known-good result of a read plus its fetch state."""
    key: QueryKey
    data: Any = None
    status: QueryStatus = QueryStatus.IDLE
    error: Optional[Exception] = None
    updated_at: Optional[datetime] = None
    fetch_count: int = 0
    generation: int = 0  # Bumped on every invalidation
    data_generation: int = -1  # Generation the stored data was fetched at

    @property
    def is_fetching(self) -> bool:
        return self.status is QueryStatus.FETCHING

    @property
    def is_idle(self) -> bool:
        return self.status is QueryStatus.IDLE

    @property
    def has_data(self) -> bool:
        return self.data is not None


class QueryCache:
    """Coordinates cached reads, invalidation and subscriptions."""

    def __init__(self) -> None:
        self.logger = logger
        self._entries: dict[QueryKey, CacheEntry] = {}
        # key -> (fetch task, generation it was started at)
        self._inflight: dict[QueryKey, tuple[asyncio.Task, int]] = {}
        self._listeners: dict[QueryKey, list[Listener]] = {}

    def peek(self, key: KeyLike) -> Optional[CacheEntry]:
        """Return the cached entry without fetching."""
        return self._entries.get(as_query_key(key))

    async def get(
        self,
        key: KeyLike,
        fetcher: Optional[Fetcher],
        enabled: bool = True,
        on_success: Optional[Callable[[Any], None]] = None
    ) -> CacheEntry:
        """
        Read through the cache.

        Args:
            key: Query key
            fetcher: Coroutine function producing fresh data
            enabled: If False, never fetch and report an idle entry
            on_success: Called with the data once per successful fetch of this read

        Returns:
            The cache entry after any fetch completed
        """
        key = as_query_key(key)

        if not enabled or fetcher is None:
            return CacheEntry(key=key)

        entry = self._entries.get(key)
        if entry is not None and entry.status is QueryStatus.FRESH:
            return entry

        inflight = self._inflight.get(key)
        # A fetch started before the latest invalidation may hold pre-write data
        if inflight is not None and entry is not None and inflight[1] == entry.generation:
            task = inflight[0]
        else:
            entry = self._entries.setdefault(key, CacheEntry(key=key))
            self._set_status(entry, QueryStatus.FETCHING, "fetch")
            task = asyncio.ensure_future(self._fetch(entry, fetcher, entry.generation))
            self._inflight[key] = (task, entry.generation)
            task.add_done_callback(lambda t, k=key: self._release(k, t))

        succeeded = await task

        # The result was discarded for a newer fetch; wait for that one instead
        inflight = self._inflight.get(key)
        while not succeeded and inflight is not None and inflight[0] is not task:
            task = inflight[0]
            succeeded = await task
            inflight = self._inflight.get(key)

        entry = self._entries.get(key, entry)

        if succeeded and on_success is not None:
            on_success(entry.data)

        return entry

    async def get_dependent(
        self,
        kind: str,
        upstream: CacheEntry,
        select: Callable[[Any], Optional[Hashable]],
        fetcher: Callable[[Hashable], Awaitable[Any]],
        on_success: Optional[Callable[[Any], None]] = None
    ) -> CacheEntry:
        """
        Read a value that depends on another cached read.

        ``select`` maps the upstream data to the key of the dependent read;
        until it yields a key the dependent read is disabled.
        """
        selected = select(upstream.data) if upstream.has_data else None

        if selected is None:
            return CacheEntry(key=QueryKey(kind))

        return await self.get(
            QueryKey(kind, selected),
            lambda: fetcher(selected),
            on_success=on_success,
        )

    def invalidate(self, kind: str, key: Hashable = None) -> int:
        """
        Mark matching entries stale so the next read refetches.

        Args:
            kind: Entity kind to invalidate
            key: Entity key; None invalidates every entry of the kind

        Returns:
            Number of entries invalidated
        """
        count = 0

        for entry_key, entry in self._entries.items():
            if not entry_key.matches(kind, key):
                continue
            entry.generation += 1
            count += 1
            # An in-flight fetch finishes as stale because its generation is outdated
            if not entry.is_fetching:
                self._set_status(entry, QueryStatus.STALE, "invalidate")

        self.logger.info("Invalidated queries", kind=kind, key=key, count=count)
        return count

    def subscribe(self, key: KeyLike, listener: Listener) -> Callable[[], None]:
        """Register a state listener for a key; returns an unsubscribe callable."""
        key = as_query_key(key)
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        """
        Drop all entries and listeners and cancel in-flight fetches.

        Readers still awaiting a cancelled fetch get ``asyncio.CancelledError``;
        clear the cache only once its readers are done.
        """
        for task, _generation in self._inflight.values():
            task.cancel()
        self._inflight.clear()
        self._entries.clear()
        self._listeners.clear()

    def _release(self, key: QueryKey, task: asyncio.Task) -> None:
        inflight = self._inflight.get(key)
        if inflight is not None and inflight[0] is task:
            del self._inflight[key]

    def _superseded(self, entry: CacheEntry, generation: int) -> bool:
        """True if a fetch started after ``generation`` is running or has landed."""
        inflight = self._inflight.get(entry.key)
        if inflight is not None and inflight[1] > generation:
            return True
        return entry.data_generation > generation

    async def _fetch(self, entry: CacheEntry, fetcher: Fetcher, generation: int) -> bool:
        try:
            data = await fetcher()
        except Exception as e:
            if self._superseded(entry, generation):
                self.logger.debug("Superseded query fetch failed", query_key=str(entry.key), error=str(e))
                return False
            entry.error = e
            self.logger.warning("Query fetch failed", query_key=str(entry.key), error=str(e))
            self._set_status(entry, QueryStatus.ERROR, "error")
            return False

        # A newer fetch owns the entry; its result must not be overwritten
        if self._superseded(entry, generation):
            self.logger.debug("Discarded superseded query result", query_key=str(entry.key))
            return False

        entry.data = data
        entry.data_generation = generation
        entry.error = None
        entry.updated_at = datetime.now(timezone.utc)
        entry.fetch_count += 1

        if entry.generation != generation:
            self._set_status(entry, QueryStatus.STALE, "invalidated_during_fetch")
        else:
            self._set_status(entry, QueryStatus.FRESH, "fetch")
        return True

    def _set_status(self, entry: CacheEntry, status: QueryStatus, trigger: str) -> None:
        previous = entry.status
        entry.status = status
        log_cache_transition(self.logger, entry.key, previous.value, status.value, trigger)

        for listener in list(self._listeners.get(entry.key, [])):
            try:
                listener(entry)
            except Exception as e:
                self.logger.error("Cache listener failed", query_key=str(entry.key), error=str(e))


_query_cache: Optional[QueryCache] = None


def init_query_cache() -> QueryCache:
    """Create the process-wide query cache if it does not exist yet."""
    global _query_cache
    if _query_cache is None:
        _query_cache = QueryCache()
        logger.info("Query cache initialized")
    return _query_cache


def get_query_cache() -> QueryCache:
    """Return the process-wide query cache."""
    if _query_cache is None:
        raise RuntimeError("Query cache is not initialized; call init_query_cache() first")
    return _query_cache


def shutdown_query_cache() -> None:
    """Tear down the process-wide query cache."""
    global _query_cache
    if _query_cache is not None:
        _query_cache.clear()
        _query_cache = None
        logger.info("Query cache shut down")

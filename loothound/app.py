"""
Application shell.

Wires configuration, logging, the process-wide query cache and the
collaborators together, and keeps the per-window session state: the
selected profile and the working item list shown to the user.
"""

from pathlib import Path
from typing import Any, Optional

import structlog

from .cache import queries
from .cache.query_cache import QueryCache, init_query_cache, shutdown_query_cache
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import Item, Profile
from .engine import SnapshotOrchestrator
from .errors import ValidationError
from .logging.config import configure_logging
from .persistence.base import PersistenceGateway
from .persistence.sqlite_gateway import SqliteGateway
from .pipeline.aggregation import AggregationResult
from .remote.client import ContainerFetcher, HttpContainerFetcher
from .stats.calculator import StatCard, build_stats

logger = structlog.get_logger(__name__)


class ProfileSession:
    """Selected profile plus the item list currently on screen."""

    def __init__(
        self,
        cache: QueryCache,
        gateway: PersistenceGateway,
        orchestrator: SnapshotOrchestrator
    ) -> None:
        self.cache = cache
        self.gateway = gateway
        self.orchestrator = orchestrator
        self.selected_profile_id: Optional[int] = None
        self.items: list[Item] = []

    @property
    def can_take_snapshot(self) -> bool:
        return bool(self.selected_profile_id)

    def set_items(self, items: list[Item]) -> None:
        self.items = list(items)

    async def profiles(self) -> list[Profile]:
        entry = await queries.get_profiles(self.cache, self.gateway)
        return entry.data or []

    async def select_profile(self, profile_id: Optional[int]) -> None:
        self.selected_profile_id = profile_id
        await self.refresh()

    async def refresh(self) -> None:
        """Re-read the latest snapshot's items into the working item list."""
        snapshots = await queries.get_snapshots(self.cache, self.gateway, self.selected_profile_id)

        fetched = False

        def on_items(items: list[Item]) -> None:
            nonlocal fetched
            fetched = True
            self.set_items(items)

        entry = await queries.get_snapshot_items(self.cache, self.gateway, snapshots, on_success=on_items)

        if not fetched:
            self.set_items(entry.data or [])

    async def take_snapshot(self) -> AggregationResult:
        result = await self.orchestrator.take_snapshot(self.selected_profile_id)
        self.set_items(result.items)
        return result

    async def stats(self, total: float = 0.0) -> list[StatCard]:
        snapshots = await queries.get_snapshots(self.cache, self.gateway, self.selected_profile_id)
        return build_stats(total, snapshots.data)


class LootHoundApp:
    """Owns the collaborators and the query cache lifecycle."""

    def __init__(
        self,
        config: DefaultConfig,
        gateway: Optional[PersistenceGateway] = None,
        fetcher: Optional[ContainerFetcher] = None
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.fetcher = fetcher
        self.cache: Optional[QueryCache] = None
        self.orchestrator: Optional[SnapshotOrchestrator] = None
        self.session: Optional[ProfileSession] = None

    @classmethod
    def from_config_dir(
        cls,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        **kwargs
    ) -> "LootHoundApp":
        """Load and validate configuration, then build the app."""
        loader = ConfigLoader.create(config_dir)
        merged = loader.merge_config(overrides)

        issues = ConfigValidator.validate_config(merged)
        if issues:
            raise ValidationError(
                "Invalid configuration: " + "; ".join(f"{i.field}: {i.message}" for i in issues),
                field=issues[0].field,
                context={"issues": [(i.field, i.message, i.value) for i in issues]},
            )

        return cls(loader.load(overrides), **kwargs)

    def start(self, configure_logs: bool = True) -> "LootHoundApp":
        if configure_logs:
            configure_logging(
                level=self.config.logging.level,
                format_json=self.config.logging.format_json,
                include_caller=self.config.logging.include_caller,
            )

        if self.gateway is None:
            self.gateway = SqliteGateway(
                self.config.storage.db_path,
                pricing_revision=self.config.pricing.revision,
                timeout=self.config.storage.busy_timeout_seconds,
            )
        if self.fetcher is None:
            self.fetcher = HttpContainerFetcher(self.config.remote)

        self.cache = init_query_cache()
        self.orchestrator = SnapshotOrchestrator(self.gateway, self.fetcher, self.cache)
        self.session = ProfileSession(self.cache, self.gateway, self.orchestrator)

        logger.info("LootHound started", db_path=self.config.storage.db_path)
        return self

    def stop(self) -> None:
        shutdown_query_cache()
        self.cache = None
        self.orchestrator = None
        self.session = None
        logger.info("LootHound stopped")

    async def __aenter__(self) -> "LootHoundApp":
        return self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()

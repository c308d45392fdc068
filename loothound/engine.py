"""
Snapshot orchestrator.

Coordinates one "take snapshot" action:
Snapshot row → Cache invalidation → Stash fetch → Aggregation → Item list
"""

from typing import Optional

from .cache import queries
from .cache.query_cache import QueryCache
from .errors import PersistenceError, TransportError, ValidationError
from .logging.config import get_snapshot_logger
from .persistence.base import PersistenceGateway
from .pipeline.aggregation import AggregationResult, aggregate
from .remote.client import ContainerFetcher

logger = get_snapshot_logger(__name__)


class SnapshotOrchestrator:
    """
    Takes snapshots of a profile's stash tabs.

    The snapshot row is the transaction boundary: once it is created it
    stays, even if fetching or attaching fails afterwards.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        fetcher: ContainerFetcher,
        cache: QueryCache
    ) -> None:
        self.gateway = gateway
        self.fetcher = fetcher
        self.cache = cache
        self.logger = logger

    async def take_snapshot(self, profile_id: Optional[int]) -> AggregationResult:
        """
        Capture the current stash contents of a profile.

        Args:
            profile_id: Profile to snapshot

        Returns:
            AggregationResult holding the new snapshot id, the combined item
            list for immediate display, and any per-container failures

        Raises:
            ValidationError: No profile given, or the profile does not exist
            PersistenceError: The snapshot row could not be created
            TransportError: The stash tabs could not be fetched
        """
        if not profile_id:
            raise ValidationError("A profile must be selected to take a snapshot", field="profile_id")

        profile = await self.gateway.get_profile(profile_id)
        if profile is None:
            raise ValidationError(f"Profile {profile_id} does not exist", field="profile_id")

        log = self.logger.bind(profile_id=profile_id)

        try:
            snapshot_id = await self.gateway.create_snapshot(profile_id)
        except PersistenceError as e:
            log.error("Snapshot creation failed", error=str(e))
            raise

        log = log.bind(snapshot_id=snapshot_id)
        self.cache.invalidate(queries.SNAPSHOTS, profile_id)

        try:
            containers = await self.fetcher.fetch_containers(list(profile.stashes), profile.league)
        except TransportError as e:
            log.error("Stash fetch failed; snapshot left empty", error=str(e))
            raise

        result = await aggregate(snapshot_id, containers, self.gateway)
        self.cache.invalidate(queries.SNAPSHOT_ITEMS, snapshot_id)

        if result.ok:
            log.info("Snapshot taken", item_count=len(result.items))
        else:
            log.warning(
                "Snapshot taken with failed containers",
                item_count=len(result.items),
                failed_containers=[failure.container_id for failure in result.failures],
            )

        return result

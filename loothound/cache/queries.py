"""Cached reads and cache-invalidating writes used by the application shell."""

from typing import Any, Callable, Optional

from ..data.models import Item, Profile, Snapshot
from ..persistence.base import PersistenceGateway
from ..remote.client import ContainerFetcher
from .query_cache import CacheEntry, QueryCache, QueryKey

PROFILES = "profiles"
SNAPSHOTS = "snapshots"
SNAPSHOT_ITEMS = "snapshot_items"
STASHES = "stashes"


def latest_snapshot_id(snapshots: Optional[list[Snapshot]]) -> Optional[int]:
    """Id of the newest snapshot in a newest-first list."""
    if not snapshots:
        return None
    return snapshots[0].id


async def get_profiles(cache: QueryCache, gateway: PersistenceGateway) -> CacheEntry:
    return await cache.get(QueryKey(PROFILES), gateway.list_profiles)


async def get_snapshots(
    cache: QueryCache,
    gateway: PersistenceGateway,
    profile_id: Optional[int]
) -> CacheEntry:
    """Snapshots of a profile, newest first; disabled when no profile is selected."""
    return await cache.get(
        QueryKey(SNAPSHOTS, profile_id),
        lambda: gateway.list_snapshots(profile_id),
        enabled=bool(profile_id),
    )


async def get_snapshot_items(
    cache: QueryCache,
    gateway: PersistenceGateway,
    snapshots: CacheEntry,
    on_success: Optional[Callable[[list[Item]], None]] = None
) -> CacheEntry:
    """Items of the latest snapshot; disabled until the snapshot list has one."""
    return await cache.get_dependent(
        SNAPSHOT_ITEMS,
        snapshots,
        latest_snapshot_id,
        gateway.list_snapshot_items,
        on_success=on_success,
    )


async def get_stashes(
    cache: QueryCache,
    fetcher: ContainerFetcher,
    profile: Optional[Profile]
) -> CacheEntry:
    """Live stash contents for a profile's tracked tabs."""
    return await cache.get(
        QueryKey(STASHES, profile.id if profile else None),
        lambda: fetcher.fetch_containers(list(profile.stashes), profile.league),
        enabled=profile is not None and bool(profile.stashes),
    )


async def add_profile(cache: QueryCache, gateway: PersistenceGateway, payload: dict[str, Any]) -> int:
    profile_id = await gateway.create_profile(payload)
    cache.invalidate(PROFILES)
    return profile_id


async def update_profile(
    cache: QueryCache,
    gateway: PersistenceGateway,
    profile_id: int,
    payload: dict[str, Any]
) -> None:
    await gateway.update_profile(profile_id, payload)
    cache.invalidate(PROFILES)
    cache.invalidate(STASHES, profile_id)


async def delete_profile(cache: QueryCache, gateway: PersistenceGateway, profile_id: int) -> None:
    await gateway.delete_profile(profile_id)
    cache.invalidate(PROFILES)
    cache.invalidate(SNAPSHOTS, profile_id)
    cache.invalidate(STASHES, profile_id)

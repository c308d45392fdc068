"""Persistence gateway contract for profiles, snapshots and items."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ..data.models import Item, Profile, Snapshot


class PersistenceGateway(ABC):
    """
    Asynchronous create/read access to stored profiles and snapshots.

    Every method may raise PersistenceError.
    """

    @abstractmethod
    async def create_profile(self, payload: dict[str, Any]) -> int:
        """Create a profile from ``{"name", "stashes", "league"}``; return its id."""

    @abstractmethod
    async def update_profile(self, profile_id: int, payload: dict[str, Any]) -> None:
        """Replace a profile's name, league and/or stash list."""

    @abstractmethod
    async def delete_profile(self, profile_id: int) -> None:
        """Delete a profile together with its snapshots and items."""

    @abstractmethod
    async def list_profiles(self) -> list[Profile]:
        pass

    @abstractmethod
    async def get_profile(self, profile_id: int) -> Optional[Profile]:
        pass

    @abstractmethod
    async def create_snapshot(self, profile_id: int) -> int:
        """Create an empty snapshot for a profile; return its id."""

    @abstractmethod
    async def attach_items(self, snapshot_id: int, items: Sequence[Item], stash_id: str) -> None:
        """Attach one container's items to a snapshot."""

    @abstractmethod
    async def list_snapshots(self, profile_id: int) -> list[Snapshot]:
        """Snapshots of a profile, newest first."""

    @abstractmethod
    async def list_snapshot_items(self, snapshot_id: int) -> list[Item]:
        pass

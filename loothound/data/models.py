"""
Canonical data models for profiles, snapshots, containers and items.

Containers keep the provider payload they were parsed from; items are the
normalized records that get attached to snapshots.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ContainerKind(Enum):
    """Closed set of container shapes the normalizer understands."""
    GENERIC = "generic"  # Holds a list of item records
    MAP = "map"          # Holds children describing one map each


# Provider tags with a dedicated shape; anything else is a generic list
CONTAINER_KINDS_BY_TAG: Mapping[str, ContainerKind] = MappingProxyType({
    "MapStash": ContainerKind.MAP,
})


@dataclass(frozen=True)
class Profile:
    """User profile tracking a set of stash tabs."""
    id: int
    name: str
    stashes: tuple[str, ...] = ()
    league: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Immutable capture of a profile's stash state."""
    id: int
    profile_id: int
    created_at: str           # UTC ISO-8601
    pricing_revision: int


@dataclass(frozen=True)
class Item:
    """Normalized stash item."""
    verified: bool
    w: int
    h: int
    icon: Optional[str]
    name: str
    type_line: str
    base_type: str
    identified: bool
    frame_type: int
    stash_id: Optional[str] = None
    item_id: Optional[str] = None
    stack_size: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the provider's key names."""
        return {
            "id": self.item_id,
            "verified": self.verified,
            "w": self.w,
            "h": self.h,
            "icon": self.icon,
            "name": self.name,
            "typeLine": self.type_line,
            "baseType": self.base_type,
            "identified": self.identified,
            "frameType": self.frame_type,
            "stackSize": self.stack_size,
            "stashId": self.stash_id,
        }


@dataclass(frozen=True)
class GenericContainer:
    """Stash tab holding a plain list of item records."""
    id: str
    name: str = ""
    type: str = ""
    items: tuple[Mapping[str, Any], ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> ContainerKind:
        return ContainerKind.GENERIC


@dataclass(frozen=True)
class MapContainer:
    """Map stash tab; every child describes a single map collectible."""
    id: str
    name: str = ""
    type: str = "MapStash"
    children: tuple[Mapping[str, Any], ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> ContainerKind:
        return ContainerKind.MAP

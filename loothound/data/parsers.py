"""
Parsers for raw stash payloads returned by the game data provider.

The provider returns one JSON object per stash tab. Tabs share identity and
metadata keys but carry their contents in different places: regular tabs
have ``items``, map tabs have ``children`` with ``metadata.map``.
"""

from collections.abc import Iterable
from typing import Any, Mapping, Union

import structlog

from ..errors import MalformedDataError
from .models import CONTAINER_KINDS_BY_TAG, ContainerKind, GenericContainer, MapContainer

logger = structlog.get_logger(__name__)

Container = Union[GenericContainer, MapContainer]


def container_kind_for(tag: Any) -> ContainerKind:
    """Map a provider type tag onto a container kind."""
    if isinstance(tag, str):
        return CONTAINER_KINDS_BY_TAG.get(tag, ContainerKind.GENERIC)
    return ContainerKind.GENERIC


def _records(value: Any) -> tuple[Mapping[str, Any], ...]:
    """Keep list entries as-is; a missing or non-list value means no records."""
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


def parse_container(raw: Any) -> Container:
    """
    Parse one raw stash payload into a typed container.

    Args:
        raw: Decoded JSON object for a single stash tab

    Returns:
        GenericContainer or MapContainer depending on the tab type

    Raises:
        MalformedDataError: If the payload is not an object or has no id
    """
    if not isinstance(raw, Mapping):
        raise MalformedDataError(
            "Stash payload must be an object",
            raw_data=str(raw)[:100],
            expected_format="object"
        )

    stash_id = raw.get("id")
    if stash_id is None or stash_id == "":
        raise MalformedDataError(
            "Stash payload has no id",
            raw_data=str(raw)[:100],
            expected_format="object with id"
        )

    tag = raw.get("type", "")
    metadata = raw.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}

    if container_kind_for(tag) is ContainerKind.MAP:
        return MapContainer(
            id=str(stash_id),
            name=raw.get("name", ""),
            type=tag,
            children=_records(raw.get("children")),
            metadata=metadata,
        )

    return GenericContainer(
        id=str(stash_id),
        name=raw.get("name", ""),
        type=tag or "",
        items=_records(raw.get("items")),
        metadata=metadata,
    )


def parse_containers(raw_list: Iterable[Any]) -> list[Container]:
    """Parse a list of stash payloads, skipping ones that cannot be identified."""
    containers = []

    for raw in raw_list:
        try:
            containers.append(parse_container(raw))
        except MalformedDataError as e:
            logger.warning("Skipping malformed stash payload", error=str(e), raw_data=e.raw_data)

    return containers

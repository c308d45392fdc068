"""
Container normalization: raw stash containers to canonical items.

Every container kind has one strategy function. Strategies are pure and
total: entries they cannot read are skipped and logged, never fabricated
and never raised to the caller.
"""

from typing import Any, Callable, Mapping, Union

import structlog

from ..errors import MalformedDataError
from .models import ContainerKind, GenericContainer, Item, MapContainer

logger = structlog.get_logger(__name__)

Container = Union[GenericContainer, MapContainer]

# Geometry and classifiers shared by every synthesized map item
MAP_ITEM_SIZE = 1
LOWEST_FRAME_TYPE = 0


def _value(record: Mapping[str, Any], key: str, default: Any) -> Any:
    """Provider value for ``key``; missing and null both give ``default``."""
    value = record.get(key)
    return default if value is None else value


def item_from_record(record: Mapping[str, Any], stash_id: str) -> Item:
    """
    Copy a provider item record onto an Item, tagged with its container.

    Missing or null fields take their defaults; a missing ``baseType`` is
    the ``typeLine``.

    Raises:
        MalformedDataError: If the record has no ``typeLine`` string
    """
    type_line = record.get("typeLine")
    if not isinstance(type_line, str) or not type_line:
        raise MalformedDataError(
            "Item record has no typeLine",
            raw_data=str(record)[:100],
            expected_format="item.typeLine",
            context={"stash_id": stash_id},
        )

    return Item(
        verified=bool(_value(record, "verified", False)),
        w=_value(record, "w", 1),
        h=_value(record, "h", 1),
        icon=record.get("icon"),
        name=_value(record, "name", ""),
        type_line=type_line,
        base_type=_value(record, "baseType", type_line),
        identified=bool(_value(record, "identified", False)),
        frame_type=_value(record, "frameType", LOWEST_FRAME_TYPE),
        stash_id=stash_id,
        item_id=record.get("id"),
        stack_size=record.get("stackSize"),
    )


def item_from_map_child(child: Any, stash_id: str) -> Item:
    """
    Synthesize an Item for one map stash child.

    Raises:
        MalformedDataError: If the child has no map metadata or the map has no name
    """
    metadata = child.get("metadata") if isinstance(child, Mapping) else None
    map_info = metadata.get("map") if isinstance(metadata, Mapping) else None

    if not isinstance(map_info, Mapping):
        raise MalformedDataError(
            "Map child has no map metadata",
            raw_data=str(child)[:100],
            expected_format="child.metadata.map",
            context={"stash_id": stash_id},
        )

    map_name = map_info.get("name")
    if not map_name:
        raise MalformedDataError(
            "Map metadata has no name",
            raw_data=str(map_info)[:100],
            expected_format="child.metadata.map.name",
            context={"stash_id": stash_id},
        )

    return Item(
        verified=False,
        w=MAP_ITEM_SIZE,
        h=MAP_ITEM_SIZE,
        icon=map_info.get("image"),
        name=map_name,
        type_line=map_name,
        base_type=map_name,
        identified=True,
        frame_type=LOWEST_FRAME_TYPE,
        stash_id=stash_id,
    )


def normalize_generic(container: GenericContainer) -> list[Item]:
    """One item per readable record in the container's item list."""
    items = []

    for record in container.items:
        if not isinstance(record, Mapping):
            logger.debug("Skipping non-object item record", stash_id=container.id)
            continue
        try:
            items.append(item_from_record(record, container.id))
        except MalformedDataError as e:
            logger.debug(
                "Skipping malformed item record",
                stash_id=container.id,
                error=str(e),
                expected_format=e.expected_format,
            )

    return items


def normalize_map(container: MapContainer) -> list[Item]:
    """One item per child that describes a map; other children are skipped."""
    items = []

    for child in container.children:
        try:
            items.append(item_from_map_child(child, container.id))
        except MalformedDataError as e:
            logger.debug(
                "Skipping malformed map child",
                stash_id=container.id,
                error=str(e),
                expected_format=e.expected_format,
            )

    return items


NORMALIZERS: Mapping[ContainerKind, Callable[[Any], list[Item]]] = {
    ContainerKind.GENERIC: normalize_generic,
    ContainerKind.MAP: normalize_map,
}


def normalize(container: Container) -> list[Item]:
    """
    Normalize one container into items.

    Args:
        container: Parsed stash container

    Returns:
        Items in container order; empty if nothing could be read
    """
    strategy = NORMALIZERS.get(container.kind)
    if strategy is None:
        logger.warning("No normalizer for container kind", stash_id=container.id, kind=str(container.kind))
        return []
    return strategy(container)

"""
Aggregation of normalized container items into a snapshot.

Containers are processed strictly in order, one attach in flight at a time.
A container whose attach fails is recorded and the run moves on to the
next container; the combined item list only holds what was attached.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..data.models import Item
from ..data.normalizer import Container, normalize
from ..errors import ContainerFailure, PartialAggregationError, PersistenceError
from ..logging.config import get_snapshot_logger, log_container_attach
from ..persistence.base import PersistenceGateway

logger = get_snapshot_logger(__name__)


@dataclass
class AggregationResult:
    """Outcome of aggregating a set of containers into one snapshot."""
    snapshot_id: Optional[int]
    items: list[Item] = field(default_factory=list)
    attached_containers: list[str] = field(default_factory=list)
    failures: list[ContainerFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise PartialAggregationError if any container failed."""
        if self.failures:
            raise PartialAggregationError(
                f"{len(self.failures)} container(s) failed to attach",
                snapshot_id=self.snapshot_id,
                failures=list(self.failures),
            )


async def aggregate(
    snapshot_id: int,
    containers: Iterable[Container],
    gateway: PersistenceGateway
) -> AggregationResult:
    """
    Normalize every container and attach its items to a snapshot.

    Args:
        snapshot_id: Snapshot receiving the items
        containers: Containers in the order they should be attached
        gateway: Persistence gateway performing the attaches

    Returns:
        AggregationResult with the combined items and per-container failures
    """
    result = AggregationResult(snapshot_id=snapshot_id)
    seen: set[str] = set()

    for container in containers:
        if container.id in seen:
            logger.warning("Duplicate container in aggregation run", snapshot_id=snapshot_id, stash_id=container.id)
            continue
        seen.add(container.id)

        items = normalize(container)
        if not items:
            logger.debug("Container has no items", snapshot_id=snapshot_id, stash_id=container.id)
            continue

        try:
            await gateway.attach_items(snapshot_id, items, container.id)
        except Exception as e:
            error = e
            if not isinstance(e, PersistenceError):
                error = PersistenceError(
                    f"attach_items failed: {e}",
                    operation="attach_items",
                    target=f"{snapshot_id}/{container.id}",
                )
                error.__cause__ = e
            result.failures.append(ContainerFailure(container.id, error, len(items)))
            log_container_attach(logger, snapshot_id, container.id, False, len(items), reason=str(e))
            continue

        result.attached_containers.append(container.id)
        result.items.extend(items)
        log_container_attach(logger, snapshot_id, container.id, True, len(items))

    logger.info(
        "Aggregation finished",
        snapshot_id=snapshot_id,
        item_count=len(result.items),
        attached=len(result.attached_containers),
        failed=len(result.failures),
    )
    return result

"""
Centralized logging configuration for LootHound.

This module provides standardized logging configuration using structlog
for all components. Snapshot, cache and persistence code should log through
loggers obtained here so audit events share one format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_snapshot_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for snapshot capture and aggregation.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for the snapshot write path
    """
    return get_logger(name).bind(
        subsystem="snapshot",
        audit_trail=True
    )


def get_cache_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for query cache state changes.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for the query cache
    """
    return get_logger(name).bind(subsystem="query_cache")


def log_container_attach(
    logger: FilteringBoundLogger,
    snapshot_id: int,
    stash_id: str,
    attached: bool,
    item_count: int,
    reason: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of attaching one container's items to a snapshot.

    Args:
        logger: Structlog logger instance
        snapshot_id: Snapshot the items were attached to
        stash_id: Container the items came from
        attached: Whether the gateway accepted the items
        item_count: Number of normalized items in the container
        reason: Failure reason when not attached
        context: Additional context data
    """
    bound_logger = logger.bind(
        snapshot_id=snapshot_id,
        stash_id=stash_id,
        attach_result="OK" if attached else "FAIL",
        item_count=item_count,
    )

    if reason:
        bound_logger = bound_logger.bind(reason=reason)
    if context:
        bound_logger = bound_logger.bind(context=context)

    if attached:
        bound_logger.info("Container attached")
    else:
        bound_logger.error("Container attach failed")


def log_cache_transition(
    logger: FilteringBoundLogger,
    key: Any,
    from_status: str,
    to_status: str,
    trigger: str
) -> None:
    """
    Log a cache entry status change with standardized format.

    Args:
        logger: Structlog logger instance
        key: Query key of the entry
        from_status: Previous entry status
        to_status: New entry status
        trigger: What caused the change (fetch, invalidate, error)
    """
    logger.debug(
        "Cache entry transition",
        query_key=str(key),
        from_status=from_status,
        to_status=to_status,
        trigger=trigger,
    )

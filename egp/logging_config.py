"""
Logging Configuration

Structured logging with loguru. Library modules log through the shared
``loguru.logger`` with keyword context; applications call
``configure_logging`` once at startup. Per-call expression and operator
events are DEBUG, catalog construction is INFO.

Author: EGP Team
License: MIT
"""

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> | {extra}"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_string: Optional[str] = None,
    serialize: bool = False,
    enqueue: bool = False,
) -> list[int]:
    """
    Install engine log sinks, replacing any existing ones.

    Args:
        log_level: Minimum level for every sink
        log_file: Optional rotating log file
        rotation: Rotation size/time of the file sink
        retention: Retention period of rotated files
        format_string: Custom format (defaults to DEFAULT_FORMAT, or the bare
            message when serializing)
        serialize: Emit JSON records
        enqueue: Route records through a queue, for populations evaluated
            in worker processes

    Returns:
        Ids of the installed sinks
    """
    shared: dict[str, Any] = {
        "level": log_level.upper(),
        "format": format_string or ("{message}" if serialize else DEFAULT_FORMAT),
        "serialize": serialize,
        "enqueue": enqueue,
    }

    logger.remove()
    sink_ids = [logger.add(sys.stderr, colorize=not serialize, **shared)]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(
                str(log_file),
                rotation=rotation,
                retention=retention,
                compression="zip",
                **shared,
            )
        )

    logger.configure(extra={"component": "egp"})
    return sink_ids


class LogContext:
    """
    Attach key-value context to every record logged inside the block.

    Fields whose value is None are skipped, so population drivers can pass
    optional identifiers unconditionally:

    >>> with LogContext(generation=3, member=None):
    ...     phenotype = express(catalog, chromosome)
    """

    def __init__(self, **context: Any):
        self.context = {key: value for key, value in context.items() if value is not None}
        self._scope = None

    def __enter__(self):
        self._scope = logger.contextualize(**self.context)
        self._scope.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        scope, self._scope = self._scope, None
        if scope is not None:
            scope.__exit__(exc_type, exc_val, exc_tb)


__all__ = ["configure_logging", "LogContext", "DEFAULT_FORMAT"]

"""Structured logging utilities for text transcoding.

Every record emitted through :class:`CorrelationLogger` carries the component
name and the correlation ID of the invocation that produced it, so one
transcode can be followed through registry, pipeline and CLI output.

Module-level loggers are created without an ID and bound per invocation::

    logger = get_logger(__name__, component="cli")
    ...
    run_logger = logger.bind(correlation_id)
    run_logger.info("Starting", extra={"file": "input.txt"})
"""

import logging
from typing import Any, MutableMapping, Optional, Tuple


class CorrelationLogger(logging.LoggerAdapter):
    """Adapter that adds ``component`` and ``correlation_id`` to every record.

    Per-call ``extra`` fields are merged with the bound fields; the call wins
    on a key clash.
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for invocation tracking
            component: Component name for structured logging
        """
        super().__init__(
            logging.getLogger(name),
            {
                "component": component or name.split(".")[-1],
                "correlation_id": correlation_id,
            },
        )

    @property
    def component(self) -> str:
        return self.extra["component"]

    @property
    def correlation_id(self) -> Optional[str]:
        return self.extra["correlation_id"]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, correlation_id: Optional[str]) -> "CorrelationLogger":
        """Return a logger for the same name and component with a new correlation ID."""
        return CorrelationLogger(self.logger.name, correlation_id, self.component)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for invocation tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)

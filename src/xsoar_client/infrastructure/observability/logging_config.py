"""
Structured logging configuration using structlog.

Loggers returned by :func:`get_logger` wrap stdlib loggers under the
``xsoar_client`` hierarchy, so the client stays silent until the host
application enables it, either through its own stdlib logging setup or by
calling :func:`setup_logging` for JSON lines.  The global structlog
configuration of the host application is never touched.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# ======================================================================
# Constants
# ======================================================================

SERVICE_NAME: str = "xsoar-client"
ROOT_LOGGER_NAME: str = "xsoar_client"


# ======================================================================
# Custom processors
# ======================================================================


def add_service_name(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Inject the service name into every log event."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


# Shared processor chain; the last step hands events to ProcessorFormatter.
_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    add_service_name,  # type: ignore[list-item]
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


# ======================================================================
# Setup
# ======================================================================


def setup_logging(log_level: str = "INFO") -> logging.Handler:
    """
    Send client log events to stdout as JSON lines.

    Parameters
    ----------
    log_level:
        Minimum severity level as a string (``DEBUG``, ``INFO``, ``WARNING``,
        ``ERROR``, ``CRITICAL``).  ``DEBUG`` shows one event per HTTP request.

    Returns the installed handler so callers can redirect or remove it.
    """

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    client_logger = logging.getLogger(ROOT_LOGGER_NAME)
    client_logger.handlers.clear()
    client_logger.addHandler(handler)
    client_logger.setLevel(numeric_level)
    client_logger.propagate = False
    return handler


# ======================================================================
# Logger factory
# ======================================================================


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Return a bound structlog logger for the stdlib logger *name*.

    Additional context can be attached via ``.bind()``::

        log = get_logger(__name__).bind(request_id="req-1")
        log.debug("xsoar.request", method="POST", path="/incidents/search")
    """
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )

"""
Structured logging for not-so-fast.

Limiters log through ``get_logger`` whether or not the host configured
anything. ``configure_logging`` is opt-in: it routes structlog through the
stdlib ``not_so_fast`` logger as JSON lines and sets that logger's level,
leaving the host's root logger alone.
"""

import sys
import structlog
import logging
import time
from typing import Any, Dict

from not_so_fast.errors import ConfigurationError

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

ROOT_LOGGER_NAME = "not_so_fast"


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Emit limiter events as JSON on stdout at ``log_level`` and above."""
    level = log_level.lower()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            "Invalid or missing options.log_level",
            details={"field": "log_level", "received": log_level}
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_limiter_context,
            add_timestamp,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def add_limiter_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Split ``not_so_fast.<component>.<limiter>`` logger names into fields."""
    parts = event_dict.get("logger", "").split(".")
    if len(parts) >= 3 and parts[0] == ROOT_LOGGER_NAME:
        event_dict["component"] = parts[1]
        event_dict["limiter"] = ".".join(parts[2:])

    return event_dict


def add_timestamp(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add high-precision timestamp to log events."""
    event_dict["timestamp"] = time.time()
    return event_dict


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)

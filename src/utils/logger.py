"""
Structured logging configuration using structlog.

Every cache layer event is a snake_case name with keyword context,
rendered as JSON in production and as colored console lines when
ENVIRONMENT=development.
"""
import logging
import os
import sys

import structlog

SERVICE_NAME = "storefront-cache"


def add_service_name(logger, method_name, event_dict):
    """Tag events so shared log pipelines can tell the cache layer apart."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(level: str = "INFO") -> None:
    """
    Configure structured logging with structlog.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    redis-py logs through the standard library; its logger is held at
    WARNING unless DEBUG is requested, so connection chatter does not
    drown out cache events.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("redis").setLevel(
        log_level if log_level <= logging.DEBUG else logging.WARNING
    )

    if os.getenv("ENVIRONMENT", "production") == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("cache_layer_created", redis_url="localhost:6379/0")
    """
    return structlog.get_logger(name)

"""Logging setup for the fleet service.

PROTEAN_ENV picks the profile: JSON lines in production and staging, plain
console output elsewhere. LOG_LEVEL overrides the profile's level. Every
event logged while a request is served carries the viewer who made it.
"""

import logging
import os
import sys

import structlog

_PROFILE_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_JSON_PROFILES = {"production", "staging"}

# Libraries that are chatty at DEBUG and say nothing about orders or stock
_QUIET_LOGGERS = ("protean", "asyncio", "uvicorn.access")


def environment() -> str:
    return os.getenv("PROTEAN_ENV", "development").lower()


def get_log_level(env: str | None = None) -> str:
    return os.getenv("LOG_LEVEL", _PROFILE_LEVELS.get(env or environment(), "INFO")).upper()


def configure_logging() -> None:
    """Route stdlib logging to stdout and render structlog events on top of it."""
    env = environment()
    level = get_log_level(env)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [logging.StreamHandler(sys.stdout)]
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer() if env in _JSON_PROFILES else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_viewer(viewer) -> None:
    """Tag subsequent events in this request with the signed-in viewer."""
    structlog.contextvars.bind_contextvars(viewer_id=viewer.id, viewer_role=viewer.role.value)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()

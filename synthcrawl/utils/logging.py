"""Structured logging configuration with structlog.

Events carry keyword context. The orchestrator binds the current synthesis
round through ``structlog.contextvars``, so every event emitted while a round
runs (extraction, localization, fragment derivation) carries ``iteration``.
"""

import logging
import sys

import structlog

from synthcrawl.config import settings


def _renderer(environment: str) -> list[structlog.types.Processor]:
    if environment.lower() == "production":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer()]


def configure_logging(log_level: str | None = None, environment: str | None = None) -> None:
    """
    Configure structured logging for synthesis runs.

    Args:
        log_level: Logging level name; defaults to ``settings.log_level``
        environment: development or production; defaults to
            ``settings.environment``
    """
    level = logging.getLevelNamesMapping()[(log_level or settings.log_level).upper()]
    environment = environment or settings.environment

    # Route stdlib logging (bs4 and friends) to the same stream
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            *_renderer(environment),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

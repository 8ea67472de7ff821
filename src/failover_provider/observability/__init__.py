"""Structured logging and metrics for the failover layer."""

from __future__ import annotations

import logging
import sys

import structlog

from failover_provider.config import Settings


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    *,
    settings: Settings | None = None,
) -> None:
    """Route structlog through stdlib logging.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ...).
        json_logs: Render JSON lines instead of the coloured console format.
        settings: When given, its ``log_level`` and ``json_logs`` take
            precedence over the two arguments above.
    """
    if settings is not None:
        log_level, json_logs = settings.log_level, settings.json_logs
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: structlog.types.Processor
    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    structlog.get_logger(__name__).debug(
        "logging_configured",
        log_level=log_level,
        renderer="json" if json_logs else "console",
    )


__all__ = ["configure_logging"]

"""
Structured logging setup for SkySentinel.

Configures structlog for JSON-formatted structured logging across the
detector and the alerts service. Every log line includes timestamp,
level, service name, and event. Per-message context (source_id) is
bound at processing time.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(
    level: str = "INFO",
    *,
    json_logs: bool = True,
    service_name: str | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Minimum log level name.
        json_logs: Render JSON lines when ``True``, console output otherwise.
        service_name: Optional service name added to every event.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if service_name:
        processors.insert(
            0,
            lambda _logger, _method, event_dict: {**event_dict, "service": service_name},
        )

    if json_logs:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[logging.StreamHandler()],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

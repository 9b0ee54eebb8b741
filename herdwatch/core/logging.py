"""Structured logging setup using structlog.

Every module logs through ``structlog.get_logger(__name__)`` with event-name
messages; stdlib loggers (aiohttp, asyncio) are routed through the same
renderer so one stream carries both.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

import structlog

from herdwatch.core.config import get_settings

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def quiet_loggers(names: Iterable[str], floor: int) -> None:
    """Hold each named stdlib logger at WARNING, or *floor* if higher."""
    for name in names:
        logging.getLogger(name).setLevel(max(floor, logging.WARNING))


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level override (e.g. "DEBUG"). Uses config if None.
        fmt: Renderer format override ("json" or "console"). Uses config if None.
    """
    cfg = get_settings().logging
    log_level = getattr(logging, (level or cfg.level).upper(), logging.INFO)

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(fmt or cfg.format),
        ],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
    # The dashboard page polls every few seconds; access lines drown out alerts.
    quiet_loggers(cfg.quiet, log_level)

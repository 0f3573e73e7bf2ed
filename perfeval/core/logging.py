from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from perfeval.core.config import get_settings

_CONFIGURED = False


def resolve_level(level: str | int) -> int:
    """Accept ``"debug"``-style names as well as numeric logging levels."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level: str | int | None = None) -> None:
    """Configure structlog once; JSON lines unless ``LOG_FORMAT=console``."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    numeric_level = resolve_level(level if level is not None else settings.log_level)

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        stream=sys.stdout,
    )

    renderer: Any = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.dict_tracebacks,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True

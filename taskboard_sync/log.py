"""
Logging setup shared by the CLI and embedding applications.

Codec and store modules log through the standard library; the sync engine
emits structured events through structlog. Both end up on the same handler.
"""

from __future__ import annotations

import logging
from typing import Optional

import structlog

from .config import Settings, get_settings


def resolve_log_level(level: Optional[str], settings: Settings) -> int:
    """Numeric log level: explicit level, then debug mode, then configured level."""
    if level:
        name = level
    elif settings.debug:
        name = "DEBUG"
    else:
        name = settings.log_level
    return getattr(logging, name.upper(), logging.INFO)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Log level name (default from config)
        fmt: 'json' for machine-readable output, anything else for console output
    """
    settings = get_settings()
    log_level = resolve_log_level(level, settings)
    log_format = fmt or settings.log_format

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

"""structlog configuration shared by the CLI and the API server."""

from __future__ import annotations

import logging
import sys

import structlog

from linkparser.config import settings


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Route structlog through stdlib logging on stderr.

    Args:
        level: Log level name; defaults to ``settings.log_level``.
        json: Render JSON lines instead of console output; defaults to
            ``settings.log_json``.
    """
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json is None else json

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.WARNING),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def ensure_configured() -> None:
    """Give structlog a quiet stdlib-backed default unless it is already configured.

    Library callers that never call :func:`configure_logging` get their events
    routed into the ``linkparser`` stdlib logger, which carries a
    ``NullHandler``; nothing is written to stdout.
    """
    logging.getLogger("linkparser").addHandler(logging.NullHandler())
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )

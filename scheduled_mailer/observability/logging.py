"""
Structured logging for a single handler run.

The monitoring pipeline captures stdout as the handler's result, so stdout
carries only the delivery outcome line. Diagnostics are rendered by
structlog onto stderr: JSON in production, plain key/value text otherwise.
Every line of a run carries the event's ``short_name`` and ``action``.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from scheduled_mailer.config.settings import get_settings


def setup_logging(level: str | None = None) -> None:
    """
    Route structlog and stdlib logging to stderr.

    Args:
        level: Level overriding the configured ``log_level`` (``--debug``).
    """
    settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.is_production:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level or settings.log_level),
    )
    # aiosmtplib logs every SMTP command at DEBUG
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Attach fields (event name, action) to every log line of this run."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop the per-run fields once the event is handled."""
    structlog.contextvars.clear_contextvars()

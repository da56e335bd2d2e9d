"""Observability layer - structured logging."""

from scheduled_mailer.observability.logging import bind_context, clear_context, setup_logging

__all__ = ["bind_context", "clear_context", "setup_logging"]

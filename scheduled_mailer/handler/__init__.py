"""Scheduled mailer handler for monitoring events.

Components:
- Event / Client / Check: Immutable view of the incoming event
- filter_disabled / filter_repeated: Gates applied before any work
- RecipientResolver: Client override + weekday subscription schedule
- render / redact: Subject line and HTML body
- TransportConfig / SmtpTransport / PipeTransport: Mail hand-off
- DeliveryInvoker: One delivery attempt under a fixed deadline
- ScheduledMailer: Orchestrates the stages for one event
"""

from scheduled_mailer.handler.delivery import DeliveryInvoker, build_message
from scheduled_mailer.handler.filters import apply_filters, filter_disabled, filter_repeated
from scheduled_mailer.handler.recipients import RecipientResolver, fixed_weekday, local_weekday
from scheduled_mailer.handler.renderer import Notification, redact, render
from scheduled_mailer.handler.schemas import Check, Client, Event
from scheduled_mailer.handler.service import ScheduledMailer
from scheduled_mailer.handler.transport import (
    MailTransport,
    PipeTransport,
    SmtpTransport,
    TransportConfig,
    build_transport,
)

__all__ = [
    "Check",
    "Client",
    "DeliveryInvoker",
    "Event",
    "MailTransport",
    "Notification",
    "PipeTransport",
    "RecipientResolver",
    "ScheduledMailer",
    "SmtpTransport",
    "TransportConfig",
    "apply_filters",
    "build_message",
    "build_transport",
    "filter_disabled",
    "filter_repeated",
    "fixed_weekday",
    "local_weekday",
    "redact",
    "render",
]

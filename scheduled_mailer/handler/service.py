"""Scheduled mailer orchestrator.

Runs one event through the handler stages in order:

1. Filters (disabled alerts, repeat occurrences) - may bail.
2. Recipient resolution - may bail when nobody is subscribed.
3. Rendering of subject and HTML body.
4. One bounded delivery attempt.

Bails raise ``HandlerBail`` before any network side effect. A delivery
timeout is reported by the invoker and the run completes normally.
"""

import logging
from typing import Callable

import click

from scheduled_mailer.config.loader import MailerConfig
from scheduled_mailer.handler.delivery import (
    DELIVERY_TIMEOUT_SECONDS,
    DeliveryInvoker,
    build_message,
)
from scheduled_mailer.handler.filters import apply_filters
from scheduled_mailer.handler.recipients import (
    RecipientResolver,
    WeekdayProvider,
    local_weekday,
)
from scheduled_mailer.handler.renderer import render
from scheduled_mailer.handler.schemas import Event
from scheduled_mailer.handler.transport import (
    MailTransport,
    TransportConfig,
    build_transport,
)

logger = logging.getLogger(__name__)


class ScheduledMailer:
    """Turns a monitoring event into at most one alert mail.

    The transport is only built once an event has passed the filters and
    has recipients, so a suppressed event never touches transport settings.
    """

    def __init__(
        self,
        config: MailerConfig,
        transport: MailTransport | None = None,
        weekday: WeekdayProvider = local_weekday,
        timeout: float = DELIVERY_TIMEOUT_SECONDS,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self._config = config
        self._resolver = RecipientResolver(config, weekday=weekday)
        self._transport = transport
        self._timeout = timeout
        self._echo = echo

    @property
    def config(self) -> MailerConfig:
        return self._config

    def build_invoker(self) -> DeliveryInvoker:
        """Create the delivery invoker, building the transport if needed.

        Raises:
            ConfigurationError: For an unusable delivery method or auth setting.
        """
        transport = self._transport
        if transport is None:
            transport = build_transport(TransportConfig.from_config(self._config))
        return DeliveryInvoker(transport, timeout=self._timeout, echo=self._echo)

    async def handle(self, event: Event) -> bool:
        """Handle one event.

        Returns:
            True if the mail was handed off, False if delivery timed out.

        Raises:
            HandlerBail: If the event is filtered or has no recipients.
            ConfigurationError: If the transport settings are unusable.
        """
        apply_filters(event)

        recipients = self._resolver.resolve(event)
        invoker = self.build_invoker()
        notification = render(event, self._config.admin_gui)
        message = build_message(
            notification,
            recipients=recipients,
            mail_from=self._config.mail_from,
            reply_to=self._config.effective_reply_to,
        )
        logger.info("Delivering %r to %s", notification.subject, recipients)
        return await invoker.deliver(event, recipients, message)

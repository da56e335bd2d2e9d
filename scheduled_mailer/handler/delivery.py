"""Bounded delivery of a rendered notification.

The invoker makes exactly one delivery attempt under a fixed deadline and
writes exactly one outcome line to stdout. A timeout is reported and
swallowed; any other error propagates to the caller.

The deadline stops the handler from waiting. Whether the in-flight SMTP
exchange is actually aborted depends on the transport honouring task
cancellation (the pipe transports kill their child process).
"""

import asyncio
from email.message import EmailMessage
from typing import Callable

import click
import structlog

from scheduled_mailer.handler.renderer import Notification
from scheduled_mailer.handler.schemas import Event
from scheduled_mailer.handler.transport import MailTransport, split_addresses

logger = structlog.get_logger(__name__)

DELIVERY_TIMEOUT_SECONDS = 10.0


def build_message(
    notification: Notification,
    recipients: str,
    mail_from: str,
    reply_to: str,
) -> EmailMessage:
    """Assemble an HTML, UTF-8 message."""
    message = EmailMessage()
    message["To"] = recipients
    message["From"] = mail_from
    message["Reply-To"] = reply_to
    message["Subject"] = notification.subject
    message.set_content(notification.html_body, subtype="html", charset="utf-8")
    return message


class DeliveryInvoker:
    """Sends one message through a transport with a hard timeout."""

    def __init__(
        self,
        transport: MailTransport,
        timeout: float = DELIVERY_TIMEOUT_SECONDS,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._echo = echo

    @property
    def timeout(self) -> float:
        return self._timeout

    async def deliver(
        self,
        event: Event,
        recipients: str,
        message: EmailMessage,
    ) -> bool:
        """Attempt delivery once.

        Args:
            event: Event the message is about (for the outcome line).
            recipients: Comma-separated recipient list.
            message: Message to hand off.

        Returns:
            True if the transport accepted the message, False on timeout.
        """
        addresses = split_addresses(recipients)
        try:
            await asyncio.wait_for(
                self._transport.send(message, addresses),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "delivery_timed_out",
                transport=self._transport.name,
                timeout=self._timeout,
                short_name=event.short_name,
            )
            self._echo(
                f"mail -- timed out while attempting to {event.action} "
                f"an incident -- {event.short_name}"
            )
            return False

        logger.debug(
            "delivery_succeeded",
            transport=self._transport.name,
            recipients=len(addresses),
        )
        self._echo(f"mail -- sent alert for {event.short_name} to {recipients}")
        return True

"""Tests for the bounded delivery invoker."""

import asyncio
from email.message import EmailMessage

import pytest

from scheduled_mailer.errors import DeliveryError
from scheduled_mailer.handler.delivery import (
    DELIVERY_TIMEOUT_SECONDS,
    DeliveryInvoker,
    build_message,
)
from scheduled_mailer.handler.renderer import Notification
from scheduled_mailer.handler.transport import MailTransport


class RecordingTransport(MailTransport):
    """Transport that records hand-offs, optionally hanging or failing."""

    def __init__(self, delay: float = 0.0, error: Exception | None = None) -> None:
        self.delay = delay
        self.error = error
        self.sent: list[tuple[EmailMessage, list[str]]] = []

    @property
    def name(self) -> str:
        return "recording"

    async def send(self, message, recipients):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.sent.append((message, recipients))


@pytest.fixture
def notification():
    return Notification(
        subject="ALERT - web-01/check_mysql: CRITICAL",
        html_body="<html><body>down</body></html>",
    )


@pytest.fixture
def message(notification):
    return build_message(notification, "a@x.com, b@x.com", "sensu@example.com", "ops@example.com")


# ── build_message ────────────────────────────────────────


class TestBuildMessage:
    def test_headers(self, message):
        assert message["To"] == "a@x.com, b@x.com"
        assert message["From"] == "sensu@example.com"
        assert message["Reply-To"] == "ops@example.com"
        assert message["Subject"] == "ALERT - web-01/check_mysql: CRITICAL"

    def test_html_utf8_content(self, message):
        assert message.get_content_type() == "text/html"
        assert message.get_content_charset() == "utf-8"
        assert "down" in message.get_content()


# ── DeliveryInvoker ──────────────────────────────────────


class TestDeliveryInvoker:
    def test_default_timeout_is_ten_seconds(self):
        invoker = DeliveryInvoker(RecordingTransport())
        assert invoker.timeout == DELIVERY_TIMEOUT_SECONDS == 10.0

    @pytest.mark.asyncio
    async def test_success_line(self, sample_event, message):
        lines: list[str] = []
        transport = RecordingTransport()
        invoker = DeliveryInvoker(transport, echo=lines.append)

        delivered = await invoker.deliver(sample_event, "a@x.com, b@x.com", message)

        assert delivered is True
        assert lines == ["mail -- sent alert for web-01/check_mysql to a@x.com, b@x.com"]
        assert transport.sent == [(message, ["a@x.com", "b@x.com"])]

    @pytest.mark.asyncio
    async def test_timeout_is_reported_not_raised(self, sample_event, message):
        lines: list[str] = []
        invoker = DeliveryInvoker(RecordingTransport(delay=60), timeout=0.05, echo=lines.append)

        delivered = await invoker.deliver(sample_event, "a@x.com", message)

        assert delivered is False
        assert lines == [
            "mail -- timed out while attempting to create an incident -- web-01/check_mysql"
        ]

    @pytest.mark.asyncio
    async def test_timeout_line_uses_action(self, resolve_event, message):
        lines: list[str] = []
        invoker = DeliveryInvoker(RecordingTransport(delay=60), timeout=0.05, echo=lines.append)

        await invoker.deliver(resolve_event, "a@x.com", message)

        assert lines == [
            "mail -- timed out while attempting to resolve an incident -- web-01/check_mysql"
        ]

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, sample_event, message):
        lines: list[str] = []
        transport = RecordingTransport(error=DeliveryError("sendmail exited with 1"))
        invoker = DeliveryInvoker(transport, echo=lines.append)

        with pytest.raises(DeliveryError):
            await invoker.deliver(sample_event, "a@x.com", message)
        assert lines == []

    @pytest.mark.asyncio
    async def test_connection_errors_propagate(self, sample_event, message):
        invoker = DeliveryInvoker(
            RecordingTransport(error=ConnectionRefusedError()), echo=lambda _: None,
        )
        with pytest.raises(ConnectionRefusedError):
            await invoker.deliver(sample_event, "a@x.com", message)

"""Recipient resolution from client overrides and weekday schedules.

The base list is the client's ``mail_to`` override, else the configured
default list. Every check subscriber with a schedule active today then adds
its addresses, in subscriber order. Schedules only ever add; duplicates are
kept as-is.
"""

import logging
from datetime import datetime
from typing import Callable

from scheduled_mailer.config.loader import MailerConfig
from scheduled_mailer.errors import NoRecipientsError
from scheduled_mailer.handler.schemas import Event

logger = logging.getLogger(__name__)

WeekdayProvider = Callable[[], int]


def local_weekday() -> int:
    """Today's weekday on the local wall clock, 0=Sunday .. 6=Saturday."""
    # datetime.weekday() is Monday-based
    return (datetime.now().weekday() + 1) % 7


def fixed_weekday(day: int) -> WeekdayProvider:
    """Weekday provider pinned to ``day`` (0=Sunday .. 6=Saturday)."""
    if not 0 <= day <= 6:
        raise ValueError(f"weekday must be within 0-6, got {day}")
    return lambda: day


class RecipientResolver:
    """Builds the comma-separated recipient list for an event."""

    def __init__(
        self,
        config: MailerConfig,
        weekday: WeekdayProvider = local_weekday,
    ) -> None:
        self._config = config
        self._weekday = weekday

    def scheduled_addresses(self, event: Event) -> list[str]:
        """Addresses of the event's subscribers whose schedule matches today."""
        subscriptions = self._config.subscriptions
        if not subscriptions:
            return []

        today = self._weekday()
        matched: list[str] = []
        for name in event.check.subscribers:
            subscription = subscriptions.get(name)
            if subscription is None:
                continue
            if today in subscription.days_of_week:
                matched.append(subscription.mail_to)
            else:
                logger.debug("Subscription %s inactive on weekday %d", name, today)
        return matched

    def resolve(self, event: Event) -> str:
        """Return the final recipient list.

        Raises:
            NoRecipientsError: If no override, default or schedule applies.
        """
        parts: list[str] = []
        base = event.client.mail_to or self._config.mail_to
        if base:
            parts.append(base)
        parts.extend(self.scheduled_addresses(event))

        if not parts:
            raise NoRecipientsError()
        return ", ".join(parts)

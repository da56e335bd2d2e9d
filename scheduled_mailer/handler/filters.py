"""Event filters applied before any recipient or message work.

Each filter either returns quietly or raises ``EventSuppressed``. They run
in ``FILTERS`` order, so a suppressed event never reaches recipient
resolution, rendering or delivery.
"""

from typing import Callable

from scheduled_mailer.errors import EventSuppressed
from scheduled_mailer.handler.schemas import Event


def filter_disabled(event: Event) -> None:
    """Drop events whose check definition sets ``alert: false``."""
    if not event.check.alert:
        raise EventSuppressed("alert disabled")


def filter_repeated(event: Event) -> None:
    """Only fire on the first occurrence of a new condition.

    Resolutions always pass; the occurrence count is not consulted for them.
    """
    if event.action == "create" and event.occurrences != 1:
        raise EventSuppressed(
            f"Only firing on the first occurrence. We are at # {event.occurrences}"
        )


FILTERS: tuple[Callable[[Event], None], ...] = (filter_disabled, filter_repeated)


def apply_filters(event: Event) -> None:
    for event_filter in FILTERS:
        event_filter(event)

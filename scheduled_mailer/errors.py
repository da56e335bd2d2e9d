"""Exception taxonomy for a single handler invocation.

``HandlerBail`` and its subclasses are the expected ways a run stops early:
the CLI reports them on stdout and exits cleanly, which is how the
monitoring pipeline expects a handler to decline an event. Anything else
(including ``ConfigurationError``) is a genuine failure.
"""


class HandlerBail(Exception):
    """Stop handling the current event without sending anything."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EventSuppressed(HandlerBail):
    """The event was filtered out (repeat occurrence, alert disabled)."""


class NoRecipientsError(HandlerBail):
    """Neither an override, a default list, nor a schedule yielded an address."""

    def __init__(self, message: str = "No recipients for alert") -> None:
        super().__init__(message)


class ConfigurationError(Exception):
    """Settings document or event payload could not be used."""


class DeliveryError(Exception):
    """The mail transport reported a failed hand-off."""

"""Schema definitions for the events a handler receives.

An event is the pipeline's serialized view of one check result on one
client. It is parsed once per invocation and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Any

from scheduled_mailer.errors import ConfigurationError

STATUS_NAMES: dict[int, str] = {
    0: "OK",
    1: "WARNING",
    2: "CRITICAL",
}


@dataclass(frozen=True)
class Client:
    """The monitored host the check ran on.

    Attributes:
        name: Client name as registered with the pipeline.
        address: Client address (usually an IP or FQDN).
        mail_to: Per-client recipient override, comma separated.
    """

    name: str
    address: str = ""
    mail_to: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Client":
        return cls(
            name=str(data["name"]),
            address=str(data.get("address") or ""),
            mail_to=data.get("mail_to") or None,
        )


@dataclass(frozen=True)
class Check:
    """The check result that produced the event.

    Attributes:
        name: Check name.
        status: Exit status (0 OK, 1 WARNING, 2 CRITICAL, other UNKNOWN).
        output: Raw check output.
        command: Command line the check executed.
        subscribers: Subscription names attached to the check, in order.
        playbook: Optional remediation URL.
        notification: Optional message replacing the status in subjects.
        alert: False when the check definition disables alerting.
    """

    name: str
    status: int = 3
    output: str = ""
    command: str = ""
    subscribers: tuple[str, ...] = field(default_factory=tuple)
    playbook: str | None = None
    notification: str | None = None
    alert: bool = True

    @property
    def status_name(self) -> str:
        return STATUS_NAMES.get(self.status, "UNKNOWN")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Check":
        status = data.get("status")
        return cls(
            name=str(data["name"]),
            status=status if isinstance(status, int) and not isinstance(status, bool) else 3,
            output="" if data.get("output") is None else str(data["output"]),
            command="" if data.get("command") is None else str(data["command"]),
            subscribers=tuple(str(s) for s in data.get("subscribers") or ()),
            playbook=data.get("playbook") or None,
            notification=data.get("notification"),
            alert=data.get("alert", True) is not False,
        )


@dataclass(frozen=True)
class Event:
    """One serialized alert handed to the handler.

    Attributes:
        client: Client the check ran on.
        check: Check result.
        occurrences: Consecutive occurrences of the current condition.
        action: ``create`` for a firing condition, ``resolve`` when it clears.
    """

    client: Client
    check: Check
    occurrences: int = 1
    action: str = "create"

    @property
    def short_name(self) -> str:
        return f"{self.client.name}/{self.check.name}"

    @property
    def is_resolution(self) -> bool:
        return self.action == "resolve"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Create an Event from the pipeline's JSON payload.

        ``occurrences`` is read from the event itself and falls back to the
        check block, since both placements are seen in the wild.

        Raises:
            ConfigurationError: If the client or check block is missing, or
                occurrences is not an integer.
        """
        try:
            client = Client.from_dict(data["client"])
            check_data = data["check"]
            check = Check.from_dict(check_data)
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed event payload: missing {e}") from e

        occurrences = data.get("occurrences", check_data.get("occurrences", 1))
        # Compared strictly against 1, so no coercion of floats, strings or bools
        if not isinstance(occurrences, int) or isinstance(occurrences, bool):
            raise ConfigurationError(
                f"Malformed event payload: occurrences={occurrences!r}"
            )

        return cls(
            client=client,
            check=check,
            occurrences=occurrences,
            action=str(data.get("action") or "create"),
        )

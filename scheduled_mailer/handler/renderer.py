"""Subject and HTML body rendering for alert mails.

Rendering is a pure function of the event and the dashboard URL. Credentials
passed on check command lines are redacted before they reach the message.
"""

import html
import re
from dataclasses import dataclass

from scheduled_mailer.handler.schemas import Event

REDACTED = "<password redacted>"

_PASSWORD_FLAG = re.compile(r"(?<!\S)(-p|-P|--password)\s+\S+")
_LEADING_WHITESPACE = re.compile(r"^\s+", re.MULTILINE)
_LINE_BREAKS = re.compile(r"[\r\n]+")

_RULE = "#" * 54


@dataclass(frozen=True)
class Notification:
    """Rendered mail content."""

    subject: str
    html_body: str


def redact(text: str) -> str:
    """Replace the value following ``-p``, ``-P`` or ``--password``."""
    return _PASSWORD_FLAG.sub(lambda m: f"{m.group(1)} {REDACTED}", text)


def action_label(event: Event) -> str:
    return "RESOLVED" if event.is_resolution else "ALERT"


def build_subject(event: Event) -> str:
    """``<ALERT|RESOLVED> - <client>/<check>: <status or notification>``."""
    detail = event.check.notification
    if detail is None:
        detail = event.check.status_name
    return f"{action_label(event)} - {event.short_name}: {detail}"


def build_body(event: Event, admin_gui: str) -> str:
    """Render the HTML body.

    Lines are assembled as plain text, each line is stripped of leading
    whitespace (check output included) and every run of newlines becomes a
    single ``<br>``, so blank lines (like a missing playbook) disappear.
    Event-supplied text is HTML-escaped.
    """
    client, check = event.client, event.check
    esc = html.escape

    lines = [
        f'<html><body><font face="Verdana, Arial" size="2">{_RULE}',
        esc(redact(check.output)),
        _RULE,
        "",
        f"Dashboard: {esc(admin_gui)}",
        f"Host: {esc(client.name)}",
        f"Address:  {esc(client.address)}",
        f"Check Name:  {esc(check.name)}",
        f"Command:  {esc(redact(check.command))}",
        f"Status:  {check.status_name}",
        f"Occurrences:  {event.occurrences}",
    ]
    if check.playbook:
        lines.append(f"Playbook:  {esc(check.playbook)}")
    lines.append("</font></body></html>")

    text = _LEADING_WHITESPACE.sub("", "\n".join(lines))
    return _LINE_BREAKS.sub("<br>", text)


def render(event: Event, admin_gui: str) -> Notification:
    return Notification(
        subject=build_subject(event),
        html_body=build_body(event, admin_gui),
    )

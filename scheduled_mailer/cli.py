"""
Command-line interface for the scheduled mailer.

The monitoring pipeline runs the handler once per event and pipes the event
JSON to stdin.

Usage:
    scheduled-mailer handle [-j NAME]        # Handle one event from stdin
    scheduled-mailer check-config [-j NAME]  # Show resolved settings
"""

import asyncio
import json
import sys
from typing import Any

import click

from scheduled_mailer.config.loader import (
    MailerConfig,
    load_mailer_config,
    load_settings_document,
)
from scheduled_mailer.config.settings import get_settings
from scheduled_mailer.errors import ConfigurationError, HandlerBail
from scheduled_mailer.handler.filters import apply_filters
from scheduled_mailer.handler.recipients import local_weekday
from scheduled_mailer.handler.schemas import Event
from scheduled_mailer.handler.service import ScheduledMailer
from scheduled_mailer.handler.transport import TransportConfig
from scheduled_mailer.observability.logging import bind_context, clear_context, setup_logging

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def _config_options(func):
    func = click.option(
        "--config-dir",
        "config_dirs",
        multiple=True,
        type=click.Path(file_okay=False),
        help="Directory of JSON settings fragments (can repeat)",
    )(func)
    func = click.option(
        "--config-file",
        "config_files",
        multiple=True,
        type=click.Path(dir_okay=False),
        help="JSON settings file (can repeat)",
    )(func)
    func = click.option(
        "-j",
        "--json_config",
        "json_config",
        default=None,
        help="Settings section holding the mailer config",
    )(func)
    return func


def _load_config(
    json_config: str | None,
    config_files: tuple[str, ...],
    config_dirs: tuple[str, ...],
) -> MailerConfig:
    settings = get_settings()
    try:
        document = load_settings_document(
            files=config_files or settings.config_files,
            dirs=config_dirs or settings.config_dirs,
        )
        return load_mailer_config(document, json_config or settings.json_config)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def _read_event(stream: Any) -> Event:
    raw = stream.read()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Event is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise click.ClickException("Event must be a JSON object")
    try:
        return Event.from_dict(data)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Scheduled Mailer - mail alerts to day-of-week subscribers."""
    setup_logging("DEBUG" if debug else None)


@main.command()
@_config_options
@click.option(
    "--event",
    "event_file",
    type=click.File("r"),
    default="-",
    help="Event JSON file (defaults to stdin)",
)
def handle(
    json_config: str | None,
    config_files: tuple[str, ...],
    config_dirs: tuple[str, ...],
    event_file: Any,
) -> None:
    """Handle one event."""
    event = _read_event(event_file)
    bind_context(short_name=event.short_name, action=event.action)
    try:
        apply_filters(event)
        config = _load_config(json_config, config_files, config_dirs)
        asyncio.run(ScheduledMailer(config).handle(event))
    except HandlerBail as e:
        click.echo(f"{e.message}: {event.short_name}")
        sys.exit(0)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    finally:
        clear_context()


@main.command("check-config")
@_config_options
def check_config(
    json_config: str | None,
    config_files: tuple[str, ...],
    config_dirs: tuple[str, ...],
) -> None:
    """Validate the mailer settings and show today's active schedules."""
    config = _load_config(json_config, config_files, config_dirs)
    try:
        transport = TransportConfig.from_config(config)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    today = local_weekday()

    click.echo("\nMailer Settings:")
    click.echo("-" * 40)
    click.echo(f"  from: {config.mail_from}")
    click.echo(f"  reply-to: {config.effective_reply_to}")
    click.echo(f"  default mail_to: {config.mail_to or '(none)'}")
    click.echo(f"  dashboard: {config.admin_gui}")
    if transport.method == "smtp":
        auth = transport.auth.mechanism if transport.auth else "none"
        click.echo(
            f"  transport: smtp {transport.address}:{transport.port} "
            f"(domain={transport.domain}, starttls={transport.enable_starttls_auto}, auth={auth})"
        )
    else:
        click.echo(f"  transport: {transport.method} {transport.location} {transport.arguments}")

    click.echo(f"\nSubscriptions (today is {WEEKDAY_NAMES[today]}):")
    click.echo("-" * 40)
    if not config.subscriptions:
        click.echo("  (none)")
    for name, subscription in sorted((config.subscriptions or {}).items()):
        days = ",".join(WEEKDAY_NAMES[d][:3] for d in sorted(subscription.days_of_week))
        active = today in subscription.days_of_week
        icon = "✓" if active else "✗"
        color = "green" if active else "yellow"
        click.echo(click.style(f"  {icon} {name}: {subscription.mail_to} [{days}]", fg=color))


if __name__ == "__main__":
    main()

"""Settings-document loading for the mailer.

The monitoring pipeline keeps handler settings in JSON documents: a main
``config.json`` plus any number of ``conf.d/*.json`` fragments that are deep
merged in order. The mailer reads one top-level section of the merged
document (``scheduled_mailer`` unless overridden) and validates it once into
a ``MailerConfig``, so the rest of the handler never touches raw dicts.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scheduled_mailer.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "scheduled_mailer"


class Subscription(BaseModel):
    """Weekday schedule for one subscriber name."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    mail_to: str = Field(min_length=1, description="Addresses added when the schedule matches")
    days_of_week: frozenset[int] = Field(
        default_factory=frozenset,
        description="Weekdays (0=Sunday .. 6=Saturday) the schedule is active",
    )

    @field_validator("days_of_week")
    @classmethod
    def validate_weekdays(cls, v: frozenset[int]) -> frozenset[int]:
        bad = sorted(d for d in v if not 0 <= d <= 6)
        if bad:
            raise ValueError(f"days_of_week must be within 0-6, got {bad}")
        return v


class MailerConfig(BaseModel):
    """Validated mailer section of the settings document.

    Optional fields carry the defaults the handler has always used, so a
    minimal section only needs ``mail_from`` plus some way of finding
    recipients.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    mail_from: str
    mail_to: str | None = None
    reply_to: str | None = None
    admin_gui: str = "http://localhost:8080/"

    # Transport
    delivery_method: str = "smtp"
    smtp_address: str = "localhost"
    smtp_port: int = Field(default=25, ge=1, le=65535)
    smtp_domain: str = "localhost.localdomain"
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_authentication: str = "plain"
    smtp_enable_starttls_auto: bool = True
    sendmail_location: str = "/usr/sbin/sendmail"
    sendmail_arguments: str | None = None

    # Schedules
    subscriptions: dict[str, Subscription] | None = None

    @field_validator("smtp_enable_starttls_auto", mode="before")
    @classmethod
    def parse_starttls(cls, v: Any) -> bool:
        """Only an explicit ``"false"`` (or JSON false) turns STARTTLS off."""
        return not (v is False or v == "false")

    @field_validator("mail_to", "reply_to", "smtp_username", mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def effective_reply_to(self) -> str:
        return self.reply_to or self.mail_from


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    return data


def load_settings_document(
    files: Iterable[str | Path] = (),
    dirs: Iterable[str | Path] = (),
) -> dict[str, Any]:
    """Read and deep-merge settings files.

    Files are applied in the order given, then each directory's ``*.json``
    files in name order. Missing paths are skipped.

    Args:
        files: Individual JSON settings files.
        dirs: Directories of JSON fragments.

    Returns:
        Merged settings document.

    Raises:
        ConfigurationError: If a file is not a JSON object.
    """
    paths: list[Path] = [Path(f) for f in files]
    for d in dirs:
        directory = Path(d)
        if directory.is_dir():
            paths.extend(sorted(directory.glob("*.json")))

    document: dict[str, Any] = {}
    for path in paths:
        if not path.is_file():
            logger.debug("Settings file %s not found, skipping", path)
            continue
        document = _deep_merge(document, _read_json(path))
        logger.debug("Merged settings file %s", path)
    return document


def load_mailer_config(
    document: dict[str, Any],
    section: str = DEFAULT_SECTION,
) -> MailerConfig:
    """Select and validate the mailer section of a settings document.

    Args:
        document: Merged settings document.
        section: Top-level key holding the mailer settings.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If the section is missing or invalid.
    """
    raw = document.get(section)
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Settings section {section!r} not found")
    try:
        return MailerConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings section {section!r}: {e}") from e

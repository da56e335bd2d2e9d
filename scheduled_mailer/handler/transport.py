"""Mail transports and their configuration.

``TransportConfig`` is built once from the mailer settings and handed to a
transport explicitly; nothing here keeps global mail defaults. Transports
share the ``MailTransport`` interface so the delivery deadline can wrap any
of them.

Pattern: Strategy (one transport per delivery method).
"""

import asyncio
import logging
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib

from scheduled_mailer.config.loader import MailerConfig
from scheduled_mailer.errors import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

DELIVERY_METHODS: frozenset[str] = frozenset({"smtp", "sendmail", "exim"})

# Arguments each pipe transport gets when none are configured
DEFAULT_PIPE_ARGUMENTS = {
    "sendmail": "-i",
    "exim": "-i -t",
}

AUTH_MECHANISMS: frozenset[str] = frozenset({"plain", "login", "cram_md5"})


@dataclass(frozen=True)
class SmtpAuth:
    username: str
    password: str | None
    mechanism: str = "plain"


@dataclass(frozen=True)
class TransportConfig:
    """Resolved transport options for one delivery.

    Attributes:
        method: ``smtp``, ``sendmail`` or ``exim``.
        address: SMTP server host.
        port: SMTP server port.
        domain: HELO/EHLO domain.
        enable_starttls_auto: Upgrade to TLS when the server offers it.
        auth: Credentials, only present when a username is configured.
        location: Binary used by the pipe transports.
        arguments: Extra arguments for the pipe transports.
    """

    method: str = "smtp"
    address: str = "localhost"
    port: int = 25
    domain: str = "localhost.localdomain"
    enable_starttls_auto: bool = True
    auth: SmtpAuth | None = None
    location: str = "/usr/sbin/sendmail"
    arguments: str = ""

    @classmethod
    def from_config(cls, config: MailerConfig) -> "TransportConfig":
        """Build transport options from the mailer settings.

        Raises:
            ConfigurationError: For an unknown delivery method or auth mechanism.
        """
        method = config.delivery_method.lower()
        if method not in DELIVERY_METHODS:
            raise ConfigurationError(
                f"Unsupported delivery_method {config.delivery_method!r}. "
                f"Must be one of: {sorted(DELIVERY_METHODS)}"
            )

        auth = None
        if config.smtp_username is not None:
            mechanism = config.smtp_authentication.lower()
            if mechanism not in AUTH_MECHANISMS:
                raise ConfigurationError(
                    f"Unsupported smtp_authentication {config.smtp_authentication!r}. "
                    f"Must be one of: {sorted(AUTH_MECHANISMS)}"
                )
            auth = SmtpAuth(
                username=config.smtp_username,
                password=config.smtp_password,
                mechanism=mechanism,
            )

        arguments = config.sendmail_arguments
        if arguments is None:
            arguments = DEFAULT_PIPE_ARGUMENTS.get(method, "")

        return cls(
            method=method,
            address=config.smtp_address,
            port=config.smtp_port,
            domain=config.smtp_domain,
            enable_starttls_auto=config.smtp_enable_starttls_auto,
            auth=auth,
            location=config.sendmail_location,
            arguments=arguments,
        )


def split_addresses(recipients: str) -> list[str]:
    return [a.strip() for a in recipients.split(",") if a.strip()]


class MailTransport(ABC):
    """Abstract base for mail hand-off mechanisms."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Delivery method this transport implements."""

    @abstractmethod
    async def send(self, message: EmailMessage, recipients: list[str]) -> None:
        """Hand a message off for delivery.

        Args:
            message: Fully built message.
            recipients: Envelope recipients.

        Raises:
            Exception: Any failure; callers only special-case timeouts.
        """


class SmtpTransport(MailTransport):
    """Delivers over SMTP with aiosmtplib.

    STARTTLS is opportunistic when enabled (used only if the server
    advertises it) and certificates are not verified.
    """

    def __init__(self, config: TransportConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return "smtp"

    def _client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self._config.address,
            port=self._config.port,
            local_hostname=self._config.domain,
            # None lets aiosmtplib upgrade only when STARTTLS is offered
            start_tls=None if self._config.enable_starttls_auto else False,
            validate_certs=False,
        )

    async def _authenticate(self, smtp: aiosmtplib.SMTP, auth: SmtpAuth) -> None:
        password = auth.password or ""
        if auth.mechanism == "login":
            await smtp.auth_login(auth.username, password)
        elif auth.mechanism == "cram_md5":
            await smtp.auth_crammd5(auth.username, password)
        else:
            await smtp.auth_plain(auth.username, password)

    async def send(self, message: EmailMessage, recipients: list[str]) -> None:
        async with self._client() as smtp:
            if self._config.auth is not None:
                await self._authenticate(smtp, self._config.auth)
            else:
                logger.debug("SMTP auth skipped - no username configured")
            await smtp.send_message(message, recipients=recipients)


class PipeTransport(MailTransport):
    """Pipes the encoded message into a local MTA binary.

    ``sendmail`` gets the sender and envelope recipients on its command line.
    ``exim`` is run with its arguments only and reads recipients from the
    headers (``-t``).
    """

    def __init__(self, config: TransportConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return self._config.method

    def command(self, message: EmailMessage, recipients: list[str]) -> list[str]:
        argv = [self._config.location, *shlex.split(self._config.arguments)]
        if self._config.method == "sendmail":
            sender = message["From"]
            if sender:
                argv += ["-f", str(sender)]
            argv += ["--", *recipients]
        return argv

    async def send(self, message: EmailMessage, recipients: list[str]) -> None:
        argv = self.command(message, recipients)
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await proc.communicate(message.as_bytes())
        except asyncio.CancelledError:
            # Deadline hit: do not leave the MTA running behind us
            if proc.returncode is None:
                proc.kill()
            raise

        if proc.returncode != 0:
            raise DeliveryError(
                f"{argv[0]} exited with {proc.returncode}: "
                f"{stderr.decode('utf-8', 'replace').strip()}"
            )


def build_transport(config: TransportConfig) -> MailTransport:
    if config.method == "smtp":
        return SmtpTransport(config)
    return PipeTransport(config)

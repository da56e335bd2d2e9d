"""Pytest fixtures for scheduled-mailer tests."""

import pytest

from scheduled_mailer.config.loader import MailerConfig, Subscription
from scheduled_mailer.config.settings import get_settings
from scheduled_mailer.handler.schemas import Check, Client, Event


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are cached per process; isolate env overrides per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_event() -> Event:
    """A first-occurrence critical alert with one subscriber."""
    return Event(
        client=Client(name="web-01", address="10.0.0.5"),
        check=Check(
            name="check_mysql",
            status=2,
            output="CRITICAL: connection refused",
            command="check_mysql -H localhost -p secret123 -w 10",
            subscribers=("ops",),
        ),
        occurrences=1,
        action="create",
    )


@pytest.fixture
def resolve_event(sample_event: Event) -> Event:
    return Event(
        client=sample_event.client,
        check=Check(name="check_mysql", status=0, output="OK", subscribers=("ops",)),
        occurrences=7,
        action="resolve",
    )


@pytest.fixture
def mailer_config() -> MailerConfig:
    """Config with a weekday-only ops rota and a weekend on-call rota."""
    return MailerConfig(
        mail_from="sensu@example.com",
        subscriptions={
            "ops": Subscription(mail_to="b@x.com", days_of_week=frozenset({1, 2, 3, 4, 5})),
            "weekend": Subscription(mail_to="oncall@x.com", days_of_week=frozenset({0, 6})),
        },
    )


@pytest.fixture
def event_payload() -> dict:
    """Raw event JSON as the pipeline sends it."""
    return {
        "client": {"name": "web-01", "address": "10.0.0.5"},
        "check": {
            "name": "check_mysql",
            "status": 2,
            "output": "CRITICAL: connection refused",
            "command": "check_mysql -p secret123",
            "subscribers": ["ops"],
        },
        "occurrences": 1,
        "action": "create",
    }

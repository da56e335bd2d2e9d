"""Tests for the event filters that gate all downstream work."""

import pytest

from scheduled_mailer.errors import EventSuppressed, HandlerBail
from scheduled_mailer.handler.filters import apply_filters, filter_disabled, filter_repeated
from scheduled_mailer.handler.schemas import Check, Client, Event


def _event(action="create", occurrences=1, alert=True) -> Event:
    return Event(
        client=Client(name="web-01"),
        check=Check(name="check_disk", status=2, alert=alert),
        occurrences=occurrences,
        action=action,
    )


class TestFilterRepeated:
    """First-occurrence suppression."""

    def test_first_occurrence_passes(self):
        filter_repeated(_event(occurrences=1))

    @pytest.mark.parametrize("occurrences", [0, 2, 3, 100])
    def test_repeat_create_is_suppressed(self, occurrences):
        with pytest.raises(EventSuppressed) as exc_info:
            filter_repeated(_event(occurrences=occurrences))
        assert f"We are at # {occurrences}" in exc_info.value.message

    @pytest.mark.parametrize("occurrences", [0, 1, 2, 57])
    def test_resolve_ignores_occurrences(self, occurrences):
        filter_repeated(_event(action="resolve", occurrences=occurrences))

    def test_suppression_is_a_bail(self):
        with pytest.raises(HandlerBail):
            filter_repeated(_event(occurrences=2))


class TestFilterDisabled:
    """Checks that opt out of alerting."""

    def test_enabled_passes(self):
        filter_disabled(_event())

    def test_disabled_is_suppressed(self):
        with pytest.raises(EventSuppressed, match="alert disabled"):
            filter_disabled(_event(alert=False))

    def test_disabled_wins_for_resolutions(self):
        with pytest.raises(EventSuppressed):
            apply_filters(_event(action="resolve", alert=False))


class TestApplyFilters:
    def test_passing_event(self):
        apply_filters(_event())

    def test_repeat_suppressed(self):
        with pytest.raises(EventSuppressed):
            apply_filters(_event(occurrences=4))

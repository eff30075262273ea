import typing as t
from datetime import datetime

import pytest

from accounts.models import TurnstileUser
from events.models import Event, Ticket, ValidationCredential
from events.service.admission import ValidationAttempt, issue_credential
from geo.service import Coordinates

VENUE = Coordinates(latitude=40.7128, longitude=-74.0060)


class ScriptedRandom:
    """A random source that replays fixed values and counts how often it was asked."""

    def __init__(self, *values: float) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.values.pop(0)


@pytest.fixture
def scripted_random() -> type[ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def event_owner(turnstile_user_factory: t.Callable[..., TurnstileUser]) -> TurnstileUser:
    return turnstile_user_factory(username="owner@example.com")


@pytest.fixture
def ticket_holder(turnstile_user_factory: t.Callable[..., TurnstileUser]) -> TurnstileUser:
    return turnstile_user_factory(username="holder@example.com")


@pytest.fixture
def outsider(turnstile_user_factory: t.Callable[..., TurnstileUser]) -> TurnstileUser:
    return turnstile_user_factory(username="outsider@example.com")


@pytest.fixture
def event(event_owner: TurnstileUser, next_week: datetime) -> Event:
    return Event.objects.create(name="Summer Showcase", owner=event_owner, start=next_week)


@pytest.fixture
def geofenced_event(event: Event) -> Event:
    event.venue_latitude = VENUE.latitude
    event.venue_longitude = VENUE.longitude
    event.geofence_enabled = True
    event.geofence_radius_meters = 690
    event.save()
    return event


@pytest.fixture
def ticket(event: Event, ticket_holder: TurnstileUser) -> Ticket:
    return Ticket.objects.create(event=event, user=ticket_holder)


@pytest.fixture
def credential(ticket: Ticket) -> ValidationCredential:
    return issue_credential(ticket)


@pytest.fixture
def make_attempt() -> t.Callable[..., ValidationAttempt]:
    def _make(credential: str, validator: TurnstileUser, **kwargs: t.Any) -> ValidationAttempt:
        return ValidationAttempt(credential=credential, validator=validator, **kwargs)

    return _make

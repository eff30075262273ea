"""Tests for the door validation endpoint."""

import typing as t
from datetime import UTC, datetime

import orjson
import pytest
from django.db import OperationalError
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import TurnstileUser
from events.exceptions import AdmissionUnavailableError
from events.models import DelegatedValidator, Event, Ticket, ValidationCredential
from events.service.admission import issue_credential

pytestmark = pytest.mark.django_db

VENUE = {"latitude": 40.7128, "longitude": -74.0060}


def _validate(client: Client, payload: dict[str, t.Any]) -> t.Any:
    url = reverse("api:validate_ticket")
    return client.post(url, data=orjson.dumps(payload), content_type="application/json")


def test_requires_authentication(credential: ValidationCredential) -> None:
    response = _validate(Client(), {"credential": credential.token})

    assert response.status_code == 401


def test_owner_validates_manual_code(owner_client: Client, credential: ValidationCredential) -> None:
    response = _validate(owner_client, {"credential": credential.code, "event_id": str(credential.event_id)})

    assert response.status_code == 200
    data = response.json()
    assert data["outcome"] == "granted"
    assert data["valid"] is True
    assert data["use_count"] == 1
    assert data["ticket_id"] == str(credential.ticket_id)


def test_second_scan_is_reported_not_raised(owner_client: Client, credential: ValidationCredential) -> None:
    _validate(owner_client, {"credential": credential.token})

    response = _validate(owner_client, {"credential": credential.token})

    assert response.status_code == 200
    assert response.json()["outcome"] == "already_validated"
    assert response.json()["already_validated"] is True


def test_unknown_code(owner_client: Client, event: Event) -> None:
    response = _validate(owner_client, {"credential": "0000", "event_id": str(event.pk)})

    assert response.status_code == 200
    assert response.json()["outcome"] == "invalid_code"
    assert response.json()["is_authentic"] is False


def test_outsider_cannot_validate(outsider_client: Client, credential: ValidationCredential) -> None:
    response = _validate(outsider_client, {"credential": credential.token})

    data = response.json()
    assert data["outcome"] == "unauthorized"
    assert data["is_authentic"] is True
    assert data["can_validate"] is False
    credential.ticket.refresh_from_db()
    assert credential.ticket.use_count == 0


def test_delegated_validator_can_validate(
    event: Event, credential: ValidationCredential, outsider: TurnstileUser, outsider_client: Client
) -> None:
    DelegatedValidator.objects.create(event=event, email=outsider.email)

    response = _validate(outsider_client, {"credential": credential.token})

    assert response.json()["outcome"] == "granted"


class TestGeofencedEvent:
    def test_location_is_requested(
        self, geofenced_event: Event, ticket: Ticket, owner_client: Client
    ) -> None:
        credential = issue_credential(ticket, **VENUE)

        response = _validate(owner_client, {"credential": credential.token})

        assert response.json()["outcome"] == "location_required"
        assert response.json()["requires_location"] is True

    def test_validator_location_in_payload(self, geofenced_event: Event, ticket: Ticket, owner_client: Client) -> None:
        credential = issue_credential(ticket, **VENUE)

        response = _validate(owner_client, {"credential": credential.token, "validator_location": VENUE})

        assert response.json()["outcome"] == "granted"

    def test_far_away_validator(self, geofenced_event: Event, ticket: Ticket, owner_client: Client) -> None:
        credential = issue_credential(ticket)
        payload = {
            "credential": credential.token,
            "validator_location": {"latitude": 40.7218, "longitude": -74.0060},
            "holder_location": VENUE,
        }

        response = _validate(owner_client, payload)

        assert response.json()["outcome"] == "outside_geofence"
        assert response.json()["outside_geofence"] is True

    def test_out_of_range_coordinates_rejected(self, geofenced_event: Event, owner_client: Client) -> None:
        payload = {"credential": "1234", "validator_location": {"latitude": 91, "longitude": 0}}

        response = _validate(owner_client, payload)

        assert response.status_code == 422


def test_effect_draw_uses_injected_source(
    event: Event,
    credential: ValidationCredential,
    owner_client: Client,
    monkeypatch: pytest.MonkeyPatch,
    scripted_random: t.Any,
) -> None:
    event.start = datetime(2030, 12, 25, 20, 0, tzinfo=UTC)
    event.special_effects_enabled = True
    event.save()
    monkeypatch.setattr("events.controllers.admission.get_random_source", lambda: scripted_random(0.0))

    response = _validate(owner_client, {"credential": credential.token})

    assert response.json()["assigned_effect"] == "snowflakes"


def test_unavailable_storage_returns_503(
    owner_client: Client, credential: ValidationCredential, monkeypatch: pytest.MonkeyPatch
) -> None:
    def unavailable(*args: t.Any, **kwargs: t.Any) -> None:
        raise AdmissionUnavailableError("The ticket is being validated concurrently. Please retry.")

    monkeypatch.setattr("events.service.admission.service.UsageStateMachine.admit", unavailable)

    response = _validate(owner_client, {"credential": credential.token})

    assert response.status_code == 503
    assert response["Retry-After"] == "1"


def test_missing_credential_is_rejected(owner_client: Client) -> None:
    response = _validate(owner_client, {})

    assert response.status_code == 422


def test_storage_fault_during_lookup_returns_503(
    owner_client: Client, credential: ValidationCredential, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken_lookup(*args: t.Any, **kwargs: t.Any) -> None:
        raise OperationalError("database is locked")

    monkeypatch.setattr("events.service.admission.service.resolve_credential", broken_lookup)

    response = _validate(owner_client, {"credential": credential.token})

    assert response.status_code == 503
    assert response["Retry-After"] == "1"

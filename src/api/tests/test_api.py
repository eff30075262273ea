"""Tests for the top-level API endpoints and exception handlers."""

import typing as t

import orjson
import pytest
from django.conf import settings
from django.core.exceptions import ValidationError
from django.test.client import Client
from django.urls import reverse
from ninja_jwt.tokens import RefreshToken

from accounts.models import TurnstileUser
from api.exception_handlers import obfuscate

pytestmark = pytest.mark.django_db


def test_version(client: Client) -> None:
    response = client.get(reverse("api:version"))

    assert response.status_code == 200
    assert response.json() == {"version": settings.VERSION}


def test_healthcheck(client: Client) -> None:
    response = client.get(reverse("api:healthcheck"))

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.fixture
def authed_client(user: TurnstileUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


def _post_validate(client: Client) -> t.Any:
    return client.post(
        reverse("api:validate_ticket"), data=orjson.dumps({"credential": "1234"}), content_type="application/json"
    )


def test_unexpected_error_is_500(authed_client: Client, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*args: t.Any, **kwargs: t.Any) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr("events.service.admission.service.AdmissionService.validate", boom)

    response = _post_validate(authed_client)

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal Server Error."


def test_django_validation_error_is_400(authed_client: Client, monkeypatch: pytest.MonkeyPatch) -> None:
    def invalid(*args: t.Any, **kwargs: t.Any) -> None:
        raise ValidationError({"credential": ["Nope."]})

    monkeypatch.setattr("events.service.admission.service.AdmissionService.validate", invalid)

    response = _post_validate(authed_client)

    assert response.status_code == 400
    assert response.json() == {"errors": {"credential": ["Nope."]}}


def test_obfuscate_hides_credentials() -> None:
    data = {"Authorization": "Bearer abc", "credential": "1234", "event_id": "x"}

    assert obfuscate(data) == {"Authorization": "********", "credential": "********", "event_id": "x"}

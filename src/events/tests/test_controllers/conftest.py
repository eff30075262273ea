import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import TurnstileUser


def _client_for(user: TurnstileUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def owner_client(event_owner: TurnstileUser) -> Client:
    """API client for the event owner."""
    return _client_for(event_owner)


@pytest.fixture
def holder_client(ticket_holder: TurnstileUser) -> Client:
    """API client for the ticket holder."""
    return _client_for(ticket_holder)


@pytest.fixture
def outsider_client(outsider: TurnstileUser) -> Client:
    """API client for an authenticated user with no relationship to the event."""
    return _client_for(outsider)

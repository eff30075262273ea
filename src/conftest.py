"""
Project-wide fixtures: users, dates and cache isolation.
"""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.utils import timezone

from accounts.models import TurnstileUser


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


class TurnstileUserFactory:
    """Factory for creating TurnstileUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> TurnstileUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return TurnstileUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> TurnstileUser:
        return self.create_user(**kwargs)


@pytest.fixture
def turnstile_user_factory() -> TurnstileUserFactory:
    return TurnstileUserFactory()


@pytest.fixture
def user(turnstile_user_factory: TurnstileUserFactory) -> TurnstileUser:
    return turnstile_user_factory()


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )

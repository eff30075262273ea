"""Async admission flow that asks the validator's device for its location once."""

import asyncio
import dataclasses
import typing as t

import structlog
from asgiref.sync import sync_to_async
from django.conf import settings
from django.utils import timezone

from geo.service import Coordinates

from .composer import location_denied_decision
from .enums import AdmissionOutcome, LocationStatus
from .service import AdmissionService
from .types import AdmissionDecision, RandomSource, ValidationAttempt

logger = structlog.get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class LocationResult:
    status: LocationStatus
    coordinates: Coordinates | None = None

    @classmethod
    def resolved(cls, latitude: float, longitude: float) -> "LocationResult":
        return cls(status=LocationStatus.RESOLVED, coordinates=Coordinates(latitude, longitude))

    @classmethod
    def denied(cls) -> "LocationResult":
        return cls(status=LocationStatus.DENIED)


LocationProvider = t.Callable[[], t.Awaitable[LocationResult]]


async def request_location(provider: LocationProvider, timeout: float | None = None) -> LocationResult:
    """Await the provider once. A provider that takes longer than ``timeout`` seconds counts as timed out.

    Cancellation propagates to the caller.
    """
    if timeout is None:
        timeout = settings.ADMISSION_LOCATION_TIMEOUT_SECONDS
    try:
        result = await asyncio.wait_for(provider(), timeout=timeout)
    except TimeoutError:
        return LocationResult(status=LocationStatus.TIMED_OUT)
    if result.status == LocationStatus.RESOLVED and result.coordinates is None:
        return LocationResult.denied()
    return result


async def validate_with_location(
    attempt: ValidationAttempt,
    provider: LocationProvider,
    *,
    rng: RandomSource | None = None,
    timeout: float | None = None,
) -> AdmissionDecision:
    """Validate, asking for the device location once if the geofence needs it.

    Only the validator's own location can be asked for. A location-required decision
    missing it triggers a single provider call; any other location-required decision
    is returned as is. Resolved coordinates are used for exactly one retry; a denied
    or timed out request yields a location-denied decision.
    """
    decision = await sync_to_async(AdmissionService(attempt, rng=rng).validate)()
    if decision.outcome != AdmissionOutcome.LOCATION_REQUIRED or "validator" not in decision.missing_locations:
        return decision

    location = await request_location(provider, timeout)
    if location.status != LocationStatus.RESOLVED:
        logger.info("admission_location_unavailable", status=str(location.status), ticket_id=str(decision.ticket_id))
        return location_denied_decision(decision)

    retry = dataclasses.replace(attempt, validator_location=location.coordinates, attempted_at=timezone.now())
    return await sync_to_async(AdmissionService(retry, rng=rng).validate)()

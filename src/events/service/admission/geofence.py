"""Geofence evaluation around the venue."""

from geo.service import Coordinates, haversine_distance

from .enums import GeofenceStatus
from .types import GeofenceResult


def evaluate_geofence(
    venue: Coordinates,
    radius_meters: float,
    validator: Coordinates | None,
    holder: Coordinates | None,
) -> GeofenceResult:
    """Check that both the validator and the ticket holder are within ``radius_meters`` of the venue.

    Missing coordinates for either party yield ``LOCATION_REQUIRED`` rather than a failure,
    so the caller can ask for the device location and retry.
    """
    validator_distance = haversine_distance(venue, validator) if validator is not None else None
    holder_distance = haversine_distance(venue, holder) if holder is not None else None

    missing = tuple(
        party for party, location in (("validator", validator), ("holder", holder)) if location is None
    )
    if missing:
        status = GeofenceStatus.LOCATION_REQUIRED
    elif validator_distance <= radius_meters and holder_distance <= radius_meters:  # type: ignore[operator]
        status = GeofenceStatus.WITHIN
    else:
        status = GeofenceStatus.OUTSIDE

    return GeofenceResult(
        status=status,
        radius_meters=radius_meters,
        validator_distance_meters=validator_distance,
        holder_distance_meters=holder_distance,
        missing=missing,
    )

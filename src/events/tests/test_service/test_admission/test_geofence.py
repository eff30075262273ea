import pytest

from events.service.admission.enums import GeofenceStatus
from events.service.admission.geofence import evaluate_geofence
from geo.service import Coordinates, haversine_distance, offset_by_meters

VENUE = Coordinates(latitude=40.7128, longitude=-74.0060)
RADIUS = 690.0


def test_both_parties_inside_radius() -> None:
    result = evaluate_geofence(
        VENUE, RADIUS, offset_by_meters(VENUE, north=100), offset_by_meters(VENUE, east=-200)
    )

    assert result.status == GeofenceStatus.WITHIN
    assert result.passed
    assert result.validator_distance_meters == pytest.approx(100, rel=0.01)
    assert result.holder_distance_meters == pytest.approx(200, rel=0.01)


def test_validator_one_kilometre_away_is_outside() -> None:
    result = evaluate_geofence(VENUE, RADIUS, offset_by_meters(VENUE, north=1000), VENUE)

    assert result.status == GeofenceStatus.OUTSIDE
    assert not result.passed
    assert result.validator_distance_meters == pytest.approx(1000, rel=0.01)
    assert result.holder_distance_meters == pytest.approx(0)


def test_holder_outside_fails_even_if_validator_inside() -> None:
    result = evaluate_geofence(VENUE, RADIUS, VENUE, offset_by_meters(VENUE, east=800))

    assert result.status == GeofenceStatus.OUTSIDE


def test_distance_equal_to_radius_is_inside() -> None:
    edge = offset_by_meters(VENUE, north=RADIUS)
    radius = haversine_distance(VENUE, edge)

    assert evaluate_geofence(VENUE, radius, edge, edge).passed


@pytest.mark.parametrize(
    "validator,holder,missing",
    [
        (None, VENUE, ("validator",)),
        (VENUE, None, ("holder",)),
        (None, None, ("validator", "holder")),
    ],
)
def test_missing_coordinates_require_location(
    validator: Coordinates | None, holder: Coordinates | None, missing: tuple[str, ...]
) -> None:
    result = evaluate_geofence(VENUE, RADIUS, validator, holder)

    assert result.status == GeofenceStatus.LOCATION_REQUIRED
    assert result.missing == missing
    assert not result.passed

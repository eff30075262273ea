"""Great-circle distance helpers."""

import math
import typing as t

# Mean Earth radius (IUGG), in metres.
EARTH_RADIUS_METERS = 6_371_008.8


class Coordinates(t.NamedTuple):
    """A WGS84 latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    @classmethod
    def from_optional(cls, latitude: float | None, longitude: float | None) -> t.Self | None:
        """Build coordinates only when both components are present."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude=latitude, longitude=longitude)


def haversine_distance(a: Coordinates, b: Coordinates) -> float:
    """Return the great-circle distance between two points, in metres."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Clamp to guard against floating point drift just above 1.0 for antipodal points.
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(min(1.0, h)))


def offset_by_meters(origin: Coordinates, *, north: float = 0.0, east: float = 0.0) -> Coordinates:
    """Move a point by a small number of metres north/east.

    Uses the local flat-earth approximation, which is accurate to well under a
    metre for the few kilometres a venue geofence spans.
    """
    dlat = north / EARTH_RADIUS_METERS
    dlon = east / (EARTH_RADIUS_METERS * math.cos(math.radians(origin.latitude)))
    return Coordinates(
        latitude=origin.latitude + math.degrees(dlat),
        longitude=origin.longitude + math.degrees(dlon),
    )

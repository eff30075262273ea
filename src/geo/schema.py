from ninja import Schema
from pydantic import Field

from geo.service import Coordinates


class CoordinatesSchema(Schema):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_coordinates(self) -> Coordinates:
        """Convert to the engine's coordinate type."""
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

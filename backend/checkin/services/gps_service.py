"""Geofence evaluation for check-in locations."""
import math
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_M = 6371000
DEFAULT_RADIUS_M = 100

REASON_OUTSIDE_AREA = "outside allowed area"
REASON_LOCATION_UNAVAILABLE = "location unavailable/skipped"

@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

@dataclass(frozen=True)
class GeofenceResult:
    """Outcome of the location step.

    ``coordinate`` is what gets stored on the record (None when nothing is
    stored) and ``review_reason`` is None when the location is trusted.
    """
    evaluated: bool
    coordinate: Optional[Coordinate] = None
    is_inside: Optional[bool] = None
    distance_m: Optional[float] = None
    review_reason: Optional[str] = None

class GPSService:
    """Service for GPS and location verification."""

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate distance between two GPS points in meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat/2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon/2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))

        return EARTH_RADIUS_M * c

    @staticmethod
    def is_inside(distance_m: float, radius_m: float) -> bool:
        """Points exactly on the boundary count as inside."""
        return distance_m <= radius_m

    @classmethod
    def evaluate(
        cls,
        session,
        coordinate: Optional[Coordinate],
        default_radius_m: float = DEFAULT_RADIUS_M
    ) -> GeofenceResult:
        """Classify a captured coordinate against the session's geofence.

        Location never blocks a check-in; it only adds a review reason.
        """
        if not session.requires_geofence():
            return GeofenceResult(evaluated=False)

        if coordinate is None:
            return GeofenceResult(evaluated=True, review_reason=REASON_LOCATION_UNAVAILABLE)

        if not session.has_reference_location():
            return GeofenceResult(evaluated=True, coordinate=coordinate, is_inside=True)

        radius = default_radius_m if session.geo_radius_m is None else session.geo_radius_m
        distance = cls.calculate_distance(
            coordinate.latitude, coordinate.longitude,
            session.geo_lat, session.geo_lng
        )
        inside = cls.is_inside(distance, radius)

        return GeofenceResult(
            evaluated=True,
            coordinate=coordinate,
            is_inside=inside,
            distance_m=distance,
            review_reason=None if inside else REASON_OUTSIDE_AREA
        )

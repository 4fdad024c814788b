"""
Geo helpers: GeoJSON derivation and great-circle distance.
"""

import math
from typing import Optional

from app.core.exceptions import ValidationError
from app.models.report import GeoPoint, ReportLocation

EARTH_RADIUS_METERS = 6371000


def derive_geo_point(location: Optional[ReportLocation]) -> Optional[GeoPoint]:
    """
    Build the GeoJSON point stored next to `location`.

    Returns None unless both coordinates are present. GeoJSON order is
    [longitude, latitude], the reverse of the location fields.
    """
    if location is None or not location.has_coordinates:
        return None
    return GeoPoint(coordinates=[location.longitude, location.latitude])


def validate_coordinates(longitude: float, latitude: float) -> None:
    if latitude is None or not -90 <= latitude <= 90:
        raise ValidationError("latitude must be between -90 and 90")
    if longitude is None or not -180 <= longitude <= 180:
        raise ValidationError("longitude must be between -180 and 180")


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two points using the Haversine formula."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)
    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c

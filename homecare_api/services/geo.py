"""
Geographic helpers for addresses

Distances are great-circle (Haversine) miles. Nearby searches use a
latitude/longitude bounding box around the centre, which over-selects
the corners of the box; callers sort by the exact distance afterwards.
"""

import math
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_MILES = 3958.8
MILES_PER_DEGREE = 69.0
MAX_NEARBY_RADIUS_MILES = 100.0


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.lat_min <= latitude <= self.lat_max
            and self.lon_min <= longitude <= self.lon_max
        )


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat_from = math.radians(lat1)
    lat_to = math.radians(lat2)
    lat_delta = lat_to - lat_from
    lon_delta = math.radians(lon2) - math.radians(lon1)

    a = math.sin(lat_delta / 2) ** 2 + math.cos(lat_from) * math.cos(lat_to) * math.sin(lon_delta / 2) ** 2
    # Clamp rounding error so asin never sees a value above 1
    angle = 2 * math.asin(math.sqrt(min(1.0, a)))
    return angle * EARTH_RADIUS_MILES


def distance_to(a, b) -> Optional[float]:
    """Distance between two objects with latitude/longitude; None if either lacks coordinates"""
    if a.latitude is None or a.longitude is None or b.latitude is None or b.longitude is None:
        return None
    return haversine_miles(float(a.latitude), float(a.longitude), float(b.latitude), float(b.longitude))


def bounding_box(latitude: float, longitude: float, radius_miles: float) -> BoundingBox:
    """
    Approximate a circle of radius_miles with an axis-aligned box.

    ~69 miles per degree of latitude; longitude degrees shrink with
    cos(latitude). At high latitudes the flat estimate is widened to the
    spherical bound so no point inside the radius falls outside the box,
    and near the poles the longitude band covers the whole globe.
    """
    lat_delta = radius_miles / MILES_PER_DEGREE
    cos_lat = math.cos(math.radians(latitude))
    angular_radius = radius_miles / EARTH_RADIUS_MILES

    if cos_lat <= 0 or abs(latitude) + lat_delta >= 90 or math.sin(angular_radius) >= cos_lat:
        lon_min, lon_max = -180.0, 180.0
    else:
        lon_delta = max(
            radius_miles / (cos_lat * MILES_PER_DEGREE),
            math.degrees(math.asin(math.sin(angular_radius) / cos_lat)),
        )
        lon_min, lon_max = longitude - lon_delta, longitude + lon_delta
        if lon_min < -180 or lon_max > 180:
            # Wrapping across the antimeridian is not representable as one range
            lon_min, lon_max = -180.0, 180.0

    return BoundingBox(
        lat_min=latitude - lat_delta,
        lat_max=latitude + lat_delta,
        lon_min=lon_min,
        lon_max=lon_max,
    )


def validate_radius(radius_miles: float) -> float:
    if radius_miles <= 0 or radius_miles > MAX_NEARBY_RADIUS_MILES:
        raise ValueError("Radius must be between 0 and 100 miles")
    return radius_miles

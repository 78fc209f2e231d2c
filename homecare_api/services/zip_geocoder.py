"""
ZIP Code Geocoding

Fills in coordinates for addresses saved without them, using the ZIP
code centroid from the zipcodes library's bundled US ZIP code data.
Centroids are coarse; client-supplied coordinates always win.
"""

import logging
from typing import Optional

import zipcodes

from ..config import ZIP_GEOCODE_ENABLED

logger = logging.getLogger(__name__)


def get_zipcode_centroid(zipcode: str) -> Optional[tuple[float, float]]:
    """Return (latitude, longitude) for a 5-digit ZIP code, or None if unknown"""
    try:
        zip_info = zipcodes.matching(zipcode)
        if not zip_info:
            logger.debug(f"ZIP code {zipcode} not found in database")
            return None

        # zipcodes.matching returns a list, get the first match
        zip_data = zip_info[0]
        return float(zip_data["lat"]), float(zip_data["long"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"⚠️ Could not geocode ZIP code {zipcode}: {e}")
        return None


def fill_missing_coordinates(values: dict) -> dict:
    """Set latitude/longitude from the ZIP centroid when both are absent"""
    if not ZIP_GEOCODE_ENABLED:
        return values
    if values.get("latitude") is not None or values.get("longitude") is not None:
        return values
    if not values.get("zipcode"):
        return values

    centroid = get_zipcode_centroid(values["zipcode"])
    if centroid:
        values["latitude"], values["longitude"] = centroid
        logger.info(f"📍 Geocoded ZIP {values['zipcode']} to {centroid[0]:.4f}, {centroid[1]:.4f}")
    return values

"""
Trip distance used for fare estimation.

Assumption
----------
Riders do not always send coordinates, and even when they do we have no
routing engine.  Known coordinates give the great-circle (Haversine)
distance; anything else is reported as unknown and the fare estimator
falls back to its nominal distance.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from typing import Optional

from .entities import Location, Place

EARTH_RADIUS_KM = 6_371.0


def haversine_km(a: Location, b: Location) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(a.latitude), math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def trip_distance_km(pickup: Place, drop: Place) -> Optional[float]:
    """Distance between two places, or ``None`` when either lacks coordinates."""
    if pickup.location is None or drop.location is None:
        return None
    return haversine_km(pickup.location, drop.location)

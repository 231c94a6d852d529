from math import atan2, cos, radians, sin, sqrt
from typing import Tuple

EARTH_RADIUS_KM = 6371.0

Point = Tuple[float, float]  # (lat, lon) in degrees

def distance_between(point_a: Point, point_b: Point) -> float:
    """Great-circle distance in kilometres between two (lat, lon) points.

    NaN coordinates produce NaN rather than raising.
    """
    lat1, lon1 = radians(point_a[0]), radians(point_a[1])
    lat2, lon2 = radians(point_b[0]), radians(point_b[1])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push `a` a hair past 1 for antipodal points
    c = 2 * atan2(sqrt(a), sqrt(max(0.0, 1 - a)))

    return EARTH_RADIUS_KM * c

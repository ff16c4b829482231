"""
Great-circle distance and distance ordering
"""

import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

EARTH_RADIUS_KM = 6371.0

T = TypeVar("T")


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two points given in decimal degrees"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_from(origin: Coordinate, lat: Optional[float], lng: Optional[float]) -> Optional[float]:
    """Distance to a record's coordinates, or None when it has none"""
    if lat is None or lng is None:
        return None
    return haversine_km(origin.lat, origin.lng, lat, lng)


def sort_by_distance(
    items: Iterable[T],
    origin: Coordinate,
    coords: Callable[[T], Tuple[Optional[float], Optional[float]]],
) -> List[Tuple[T, Optional[float]]]:
    """
    Pair every item with its distance from ``origin`` and order nearest first.

    Items without coordinates go last and keep their incoming order.
    """
    paired = [(item, distance_from(origin, *coords(item))) for item in items]
    return sorted(paired, key=lambda pair: (pair[1] is None, pair[1] or 0.0))

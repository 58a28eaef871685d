"""Route sequencing - greedy nearest-neighbor ordering of geo-located items."""
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, TypeVar

EARTH_RADIUS_KM = 6371.0

T = TypeVar("T")


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""
    latitude: float
    longitude: float


def _read(point: Any, name: str) -> Any:
    if isinstance(point, dict):
        return point.get(name)
    return getattr(point, name, None)


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def coordinates_of(point: Any) -> Optional[Tuple[float, float]]:
    """Return (latitude, longitude) when both are finite numbers, else None."""
    latitude = _read(point, "latitude")
    longitude = _read(point, "longitude")
    if _is_finite_number(latitude) and _is_finite_number(longitude):
        return float(latitude), float(longitude)
    return None


def haversine_distance(origin: Any, destination: Any) -> float:
    """
    Great-circle distance in kilometres between two points.

    Points expose latitude/longitude as attributes or dict keys. A point with
    missing or non-finite coordinates is infinitely far from everything.
    """
    start = coordinates_of(origin)
    end = coordinates_of(destination)
    if start is None or end is None:
        return math.inf

    lat1, lon1 = map(math.radians, start)
    lat2, lon2 = map(math.radians, end)
    delta_lat = lat2 - lat1
    delta_lon = lon2 - lon1

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def order_by_nearest_neighbor(items: Sequence[T], start: Any) -> List[T]:
    """
    Order items by repeatedly visiting the closest unvisited one.

    Items without valid coordinates never win a comparison, so they come
    after every located item and keep their relative input order. The input
    sequence is not mutated.
    """
    if len(items) <= 1:
        return list(items)

    ordered: List[T] = []
    unvisited = list(items)
    current: Any = start

    while unvisited:
        nearest_index = 0
        nearest_distance = math.inf
        for index, candidate in enumerate(unvisited):
            distance = haversine_distance(current, candidate)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index

        current = unvisited.pop(nearest_index)
        ordered.append(current)

    return ordered

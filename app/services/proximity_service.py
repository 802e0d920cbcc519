"""
Proximity service.

Great-circle (Haversine) distance between two points and distance-ordered
ranking of venues, or of anything that can be located through a venue.
"""

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from app.models.domain.geo_domain import GeoPoint

EARTH_RADIUS_MILES = 3959.0

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RankedItem(Generic[T]):
    """An input item annotated with its distance from the reference point."""

    item: T
    distance_miles: float


def distance_miles(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in miles between two points."""
    lat_a = math.radians(a.latitude)
    lat_b = math.radians(b.latitude)
    delta_lat = lat_b - lat_a
    delta_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat_a) * math.cos(lat_b) * math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_MILES * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_within_radius(a: GeoPoint, b: GeoPoint, radius_miles: float) -> bool:
    return distance_miles(a, b) <= radius_miles


def round_miles(value: float) -> float:
    """One decimal place, as displayed to users."""
    return round(value, 1)


def _default_location(item) -> GeoPoint:
    return item.location


def rank_by_distance(
    reference: GeoPoint,
    items: Iterable[T],
    location: Callable[[T], GeoPoint] = _default_location,
) -> list[RankedItem[T]]:
    """
    Order items by distance from the reference point, nearest first.

    Args:
        reference: The user's position
        items: Venues, or other objects located through `location`
        location: Maps an item to its GeoPoint (defaults to `item.location`)

    Returns:
        New list of RankedItem; ties keep input order. Inputs are not modified.
    """
    ranked = [RankedItem(item, distance_miles(reference, location(item))) for item in items]
    # list.sort is stable
    ranked.sort(key=lambda r: r.distance_miles)
    return ranked

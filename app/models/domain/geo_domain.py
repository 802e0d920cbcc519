# app/models/domain/geo_domain.py
"""
Geo Domain Models
Validated WGS-84 coordinates shared by the geofence and the distance ranking.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude value is missing, non-numeric or out of range."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


def _coerce_degrees(value: Any, field: str, limit: float) -> float:
    if isinstance(value, bool) or value is None:
        raise InvalidCoordinateError(f"{field} is required", field=field)

    try:
        degrees = float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError) as e:
        raise InvalidCoordinateError(f"{field} must be numeric, got {value!r}", field=field) from e

    if not math.isfinite(degrees):
        raise InvalidCoordinateError(f"{field} must be finite, got {value!r}", field=field)
    if not -limit <= degrees <= limit:
        raise InvalidCoordinateError(
            f"{field} must be between -{limit:g} and {limit:g}, got {degrees}", field=field
        )
    return degrees


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS-84 (latitude, longitude) pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        object.__setattr__(self, "latitude", _coerce_degrees(self.latitude, "latitude", 90.0))
        object.__setattr__(self, "longitude", _coerce_degrees(self.longitude, "longitude", 180.0))

    @classmethod
    def from_optional(cls, latitude: Any, longitude: Any) -> "GeoPoint | None":
        """Build a point from query/database values; None when both are absent."""
        if latitude in (None, "") and longitude in (None, ""):
            return None
        return cls(latitude, longitude)


# Stand-in location for venues without stored coordinates
NULL_ISLAND = GeoPoint(0.0, 0.0)

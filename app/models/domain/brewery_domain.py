# app/models/domain/brewery_domain.py
"""
Brewery Domain Models
Breweries are the venues users check in at and the unit the proximity
ranking orders.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.domain.geo_domain import NULL_ISLAND, GeoPoint, InvalidCoordinateError


class Brewery(BaseModel):
    """A brewery (the venue users check in at)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    image: str | None = None
    logo: str | None = None
    type: str = "Craft Brewery"
    hours: str | None = None
    policies: str | None = None
    phone: str | None = None
    social_links: dict[str, Any] = Field(default_factory=dict)
    tap_list_url: str | None = None
    podcast_url: str | None = None
    checkins: int = 0
    rating: Decimal = Decimal("0.0")
    created_at: datetime | None = None

    @property
    def has_coordinates(self) -> bool:
        """True when both stored values are set and form a valid GeoPoint."""
        # Imports wrote 0 into whichever column they lacked, so each value is
        # checked on its own. A venue exactly on the equator or prime meridian
        # therefore counts as unlocated.
        if not self.latitude or not self.longitude:
            return False
        return self._stored_point() is not None

    @property
    def location(self) -> GeoPoint:
        """Stored coordinates, or (0, 0) when missing or invalid. Check has_coordinates first."""
        if not self.latitude or not self.longitude:
            return NULL_ISLAND
        return self._stored_point() or NULL_ISLAND

    def _stored_point(self) -> GeoPoint | None:
        try:
            return GeoPoint(self.latitude, self.longitude)
        except InvalidCoordinateError:
            return None


class BrewerySummary(BaseModel):
    """Compact brewery reference embedded in event payloads."""

    id: str
    name: str

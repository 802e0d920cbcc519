# app/models/api/brewery_response.py
from pydantic import BaseModel, Field

from app.models.domain.brewery_domain import Brewery, BrewerySummary
from app.models.domain.event_domain import Event


class BreweryResponse(Brewery):
    """Brewery plus per-request distance annotation."""

    has_location: bool = Field(True, description="False when no coordinates are stored")
    distance_miles: float | None = Field(None, description="Distance from lat/lng, if supplied")


class EventResponse(Event):
    """Event with a summary of the hosting brewery."""

    brewery: BrewerySummary | None = None
    distance_miles: float | None = None


class BreweryListResponse(BaseModel):
    breweries: list[BreweryResponse]
    ranked: bool = Field(..., description="True when ordered by distance")

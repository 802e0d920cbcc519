# app/models/domain/event_domain.py
"""
Event Domain Models
Brewery events, special and weekly events, and podcast episodes.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class Event(BaseModel):
    """Brewery-hosted event."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str
    brewery_id: str
    date: datetime
    start_time: str
    end_time: str
    image: str
    ticket_required: bool = False
    ticket_price: Decimal | None = None
    attendees: int = 0


class SpecialEvent(BaseModel):
    """One-off event listed by a brewery or partner business."""

    model_config = ConfigDict(extra="ignore")

    id: str
    company: str
    event: str
    details: str = ""
    time: str = ""
    date: str = ""
    address: str = ""
    taproom: bool = False
    logo: str | None = None
    location: str | None = None
    rsvp_required: bool = False
    ticket_link: str | None = None
    owner_id: str | None = None
    created_at: datetime | None = None


class WeeklyEvent(BaseModel):
    """Recurring event held on the same weekday every week."""

    model_config = ConfigDict(extra="ignore")

    id: str
    day: str
    brewery: str
    event: str
    title: str
    details: str = ""
    time: str = ""
    logo: str | None = None
    event_photo: str | None = None
    instagram: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    address: str = ""
    created_at: datetime | None = None


class PodcastEpisode(BaseModel):
    """Episode of the Beer Hop podcast."""

    model_config = ConfigDict(extra="ignore")

    id: str
    episode_number: int
    title: str
    guest: str
    business: str
    duration: str
    release_date: datetime
    spotify_url: str
    image: str
    description: str | None = None

# app/models/domain/user_domain.py
"""
User Domain Models
Users, their denormalized check-in totals and milestone badges.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Beer Hop user with denormalized check-in total."""

    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    email: str
    name: str
    location: str | None = None
    profile_image: str | None = None
    header_image: str | None = None
    role: str = "user"
    checkins: int = 0
    favorite_breweries: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


class Badge(BaseModel):
    """Check-in milestone badge."""

    id: str
    name: str
    description: str
    min_checkins: int
    max_checkins: int | None = None
    next_badge_at: int | None = None
    icon: str

    def covers(self, checkins: int) -> bool:
        if checkins < self.min_checkins:
            return False
        return self.max_checkins is None or checkins <= self.max_checkins

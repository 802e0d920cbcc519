# app/models/api/checkin_response.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class CheckInResponse(BaseModel):
    """A recorded check-in."""

    id: str
    user_id: str
    brewery_id: str
    notes: str | None = None
    created_at: datetime


class CanCheckInResponse(BaseModel):
    """Response for GET /api/checkins/can-checkin/{user_id}/{brewery_id}"""

    can_check_in: bool
    status: Literal["allowed", "cooling_down", "too_far"]
    time_remaining: int | None = Field(None, description="Seconds until the cooldown ends")
    friendly_time_remaining: str | None = None
    distance_miles: float | None = None

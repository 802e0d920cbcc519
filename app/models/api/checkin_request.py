# app/models/api/checkin_request.py
from pydantic import BaseModel, Field


class CreateCheckInRequest(BaseModel):
    """Request body for POST /api/checkins."""

    user_id: str = Field(..., min_length=1, description="Checking-in user")
    brewery_id: str = Field(..., min_length=1, description="Brewery being checked into")
    latitude: float = Field(..., description="Device latitude at check-in time")
    longitude: float = Field(..., description="Device longitude at check-in time")
    notes: str | None = Field(None, max_length=500)

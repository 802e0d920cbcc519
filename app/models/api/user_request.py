# app/models/api/user_request.py
from pydantic import BaseModel, Field


class ToggleFavoriteRequest(BaseModel):
    """Request body for PUT /api/users/{id}/favorites"""

    brewery_id: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /api/users/{id}. Omitted fields are left unchanged."""

    username: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=100)
    location: str | None = Field(None, max_length=100)
    profile_image: str | None = Field(None, max_length=2048)
    header_image: str | None = Field(None, max_length=2048)

# app/models/api/user_response.py
from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    """One row of GET /api/leaderboard"""

    rank: int
    user_id: str
    username: str
    name: str
    profile_image: str | None = None
    checkins: int

"""
users.py
--------
Purpose:
    User profile, favorites, check-in history, badge and leaderboard endpoints.
"""

from fastapi import APIRouter, HTTPException, Query, status

from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.checkin_response import CheckInResponse
from app.models.api.user_request import ToggleFavoriteRequest, UpdateProfileRequest
from app.models.api.user_response import LeaderboardEntry
from app.models.domain.user_domain import Badge, User
from app.services import user_service

router = APIRouter(prefix="/api", tags=["users"])
logger = get_logger(__name__)


def _unavailable(e: DatabaseError, operation: str) -> HTTPException:
    logger.error("Database error serving request", operation=operation, error=str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service temporarily unavailable, please try again",
    )


async def _require_user(user_id: str) -> User:
    try:
        user = await user_service.get_user(user_id)
    except DatabaseError as e:
        raise _unavailable(e, "get_user") from e

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users/{user_id}", response_model=User)
async def get_user(user_id: str):
    return await _require_user(user_id)


@router.get("/users/{user_id}/checkins", response_model=list[CheckInResponse])
async def get_user_check_ins(user_id: str):
    await _require_user(user_id)

    try:
        records = await user_service.list_user_check_ins(user_id)
    except DatabaseError as e:
        raise _unavailable(e, "list_user_check_ins") from e

    return [
        CheckInResponse(
            id=r.id,
            user_id=r.user_id,
            brewery_id=r.venue_id,
            notes=r.notes,
            created_at=r.timestamp,
        )
        for r in records
    ]


@router.get("/users/{user_id}/badge", response_model=Badge | None)
async def get_user_badge(user_id: str):
    """Current badge for the user's check-in count (null below the first tier)."""
    user = await _require_user(user_id)

    try:
        return await user_service.get_user_badge(user)
    except DatabaseError as e:
        raise _unavailable(e, "get_user_badge") from e


@router.put("/users/{user_id}", response_model=User)
async def update_profile(user_id: str, request: UpdateProfileRequest):
    updates = request.model_dump(exclude_unset=True, exclude_none=True)
    try:
        user = await user_service.update_profile(user_id, updates)
    except user_service.UsernameTakenError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except DatabaseError as e:
        raise _unavailable(e, "update_profile") from e

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/users/{user_id}/favorites", response_model=User)
async def toggle_favorite(user_id: str, request: ToggleFavoriteRequest):
    try:
        user = await user_service.toggle_favorite_brewery(user_id, request.brewery_id)
    except DatabaseError as e:
        raise _unavailable(e, "toggle_favorite_brewery") from e

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(limit: int | None = Query(None, ge=1, le=500)):
    """Users ranked by total check-ins."""
    try:
        users = await user_service.get_leaderboard(limit)
    except DatabaseError as e:
        raise _unavailable(e, "get_leaderboard") from e

    return [
        LeaderboardEntry(
            rank=position,
            user_id=u.id,
            username=u.username,
            name=u.name,
            profile_image=u.profile_image,
            checkins=u.checkins,
        )
        for position, u in enumerate(users, start=1)
    ]

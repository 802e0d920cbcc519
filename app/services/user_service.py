"""
User service.
Profiles, favorites, check-in history, badges and the leaderboard.
"""

import psycopg

from app.config import settings
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.checkin_domain import CheckInRecord
from app.models.domain.user_domain import Badge, User
from app.repositories.checkin_repository import PostgresCheckInStore
from app.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class UsernameTakenError(Exception):
    """Another user already has the requested username."""

    def __init__(self, username: str):
        super().__init__(f"Username already taken: {username}")
        self.username = username


async def get_user(user_id: str) -> User | None:
    user = await UserRepository.get_user(user_id)
    if not user:
        logger.info("User not found", user_id=user_id)
    return user


async def update_profile(user_id: str, updates: dict[str, str]) -> User | None:
    """
    Apply profile edits (username, name, location, images).

    Returns:
        Updated User, None if the user does not exist

    Raises:
        UsernameTakenError: the new username belongs to someone else
    """
    try:
        user = await UserRepository.update_profile(user_id, updates)
    except DatabaseError as e:
        if isinstance(e.__cause__, psycopg.errors.UniqueViolation) and "username" in updates:
            raise UsernameTakenError(updates["username"]) from e
        raise

    if user:
        logger.info("Profile updated", user_id=user_id, fields=sorted(updates))
    return user


async def get_leaderboard(limit: int | None = None) -> list[User]:
    """Top users by total check-ins."""
    return await UserRepository.get_leaderboard(limit or settings.LEADERBOARD_LIMIT)


async def list_user_check_ins(user_id: str) -> list[CheckInRecord]:
    """Check-in history for a user, newest first."""
    return await PostgresCheckInStore().list_user_check_ins(user_id)


def toggled_favorites(favorites: list[str], brewery_id: str) -> list[str]:
    """Remove brewery_id if present, otherwise append it."""
    if brewery_id in favorites:
        return [f for f in favorites if f != brewery_id]
    return [*favorites, brewery_id]


async def toggle_favorite_brewery(user_id: str, brewery_id: str) -> User | None:
    """
    Add or remove a brewery from the user's favorites.

    Returns:
        Updated User, None if the user does not exist
    """
    user = await UserRepository.get_user(user_id)
    if not user:
        return None

    favorites = toggled_favorites(user.favorite_breweries, brewery_id)
    updated = await UserRepository.set_favorite_breweries(user_id, favorites)

    logger.info(
        "Favorite breweries updated",
        user_id=user_id,
        brewery_id=brewery_id,
        favorited=brewery_id in favorites,
    )
    return updated


def select_badge(badges: list[Badge], checkins: int) -> Badge | None:
    """Highest-threshold badge whose range covers the check-in count."""
    for badge in sorted(badges, key=lambda b: b.min_checkins, reverse=True):
        if badge.covers(checkins):
            return badge
    return None


async def get_user_badge(user: User) -> Badge | None:
    badges = await UserRepository.list_badges()
    return select_badge(badges, user.checkins)

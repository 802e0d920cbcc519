"""
User, leaderboard and badge queries.
"""

import json

from app.db.helpers import fetch_all, fetch_one, with_db_retry
from app.models.domain.user_domain import Badge, User
from app.repositories.checkin_repository import USER_COLUMNS, row_to_user


# Columns a user may edit on their own profile
PROFILE_COLUMNS = ("username", "name", "location", "profile_image", "header_image")


class UserRepository:
    """Raw SQL helpers for users."""

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_user(cls, user_id: str) -> User | None:
        row = await fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        return row_to_user(row) if row else None

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_leaderboard(cls, limit: int) -> list[User]:
        query = f"""
            SELECT {USER_COLUMNS}
            FROM users
            ORDER BY checkins DESC, created_at ASC
            LIMIT %s
        """
        rows = await fetch_all(query, (limit,))
        return [row_to_user(row) for row in rows]

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def set_favorite_breweries(cls, user_id: str, brewery_ids: list[str]) -> User | None:
        query = f"""
            UPDATE users
            SET favorite_breweries = %s::jsonb
            WHERE id = %s
            RETURNING {USER_COLUMNS}
        """
        row = await fetch_one(query, (json.dumps(brewery_ids), user_id))
        return row_to_user(row) if row else None

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def update_profile(cls, user_id: str, updates: dict[str, str]) -> User | None:
        """
        Update profile columns and return the updated user.

        Args:
            user_id: User to update
            updates: Column -> value, restricted to PROFILE_COLUMNS

        Returns:
            Updated User, None if the user does not exist
        """
        columns = [c for c in PROFILE_COLUMNS if c in updates]
        if not columns:
            return await cls.get_user(user_id)

        assignments = ", ".join(f"{c} = %s" for c in columns)
        query = f"""
            UPDATE users
            SET {assignments}
            WHERE id = %s
            RETURNING {USER_COLUMNS}
        """
        row = await fetch_one(query, (*(updates[c] for c in columns), user_id))
        return row_to_user(row) if row else None

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_badges(cls) -> list[Badge]:
        rows = await fetch_all(
            """
            SELECT id, name, description, min_checkins, max_checkins, next_badge_at, icon
            FROM badges
            ORDER BY min_checkins ASC
            """
        )
        return [Badge(**{**row, "id": str(row["id"])}) for row in rows]

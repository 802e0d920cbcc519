"""
Check-in repository.

Postgres-backed Store used by CheckInGate: reads the check-in ledger,
venue coordinates and users, and records new check-ins together with the
denormalized counters in a single transaction.
"""

from datetime import datetime
from typing import Any, Protocol

import psycopg

from app.db.helpers import (
    DatabaseError,
    RowNotFoundError,
    execute_query,
    fetch_all,
    fetch_one,
    with_db_retry,
)
from app.db.pool import get_db_transaction
from app.infrastructure.observability.logging import get_logger
from app.models.domain.brewery_domain import Brewery
from app.models.domain.checkin_domain import CheckInRecord
from app.models.domain.user_domain import User

logger = get_logger(__name__)

BREWERY_COLUMNS = """
    id, name, address, city, state, zip_code, latitude, longitude, image, logo,
    type, hours, policies, phone, social_links, tap_list_url, podcast_url,
    checkins, rating, created_at
"""

USER_COLUMNS = """
    id, username, email, name, location, profile_image, header_image, role,
    checkins, favorite_breweries, created_at
"""

CHECKIN_COLUMNS = "id, user_id, brewery_id, notes, created_at"


class CheckInStore(Protocol):
    """What CheckInGate needs from persistence."""

    async def get_user(self, user_id: str) -> User | None: ...

    async def get_venue(self, venue_id: str) -> Brewery | None: ...

    async def list_venues(self) -> list[Brewery]: ...

    async def find_latest_check_in(self, user_id: str, venue_id: str) -> CheckInRecord | None: ...

    async def record_check_in(
        self,
        user_id: str,
        venue_id: str,
        timestamp: datetime,
        cooldown_start: datetime,
        notes: str | None = None,
    ) -> CheckInRecord | None: ...


def row_to_check_in(row: dict[str, Any]) -> CheckInRecord:
    return CheckInRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        venue_id=str(row["brewery_id"]),
        timestamp=row["created_at"],
        notes=row.get("notes"),
    )


def row_to_brewery(row: dict[str, Any]) -> Brewery:
    return Brewery(**{**row, "id": str(row["id"]), "social_links": row.get("social_links") or {}})


def row_to_user(row: dict[str, Any]) -> User:
    return User(
        **{**row, "id": str(row["id"]), "favorite_breweries": row.get("favorite_breweries") or []}
    )


class PostgresCheckInStore:
    """CheckInStore over the shared connection pool."""

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_user(self, user_id: str) -> User | None:
        row = await fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        return row_to_user(row) if row else None

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_venue(self, venue_id: str) -> Brewery | None:
        row = await fetch_one(f"SELECT {BREWERY_COLUMNS} FROM breweries WHERE id = %s", (venue_id,))
        return row_to_brewery(row) if row else None

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_venues(self) -> list[Brewery]:
        rows = await fetch_all(f"SELECT {BREWERY_COLUMNS} FROM breweries ORDER BY name ASC")
        return [row_to_brewery(row) for row in rows]

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def find_latest_check_in(
        self,
        user_id: str,
        venue_id: str,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> CheckInRecord | None:
        query = f"""
            SELECT {CHECKIN_COLUMNS}
            FROM check_ins
            WHERE user_id = %s AND brewery_id = %s
            ORDER BY created_at DESC
            LIMIT 1
        """
        row = await fetch_one(query, (user_id, venue_id), connection=connection)
        return row_to_check_in(row) if row else None

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_user_check_ins(self, user_id: str) -> list[CheckInRecord]:
        query = f"""
            SELECT {CHECKIN_COLUMNS}
            FROM check_ins
            WHERE user_id = %s
            ORDER BY created_at DESC
        """
        rows = await fetch_all(query, (user_id,))
        return [row_to_check_in(row) for row in rows]

    async def insert_check_in(
        self,
        user_id: str,
        venue_id: str,
        timestamp: datetime,
        notes: str | None = None,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> CheckInRecord:
        query = f"""
            INSERT INTO check_ins (user_id, brewery_id, notes, created_at)
            VALUES (%s, %s, %s, %s)
            RETURNING {CHECKIN_COLUMNS}
        """
        row = await fetch_one(query, (user_id, venue_id, notes, timestamp), connection=connection)
        return row_to_check_in(row)

    async def increment_user_checkin_count(
        self, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> None:
        updated = await execute_query(
            "UPDATE users SET checkins = checkins + 1 WHERE id = %s",
            (user_id,),
            connection=connection,
        )
        if updated == 0:
            raise RowNotFoundError("User", user_id, operation="increment_user_checkin_count")

    async def increment_venue_checkin_count(
        self, venue_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> None:
        updated = await execute_query(
            "UPDATE breweries SET checkins = checkins + 1 WHERE id = %s",
            (venue_id,),
            connection=connection,
        )
        if updated == 0:
            raise RowNotFoundError("Brewery", venue_id, operation="increment_venue_checkin_count")

    async def record_check_in(
        self,
        user_id: str,
        venue_id: str,
        timestamp: datetime,
        cooldown_start: datetime,
        notes: str | None = None,
    ) -> CheckInRecord | None:
        """
        Insert a check-in and bump both counters atomically.

        Serialized per (user, venue) with a transaction-scoped advisory lock;
        the cooldown is re-checked under the lock.

        Returns:
            The new record, or None when another check-in for the pair
            landed after cooldown_start (nothing is written).

        Raises:
            RowNotFoundError: the user or brewery was deleted mid-transaction
            DatabaseError: any other database failure (rolled back)
        """
        try:
            async with await get_db_transaction() as conn:
                await conn.execute(
                    "SELECT pg_advisory_xact_lock(hashtextextended(%s, 0))",
                    (f"checkin:{user_id}:{venue_id}",),
                )

                latest = await self.find_latest_check_in(user_id, venue_id, connection=conn)
                if latest and latest.timestamp > cooldown_start:
                    logger.info(
                        "Concurrent check-in already recorded",
                        user_id=user_id,
                        brewery_id=venue_id,
                        existing_check_in=latest.id,
                    )
                    return None

                record = await self.insert_check_in(
                    user_id, venue_id, timestamp, notes, connection=conn
                )
                await self.increment_user_checkin_count(user_id, connection=conn)
                await self.increment_venue_checkin_count(venue_id, connection=conn)

        except psycopg.Error as e:
            logger.error(
                "Check-in transaction failed", user_id=user_id, brewery_id=venue_id, error=str(e)
            )
            raise DatabaseError(f"Transaction failed: {e}", operation="record_check_in") from e

        logger.info(
            "Check-in recorded", user_id=user_id, brewery_id=venue_id, check_in_id=record.id
        )
        return record

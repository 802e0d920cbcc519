"""
Brewery and event queries.
"""

from typing import Any

from app.db.helpers import fetch_all, fetch_one, with_db_retry
from app.models.domain.brewery_domain import Brewery
from app.models.domain.event_domain import Event, SpecialEvent, WeeklyEvent
from app.repositories.checkin_repository import BREWERY_COLUMNS, row_to_brewery

EVENT_COLUMNS = """
    id, name, description, brewery_id, date, start_time, end_time, image,
    ticket_required, ticket_price, attendees
"""

SPECIAL_EVENT_COLUMNS = """
    id, company, event, details, time, date, address, taproom, logo, location,
    rsvp_required, ticket_link, owner_id, created_at
"""

WEEKLY_EVENT_COLUMNS = """
    id, day, brewery, event, title, details, time, logo, event_photo, instagram,
    twitter, facebook, address, created_at
"""


def row_to_event(row: dict[str, Any]) -> Event:
    return Event(**{**row, "id": str(row["id"]), "brewery_id": str(row["brewery_id"])})


def row_to_special_event(row: dict[str, Any]) -> SpecialEvent:
    owner_id = row.get("owner_id")
    return SpecialEvent(
        **{**row, "id": str(row["id"]), "owner_id": str(owner_id) if owner_id else None}
    )


def row_to_weekly_event(row: dict[str, Any]) -> WeeklyEvent:
    return WeeklyEvent(**{**row, "id": str(row["id"])})


class BreweryRepository:
    """Raw SQL helpers for breweries and their events."""

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_breweries(cls) -> list[Brewery]:
        rows = await fetch_all(f"SELECT {BREWERY_COLUMNS} FROM breweries ORDER BY name ASC")
        return [row_to_brewery(row) for row in rows]

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_brewery(cls, brewery_id: str) -> Brewery | None:
        row = await fetch_one(
            f"SELECT {BREWERY_COLUMNS} FROM breweries WHERE id = %s", (brewery_id,)
        )
        return row_to_brewery(row) if row else None

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_breweries_by_ids(cls, brewery_ids: list[str]) -> dict[str, Brewery]:
        if not brewery_ids:
            return {}
        rows = await fetch_all(
            f"SELECT {BREWERY_COLUMNS} FROM breweries WHERE id = ANY(%s)", (brewery_ids,)
        )
        breweries = [row_to_brewery(row) for row in rows]
        return {b.id: b for b in breweries}

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_events(cls) -> list[Event]:
        rows = await fetch_all(f"SELECT {EVENT_COLUMNS} FROM events ORDER BY date ASC")
        return [row_to_event(row) for row in rows]

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_event(cls, event_id: str) -> Event | None:
        row = await fetch_one(f"SELECT {EVENT_COLUMNS} FROM events WHERE id = %s", (event_id,))
        return row_to_event(row) if row else None

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_special_events(cls) -> list[SpecialEvent]:
        rows = await fetch_all(
            f"SELECT {SPECIAL_EVENT_COLUMNS} FROM special_events ORDER BY created_at ASC, id ASC"
        )
        return [row_to_special_event(row) for row in rows]

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_special_event(cls, event_id: str) -> SpecialEvent | None:
        row = await fetch_one(
            f"SELECT {SPECIAL_EVENT_COLUMNS} FROM special_events WHERE id = %s", (event_id,)
        )
        return row_to_special_event(row) if row else None

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_weekly_events(cls, day: str | None = None) -> list[WeeklyEvent]:
        """All weekly events, or only those held on `day` (capitalized weekday name)."""
        if day is None:
            rows = await fetch_all(
                f"SELECT {WEEKLY_EVENT_COLUMNS} FROM weekly_events ORDER BY time ASC, title ASC"
            )
        else:
            rows = await fetch_all(
                f"""
                SELECT {WEEKLY_EVENT_COLUMNS}
                FROM weekly_events
                WHERE day = %s
                ORDER BY time ASC, title ASC
                """,
                (day,),
            )
        return [row_to_weekly_event(row) for row in rows]

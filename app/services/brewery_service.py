"""
Brewery and event service.

Listing endpoints optionally rank results by distance from the user. Breweries
without usable coordinates (missing, zero or out of range) are kept out of the
ranking and appended afterwards with no distance. Special and weekly events are
plain listings.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from app.infrastructure.observability.logging import get_logger
from app.models.domain.brewery_domain import Brewery, BrewerySummary
from app.models.domain.event_domain import Event, SpecialEvent, WeeklyEvent
from app.models.domain.geo_domain import GeoPoint
from app.repositories.brewery_repository import BreweryRepository
from app.services.proximity_service import rank_by_distance, round_miles

logger = get_logger(__name__)

T = TypeVar("T")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class UnknownWeekdayError(ValueError):
    """Path segment is not a weekday name."""

    def __init__(self, day: str):
        super().__init__(f"Unknown day: {day!r}")
        self.day = day


@dataclass(slots=True)
class BreweryListing:
    brewery: Brewery
    distance_miles: float | None = None


@dataclass(slots=True)
class EventListing:
    event: Event
    brewery: BrewerySummary | None
    distance_miles: float | None = None


def _rank_locatable(
    reference: GeoPoint,
    items: Sequence[T],
    brewery_of: Callable[[T], Brewery | None],
) -> list[tuple[T, float | None]]:
    located: list[T] = []
    unlocated: list[T] = []
    for item in items:
        brewery = brewery_of(item)
        if brewery is not None and brewery.has_coordinates:
            located.append(item)
        else:
            unlocated.append(item)

    ranked = rank_by_distance(reference, located, location=lambda i: brewery_of(i).location)
    return [(r.item, round_miles(r.distance_miles)) for r in ranked] + [
        (i, None) for i in unlocated
    ]


async def list_breweries(reference: GeoPoint | None = None) -> list[BreweryListing]:
    """All breweries, nearest first when a reference point is given."""
    breweries = await BreweryRepository.list_breweries()

    if reference is None:
        return [BreweryListing(brewery=b) for b in breweries]

    ranked = _rank_locatable(reference, breweries, lambda b: b)
    missing = [b.id for b, d in ranked if d is None]
    if missing:
        logger.warning(
            "Breweries without usable coordinates excluded from ranking",
            count=len(missing),
            brewery_ids=missing,
        )

    return [BreweryListing(brewery=b, distance_miles=d) for b, d in ranked]


async def get_brewery(brewery_id: str) -> Brewery | None:
    return await BreweryRepository.get_brewery(brewery_id)


async def list_events(reference: GeoPoint | None = None) -> list[EventListing]:
    """
    Events by date, each with a summary of its brewery.

    With a reference point, events are ordered by the distance to their
    brewery instead.
    """
    events = await BreweryRepository.list_events()
    breweries = await BreweryRepository.get_breweries_by_ids(
        sorted({e.brewery_id for e in events})
    )

    def summary(event: Event) -> BrewerySummary | None:
        brewery = breweries.get(event.brewery_id)
        return BrewerySummary(id=brewery.id, name=brewery.name) if brewery else None

    if reference is None:
        return [EventListing(event=e, brewery=summary(e)) for e in events]

    ranked = _rank_locatable(reference, events, lambda e: breweries.get(e.brewery_id))
    return [EventListing(event=e, brewery=summary(e), distance_miles=d) for e, d in ranked]


async def get_event(event_id: str) -> EventListing | None:
    event = await BreweryRepository.get_event(event_id)
    if event is None:
        return None

    brewery = await BreweryRepository.get_brewery(event.brewery_id)
    return EventListing(
        event=event,
        brewery=BrewerySummary(id=brewery.id, name=brewery.name) if brewery else None,
    )


async def list_special_events() -> list[SpecialEvent]:
    return await BreweryRepository.list_special_events()


async def get_special_event(event_id: str) -> SpecialEvent | None:
    return await BreweryRepository.get_special_event(event_id)


def normalize_weekday(day: str) -> str:
    """'friday' / 'FRIDAY' -> 'Friday'. Raises UnknownWeekdayError otherwise."""
    normalized = day.strip().capitalize()
    if normalized not in WEEKDAYS:
        raise UnknownWeekdayError(day)
    return normalized


async def list_weekly_events(day: str | None = None) -> list[WeeklyEvent]:
    """
    Weekly events ordered Monday to Sunday, or just one day's events.

    Raises:
        UnknownWeekdayError: day is not a weekday name
    """
    if day is not None:
        return await BreweryRepository.list_weekly_events(normalize_weekday(day))

    events = await BreweryRepository.list_weekly_events()
    # Rows with an unrecognized day go last; sort is stable so time order is kept
    return sorted(
        events, key=lambda e: WEEKDAYS.index(e.day) if e.day in WEEKDAYS else len(WEEKDAYS)
    )

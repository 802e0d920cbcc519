"""
breweries.py
------------
Purpose:
    Brewery and event listing endpoints. When the client passes its
    position (lat/lng), breweries and events are ordered nearest first.
    Special and weekly events are read-only listings.
"""

from fastapi import APIRouter, HTTPException, Query, Response, status

from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.brewery_response import BreweryListResponse, BreweryResponse, EventResponse
from app.models.domain.event_domain import SpecialEvent, WeeklyEvent
from app.models.domain.geo_domain import GeoPoint, InvalidCoordinateError
from app.services import brewery_service
from app.services.brewery_service import BreweryListing, EventListing, UnknownWeekdayError

router = APIRouter(prefix="/api", tags=["breweries"])
logger = get_logger(__name__)


def _reference_point(lat: str | None, lng: str | None) -> GeoPoint | None:
    try:
        return GeoPoint.from_optional(lat, lng)
    except InvalidCoordinateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


def _unavailable(e: DatabaseError, operation: str) -> HTTPException:
    logger.error("Database error serving request", operation=operation, error=str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service temporarily unavailable, please try again",
    )


def _brewery_response(listing: BreweryListing) -> BreweryResponse:
    return BreweryResponse(
        **listing.brewery.model_dump(),
        has_location=listing.brewery.has_coordinates,
        distance_miles=listing.distance_miles,
    )


def _event_response(listing: EventListing) -> EventResponse:
    return EventResponse(
        **listing.event.model_dump(),
        brewery=listing.brewery,
        distance_miles=listing.distance_miles,
    )


@router.get("/breweries", response_model=BreweryListResponse)
async def list_breweries(
    lat: str | None = Query(None, description="User latitude"),
    lng: str | None = Query(None, description="User longitude"),
):
    """List breweries, nearest first when lat/lng are given."""
    reference = _reference_point(lat, lng)

    try:
        listings = await brewery_service.list_breweries(reference)
    except DatabaseError as e:
        raise _unavailable(e, "list_breweries") from e

    return BreweryListResponse(
        breweries=[_brewery_response(listing) for listing in listings],
        ranked=reference is not None,
    )


@router.get("/breweries/{brewery_id}", response_model=BreweryResponse)
async def get_brewery(brewery_id: str):
    try:
        brewery = await brewery_service.get_brewery(brewery_id)
    except DatabaseError as e:
        raise _unavailable(e, "get_brewery") from e

    if not brewery:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brewery not found")

    return _brewery_response(BreweryListing(brewery=brewery))


@router.get("/events", response_model=list[EventResponse])
async def list_events(
    lat: str | None = Query(None, description="User latitude"),
    lng: str | None = Query(None, description="User longitude"),
):
    """List events with their brewery, nearest brewery first when lat/lng are given."""
    reference = _reference_point(lat, lng)

    try:
        listings = await brewery_service.list_events(reference)
    except DatabaseError as e:
        raise _unavailable(e, "list_events") from e

    return [_event_response(listing) for listing in listings]


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(event_id: str):
    try:
        listing = await brewery_service.get_event(event_id)
    except DatabaseError as e:
        raise _unavailable(e, "get_event") from e

    if not listing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    return _event_response(listing)


@router.get("/special-events", response_model=list[SpecialEvent])
async def list_special_events():
    try:
        return await brewery_service.list_special_events()
    except DatabaseError as e:
        raise _unavailable(e, "list_special_events") from e


@router.get("/special-events/{event_id}", response_model=SpecialEvent)
async def get_special_event(event_id: str):
    try:
        event = await brewery_service.get_special_event(event_id)
    except DatabaseError as e:
        raise _unavailable(e, "get_special_event") from e

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Special event not found"
        )
    return event


def _no_cache(response: Response) -> None:
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"


@router.get("/weekly-events", response_model=list[WeeklyEvent])
async def list_weekly_events(response: Response):
    """Recurring events, Monday first. Sent with no-cache headers."""
    _no_cache(response)
    try:
        return await brewery_service.list_weekly_events()
    except DatabaseError as e:
        raise _unavailable(e, "list_weekly_events") from e


@router.get("/weekly-events/{day}", response_model=list[WeeklyEvent])
async def list_weekly_events_for_day(day: str, response: Response):
    """Recurring events for one weekday; the day name is case-insensitive."""
    _no_cache(response)
    try:
        return await brewery_service.list_weekly_events(day)
    except UnknownWeekdayError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except DatabaseError as e:
        raise _unavailable(e, "list_weekly_events") from e

"""
checkins.py
-----------
Purpose:
    Check-in endpoints. The geofence and cooldown rules live in
    CheckInGate; this module maps its results and errors onto HTTP.

Usage:
    POST /api/checkins                                  - record a check-in
    GET  /api/checkins/can-checkin/{user_id}/{brewery_id} - eligibility preview
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.infrastructure.observability.logging import get_logger
from app.models.api.checkin_request import CreateCheckInRequest
from app.models.api.checkin_response import CanCheckInResponse, CheckInResponse
from app.models.domain.checkin_domain import CheckInOutcome
from app.models.domain.geo_domain import GeoPoint, InvalidCoordinateError
from app.repositories.checkin_repository import PostgresCheckInStore
from app.services.checkin_service import (
    CheckInConflictError,
    CheckInGate,
    CheckInServiceError,
    NotFoundError,
    StoreUnavailableError,
    format_time_remaining,
)

router = APIRouter(prefix="/api/checkins", tags=["checkins"])
logger = get_logger(__name__)


def get_checkin_gate() -> CheckInGate:
    return CheckInGate(PostgresCheckInStore())


def get_now() -> datetime:
    return datetime.now(UTC)


def _service_error_to_http(e: CheckInServiceError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, CheckInConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Check-in already recorded",
                "time_remaining": e.remaining_seconds,
                "friendly_time_remaining": format_time_remaining(e.remaining_seconds),
            },
        )
    if isinstance(e, StoreUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable, please try again",
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
    )


def _to_can_check_in_response(outcome: CheckInOutcome) -> CanCheckInResponse:
    remaining = outcome.remaining_seconds
    return CanCheckInResponse(
        can_check_in=outcome.allowed,
        status=outcome.status,
        time_remaining=remaining,
        friendly_time_remaining=format_time_remaining(remaining) if remaining else None,
        distance_miles=outcome.distance_miles,
    )


@router.post("", response_model=CheckInResponse, status_code=status.HTTP_201_CREATED)
async def create_check_in(
    request: CreateCheckInRequest,
    gate: CheckInGate = Depends(get_checkin_gate),
    now: datetime = Depends(get_now),
):
    """
    Record a check-in if the user is at the brewery and not cooling down.

    Raises:
        400: Invalid coordinates, or cooldown active
        403: Too far from the brewery
        404: Unknown user or brewery
        409: A concurrent check-in won
        503: Database unavailable
    """
    try:
        location = GeoPoint(request.latitude, request.longitude)
    except InvalidCoordinateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        outcome = await gate.can_check_in(request.user_id, request.brewery_id, location, now)

        if outcome.status == "too_far":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "message": "You must be at the brewery to check in",
                    "distance_miles": outcome.distance_miles,
                    "radius_miles": gate.radius_miles,
                },
            )

        if outcome.status == "cooling_down":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "message": "Check-in cooldown active",
                    "time_remaining": outcome.remaining_seconds,
                    "friendly_time_remaining": format_time_remaining(outcome.remaining_seconds),
                },
            )

        record = await gate.commit(request.user_id, request.brewery_id, now, request.notes)

    except CheckInServiceError as e:
        logger.warning(
            "Check-in failed",
            user_id=request.user_id,
            brewery_id=request.brewery_id,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise _service_error_to_http(e) from e

    return CheckInResponse(
        id=record.id,
        user_id=record.user_id,
        brewery_id=record.venue_id,
        notes=record.notes,
        created_at=record.timestamp,
    )


@router.get("/can-checkin/{user_id}/{brewery_id}", response_model=CanCheckInResponse)
async def can_check_in(
    user_id: str,
    brewery_id: str,
    lat: str | None = Query(None, description="Device latitude"),
    lng: str | None = Query(None, description="Device longitude"),
    gate: CheckInGate = Depends(get_checkin_gate),
    now: datetime = Depends(get_now),
):
    """
    Preview eligibility. Without lat/lng only the cooldown is checked.
    """
    try:
        location = GeoPoint.from_optional(lat, lng)
    except InvalidCoordinateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        if location is None:
            decision = await gate.evaluate(user_id, brewery_id, now)
            outcome = CheckInOutcome(
                status="allowed" if decision.allowed else "cooling_down",
                remaining_seconds=decision.remaining_seconds,
            )
        else:
            outcome = await gate.can_check_in(user_id, brewery_id, location, now)

    except CheckInServiceError as e:
        raise _service_error_to_http(e) from e

    return _to_can_check_in_response(outcome)

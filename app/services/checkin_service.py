"""
Check-in service.

CheckInGate decides whether a user may check in at a brewery and records
accepted check-ins. Two rules apply, in order:

1. Geofence: the reported location must be within the configured radius
   (0.1 mile by default) of the brewery's stored coordinates.
2. Cooldown: at most one check-in per (user, brewery) pair per cooldown
   window (24 hours by default).

The current time is always passed in by the caller.
"""

import math
from datetime import datetime, timedelta

from app.config import settings
from app.db.helpers import DatabaseError, RowNotFoundError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.brewery_domain import Brewery
from app.models.domain.checkin_domain import (
    CheckInDecision,
    CheckInOutcome,
    CheckInRecord,
    as_utc,
)
from app.models.domain.geo_domain import GeoPoint
from app.repositories.checkin_repository import CheckInStore
from app.services.proximity_service import distance_miles, round_miles

logger = get_logger(__name__)


class CheckInServiceError(Exception):
    """Base class for check-in failures."""


class NotFoundError(CheckInServiceError):
    """Unknown user or brewery."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class StoreUnavailableError(CheckInServiceError):
    """The database could not be reached or the query failed. Safe to retry."""


class CheckInConflictError(CheckInServiceError):
    """A concurrent request recorded a check-in for the same pair first."""

    def __init__(self, remaining_seconds: int):
        super().__init__("Check-in already recorded within the cooldown window")
        self.remaining_seconds = remaining_seconds


def format_time_remaining(seconds: int) -> str:
    """Render a wait time as '5h 12m', or '12m' under an hour."""
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes = rest // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class CheckInGate:
    """Geofence + cooldown rules over a CheckInStore."""

    def __init__(
        self,
        store: CheckInStore,
        cooldown: timedelta | None = None,
        radius_miles: float | None = None,
    ):
        self.store = store
        self.cooldown = cooldown if cooldown is not None else settings.checkin_cooldown()
        self.radius_miles = (
            radius_miles if radius_miles is not None else settings.CHECKIN_RADIUS_MILES
        )

    async def evaluate(self, user_id: str, venue_id: str, now: datetime) -> CheckInDecision:
        """
        Cooldown check only. No side effects.

        Raises:
            NotFoundError: unknown user or brewery
            StoreUnavailableError: database failure
        """
        await self._require_user(user_id)
        await self._require_venue(venue_id)
        return await self._cooldown_decision(user_id, venue_id, as_utc(now))

    async def can_check_in(
        self,
        user_id: str,
        venue_id: str,
        reported_location: GeoPoint,
        now: datetime,
    ) -> CheckInOutcome:
        """
        Full eligibility check: geofence first, then cooldown.

        Returns:
            CheckInOutcome with status "too_far", "cooling_down" or "allowed"
        """
        await self._require_user(user_id)
        venue = await self._require_venue(venue_id)

        if not venue.has_coordinates:
            logger.warning(
                "Brewery has no usable coordinates, refusing check-in",
                brewery_id=venue_id,
                latitude=str(venue.latitude),
                longitude=str(venue.longitude),
            )
            return CheckInOutcome(status="too_far")

        distance = distance_miles(reported_location, venue.location)
        if distance > self.radius_miles:
            logger.info(
                "Check-in rejected, outside geofence",
                user_id=user_id,
                brewery_id=venue_id,
                distance_miles=round(distance, 3),
                radius_miles=self.radius_miles,
            )
            return CheckInOutcome(status="too_far", distance_miles=round_miles(distance))

        decision = await self._cooldown_decision(user_id, venue_id, as_utc(now))
        if not decision.allowed:
            return CheckInOutcome(
                status="cooling_down",
                distance_miles=round_miles(distance),
                remaining_seconds=decision.remaining_seconds,
            )

        return CheckInOutcome(status="allowed", distance_miles=round_miles(distance))

    async def commit(
        self, user_id: str, venue_id: str, now: datetime, notes: str | None = None
    ) -> CheckInRecord:
        """
        Record a check-in. Call only after an allowed decision.

        The ledger insert and both counter increments share one transaction,
        and the cooldown is re-checked inside it.

        Raises:
            NotFoundError: unknown user or brewery
            CheckInConflictError: another check-in for the pair won the race
            StoreUnavailableError: database failure (nothing was written)
        """
        now = as_utc(now)
        await self._require_user(user_id)
        await self._require_venue(venue_id)

        try:
            record = await self.store.record_check_in(
                user_id, venue_id, now, now - self.cooldown, notes
            )
        except RowNotFoundError as e:
            logger.warning(
                "Check-in target deleted during commit",
                user_id=user_id,
                brewery_id=venue_id,
                entity=e.entity,
            )
            raise NotFoundError(e.entity, e.entity_id) from e
        except DatabaseError as e:
            logger.error(
                "Check-in commit failed", user_id=user_id, brewery_id=venue_id, error=str(e)
            )
            raise StoreUnavailableError(str(e)) from e

        if record is None:
            decision = await self._cooldown_decision(user_id, venue_id, now)
            raise CheckInConflictError(decision.remaining_seconds or 0)

        return record

    async def _cooldown_decision(
        self, user_id: str, venue_id: str, now: datetime
    ) -> CheckInDecision:
        try:
            latest = await self.store.find_latest_check_in(user_id, venue_id)
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e

        if latest is None:
            return CheckInDecision.allow()

        elapsed = now - latest.timestamp
        if elapsed >= self.cooldown:
            return CheckInDecision.allow()

        remaining = self.cooldown - elapsed
        # Clock skew can put the last check-in in the future; never report more than a full window
        remaining_seconds = min(
            math.ceil(remaining.total_seconds()), int(self.cooldown.total_seconds())
        )
        logger.info(
            "Check-in cooldown active",
            user_id=user_id,
            brewery_id=venue_id,
            remaining_seconds=remaining_seconds,
        )
        return CheckInDecision.deny(max(0, remaining_seconds))

    async def _require_user(self, user_id: str) -> None:
        try:
            user = await self.store.get_user(user_id)
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e
        if user is None:
            raise NotFoundError("User", user_id)

    async def _require_venue(self, venue_id: str) -> Brewery:
        try:
            venue = await self.store.get_venue(venue_id)
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e
        if venue is None:
            raise NotFoundError("Brewery", venue_id)
        return venue

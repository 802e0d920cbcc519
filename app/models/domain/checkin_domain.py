# app/models/domain/checkin_domain.py
"""
Check-in Domain Models
Ledger records and the results of the geofence and cooldown rules.
"""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class CheckInRecord(BaseModel):
    """One accepted check-in. Insert-only ledger entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    venue_id: str
    timestamp: datetime
    notes: str | None = None

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        # check_ins.created_at is a naive UTC timestamp column
        return as_utc(value)


class CheckInDecision(BaseModel):
    """Result of the cooldown check for a (user, venue) pair."""

    allowed: bool
    remaining_seconds: int | None = None

    @classmethod
    def allow(cls) -> "CheckInDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, remaining_seconds: int) -> "CheckInDecision":
        return cls(allowed=False, remaining_seconds=remaining_seconds)


CheckInStatus = Literal["allowed", "cooling_down", "too_far"]


class CheckInOutcome(BaseModel):
    """Combined geofence + cooldown verdict."""

    status: CheckInStatus
    distance_miles: float | None = None
    remaining_seconds: int | None = None

    @property
    def allowed(self) -> bool:
        return self.status == "allowed"

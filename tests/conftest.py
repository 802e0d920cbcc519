from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from app.db.helpers import RowNotFoundError
from app.models.domain.brewery_domain import Brewery
from app.models.domain.checkin_domain import CheckInRecord
from app.models.domain.user_domain import User

# Oklahoma City
OKC = (Decimal("35.4676"), Decimal("-97.5164"))


def make_brewery(brewery_id: str, latitude=None, longitude=None, **overrides) -> Brewery:
    return Brewery(
        id=brewery_id,
        name=overrides.pop("name", f"Brewery {brewery_id}"),
        latitude=latitude,
        longitude=longitude,
        **overrides,
    )


def make_user(user_id: str, checkins: int = 0, **overrides) -> User:
    return User(
        id=user_id,
        username=overrides.pop("username", user_id),
        email=overrides.pop("email", f"{user_id}@example.com"),
        name=overrides.pop("name", user_id.title()),
        checkins=checkins,
        **overrides,
    )


class FakeCheckInStore:
    """In-memory CheckInStore with the same counter semantics as Postgres."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.venues: dict[str, Brewery] = {}
        self.check_ins: list[CheckInRecord] = []
        self.fail_with: Exception | None = None

    def add_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def add_venue(self, venue: Brewery) -> Brewery:
        self.venues[venue.id] = venue
        return venue

    def seed_check_in(self, user_id: str, venue_id: str, timestamp: datetime) -> CheckInRecord:
        record = CheckInRecord(
            id=f"ci-{len(self.check_ins) + 1}",
            user_id=user_id,
            venue_id=venue_id,
            timestamp=timestamp,
        )
        self.check_ins.append(record)
        return record

    def _maybe_fail(self):
        if self.fail_with:
            raise self.fail_with

    async def get_user(self, user_id: str) -> User | None:
        self._maybe_fail()
        return self.users.get(user_id)

    async def get_venue(self, venue_id: str) -> Brewery | None:
        self._maybe_fail()
        return self.venues.get(venue_id)

    async def list_venues(self) -> list[Brewery]:
        self._maybe_fail()
        return list(self.venues.values())

    async def find_latest_check_in(self, user_id: str, venue_id: str) -> CheckInRecord | None:
        self._maybe_fail()
        matches = [c for c in self.check_ins if c.user_id == user_id and c.venue_id == venue_id]
        return max(matches, key=lambda c: c.timestamp, default=None)

    async def record_check_in(
        self,
        user_id: str,
        venue_id: str,
        timestamp: datetime,
        cooldown_start: datetime,
        notes: str | None = None,
    ) -> CheckInRecord | None:
        self._maybe_fail()
        latest = await self.find_latest_check_in(user_id, venue_id)
        if latest and latest.timestamp > cooldown_start:
            return None

        if user_id not in self.users:
            raise RowNotFoundError("User", user_id, operation="increment_user_checkin_count")
        if venue_id not in self.venues:
            raise RowNotFoundError("Brewery", venue_id, operation="increment_venue_checkin_count")

        record = self.seed_check_in(user_id, venue_id, timestamp)
        record = record.model_copy(update={"notes": notes})
        self.check_ins[-1] = record

        user = self.users[user_id]
        self.users[user_id] = user.model_copy(update={"checkins": user.checkins + 1})
        venue = self.venues[venue_id]
        self.venues[venue_id] = venue.model_copy(update={"checkins": venue.checkins + 1})
        return record


@pytest.fixture
def store() -> FakeCheckInStore:
    fake = FakeCheckInStore()
    fake.add_user(make_user("user-123"))
    fake.add_venue(make_brewery("brewery-1", *OKC, name="Prairie Artisan Ales"))
    return fake


@pytest.fixture
def noon() -> datetime:
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def cooldown() -> timedelta:
    return timedelta(hours=24)


@pytest.fixture
def brewery_factory():
    return make_brewery


@pytest.fixture
def user_factory():
    return make_user

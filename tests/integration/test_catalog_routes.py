"""
Brewery, event, user and podcast endpoints with the repositories mocked out.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import psycopg
import pytest
from fastapi.testclient import TestClient

from app.db.helpers import DatabaseError
from app.main import app
from app.models.domain.checkin_domain import CheckInRecord
from app.models.domain.event_domain import Event, PodcastEpisode, SpecialEvent, WeeklyEvent
from app.models.domain.user_domain import Badge

client = TestClient(app)

BREWERY_REPO = "app.services.brewery_service.BreweryRepository"
USER_REPO = "app.services.user_service.UserRepository"


@pytest.fixture
def breweries(brewery_factory):
    return [
        brewery_factory("tulsa", 36.1540, -95.9928, name="American Solera"),
        brewery_factory("unmapped", name="Garage Project"),
        brewery_factory("okc", 35.4676, -97.5164, name="Prairie Artisan Ales"),
        brewery_factory("norman", 35.2226, -97.4395, name="Lazy Circles"),
    ]


def _event(event_id: str, brewery_id: str, day: int) -> Event:
    return Event(
        id=event_id,
        name=f"Event {event_id}",
        description="Live music and a cask release",
        brewery_id=brewery_id,
        date=datetime(2024, 6, day, tzinfo=UTC),
        start_time="18:00",
        end_time="22:00",
        image="https://example.com/event.png",
    )


def test_list_breweries_unranked(monkeypatch, breweries):
    monkeypatch.setattr(f"{BREWERY_REPO}.list_breweries", AsyncMock(return_value=breweries))

    response = client.get("/api/breweries")

    assert response.status_code == 200
    data = response.json()
    assert data["ranked"] is False
    assert [b["id"] for b in data["breweries"]] == ["tulsa", "unmapped", "okc", "norman"]
    assert all(b["distance_miles"] is None for b in data["breweries"])


def test_list_breweries_nearest_first(monkeypatch, breweries):
    monkeypatch.setattr(f"{BREWERY_REPO}.list_breweries", AsyncMock(return_value=breweries))

    response = client.get("/api/breweries", params={"lat": "35.4676", "lng": "-97.5164"})

    assert response.status_code == 200
    data = response.json()
    assert data["ranked"] is True
    listed = data["breweries"]
    assert [b["id"] for b in listed] == ["okc", "norman", "tulsa", "unmapped"]
    assert listed[0]["distance_miles"] == 0
    assert listed[-1]["has_location"] is False
    assert listed[-1]["distance_miles"] is None


def test_corrupt_coordinates_listed_last_without_distance(monkeypatch, brewery_factory):
    breweries = [
        brewery_factory("corrupt", 95.0, -97.5, name="Bad Row Brewing"),
        brewery_factory("okc", 35.4676, -97.5164, name="Prairie Artisan Ales"),
    ]
    monkeypatch.setattr(f"{BREWERY_REPO}.list_breweries", AsyncMock(return_value=breweries))

    response = client.get("/api/breweries", params={"lat": "35.4676", "lng": "-97.5164"})

    assert response.status_code == 200
    listed = response.json()["breweries"]
    assert [b["id"] for b in listed] == ["okc", "corrupt"]
    assert listed[1]["has_location"] is False
    assert listed[1]["distance_miles"] is None


def test_events_at_corrupt_brewery_listed_last(monkeypatch, brewery_factory):
    breweries = {
        "corrupt": brewery_factory("corrupt", 95.0, -97.5, name="Bad Row Brewing"),
        "okc": brewery_factory("okc", 35.4676, -97.5164, name="Prairie Artisan Ales"),
    }
    events = [_event("e1", "corrupt", 1), _event("e2", "okc", 2)]
    monkeypatch.setattr(f"{BREWERY_REPO}.list_events", AsyncMock(return_value=events))
    monkeypatch.setattr(f"{BREWERY_REPO}.get_breweries_by_ids", AsyncMock(return_value=breweries))

    response = client.get("/api/events", params={"lat": "35.4676", "lng": "-97.5164"})

    assert response.status_code == 200
    assert [(e["id"], e["distance_miles"]) for e in response.json()] == [("e2", 0), ("e1", None)]


def test_list_breweries_invalid_latitude(monkeypatch, breweries):
    monkeypatch.setattr(f"{BREWERY_REPO}.list_breweries", AsyncMock(return_value=breweries))

    response = client.get("/api/breweries", params={"lat": "north", "lng": "-97.5"})

    assert response.status_code == 400


def test_list_breweries_database_down(monkeypatch):
    monkeypatch.setattr(
        f"{BREWERY_REPO}.list_breweries",
        AsyncMock(side_effect=DatabaseError("connection refused", operation="fetch_all")),
    )

    response = client.get("/api/breweries")

    assert response.status_code == 503


def test_get_brewery_not_found(monkeypatch):
    monkeypatch.setattr(f"{BREWERY_REPO}.get_brewery", AsyncMock(return_value=None))

    response = client.get("/api/breweries/missing")

    assert response.status_code == 404


def test_list_events_with_brewery_summary(monkeypatch, breweries):
    by_id = {b.id: b for b in breweries}
    events = [_event("e1", "tulsa", 1), _event("e2", "okc", 2), _event("e3", "gone", 3)]
    monkeypatch.setattr(f"{BREWERY_REPO}.list_events", AsyncMock(return_value=events))
    monkeypatch.setattr(f"{BREWERY_REPO}.get_breweries_by_ids", AsyncMock(return_value=by_id))

    response = client.get("/api/events", params={"lat": "35.4676", "lng": "-97.5164"})

    assert response.status_code == 200
    data = response.json()
    assert [e["id"] for e in data] == ["e2", "e1", "e3"]
    assert data[0]["brewery"] == {"id": "okc", "name": "Prairie Artisan Ales"}
    assert data[2]["brewery"] is None
    assert data[2]["distance_miles"] is None


def test_get_event(monkeypatch, breweries):
    monkeypatch.setattr(
        f"{BREWERY_REPO}.get_event", AsyncMock(return_value=_event("e1", "okc", 1))
    )
    monkeypatch.setattr(f"{BREWERY_REPO}.get_brewery", AsyncMock(return_value=breweries[2]))

    response = client.get("/api/events/e1")

    assert response.status_code == 200
    assert response.json()["brewery"]["name"] == "Prairie Artisan Ales"


def test_leaderboard_ranks(monkeypatch, user_factory):
    users = [user_factory("ana", checkins=40), user_factory("ben", checkins=12)]
    monkeypatch.setattr(f"{USER_REPO}.get_leaderboard", AsyncMock(return_value=users))

    response = client.get("/api/leaderboard", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert [(e["rank"], e["user_id"], e["checkins"]) for e in data] == [
        (1, "ana", 40),
        (2, "ben", 12),
    ]


def test_leaderboard_rejects_bad_limit():
    response = client.get("/api/leaderboard", params={"limit": 0})

    assert response.status_code == 422


def test_user_badge(monkeypatch, user_factory):
    badges = [
        Badge(id="1", name="Rookie", description="First steps", min_checkins=1,
              max_checkins=9, next_badge_at=10, icon="mug"),
        Badge(id="2", name="Regular", description="Knows the taproom", min_checkins=10,
              icon="barrel"),
    ]
    monkeypatch.setattr(
        f"{USER_REPO}.get_user", AsyncMock(return_value=user_factory("ana", checkins=12))
    )
    monkeypatch.setattr(f"{USER_REPO}.list_badges", AsyncMock(return_value=badges))

    response = client.get("/api/users/ana/badge")

    assert response.status_code == 200
    assert response.json()["name"] == "Regular"


def test_user_check_in_history(monkeypatch, user_factory):
    records = [
        CheckInRecord(
            id="ci-1",
            user_id="ana",
            venue_id="okc",
            timestamp=datetime(2024, 1, 1, 12, tzinfo=UTC),
        )
    ]
    monkeypatch.setattr(f"{USER_REPO}.get_user", AsyncMock(return_value=user_factory("ana")))
    monkeypatch.setattr(
        "app.services.user_service.PostgresCheckInStore.list_user_check_ins",
        AsyncMock(return_value=records),
    )

    response = client.get("/api/users/ana/checkins")

    assert response.status_code == 200
    assert response.json()[0]["brewery_id"] == "okc"


def test_unknown_user(monkeypatch):
    monkeypatch.setattr(f"{USER_REPO}.get_user", AsyncMock(return_value=None))

    assert client.get("/api/users/ghost").status_code == 404
    assert (
        client.put("/api/users/ghost/favorites", json={"brewery_id": "okc"}).status_code == 404
    )


def test_podcast_episodes(monkeypatch):
    episode = PodcastEpisode(
        id="p1",
        episode_number=7,
        title="Barrel Aging 101",
        guest="Chase Healey",
        business="Prairie Artisan Ales",
        duration="54:10",
        release_date=datetime(2024, 3, 1, tzinfo=UTC),
        spotify_url="https://open.spotify.com/episode/p1",
        image="https://example.com/p1.png",
    )
    monkeypatch.setattr(
        "app.services.podcast_service.PodcastRepository.list_episodes",
        AsyncMock(return_value=[episode]),
    )
    monkeypatch.setattr(
        "app.services.podcast_service.PodcastRepository.get_episode", AsyncMock(return_value=None)
    )

    listed = client.get("/api/podcast-episodes")
    missing = client.get("/api/podcast-episodes/p404")

    assert listed.status_code == 200
    assert listed.json()[0]["episode_number"] == 7
    assert missing.status_code == 404


def _weekly(event_id: str, day: str) -> WeeklyEvent:
    return WeeklyEvent(
        id=event_id,
        day=day,
        brewery="Prairie Artisan Ales",
        event="Trivia",
        title=f"{day} Trivia",
        time="19:00",
    )


def test_special_events(monkeypatch):
    special = SpecialEvent(
        id="s1",
        company="Prairie Artisan Ales",
        event="Bomb! Release",
        date="2024-11-02",
        taproom=True,
        rsvp_required=True,
    )
    monkeypatch.setattr(f"{BREWERY_REPO}.list_special_events", AsyncMock(return_value=[special]))
    get_special = AsyncMock(side_effect=lambda event_id: special if event_id == "s1" else None)
    monkeypatch.setattr(f"{BREWERY_REPO}.get_special_event", get_special)

    listed = client.get("/api/special-events")
    found = client.get("/api/special-events/s1")
    missing = client.get("/api/special-events/s404")

    assert listed.status_code == 200
    assert listed.json()[0]["event"] == "Bomb! Release"
    assert found.json()["rsvp_required"] is True
    assert missing.status_code == 404


def test_weekly_events_monday_first(monkeypatch):
    events = [_weekly("w1", "Sunday"), _weekly("w2", "Someday"), _weekly("w3", "Monday")]
    monkeypatch.setattr(f"{BREWERY_REPO}.list_weekly_events", AsyncMock(return_value=events))

    response = client.get("/api/weekly-events")

    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == ["w3", "w1", "w2"]
    assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"


def test_weekly_events_day_is_case_insensitive(monkeypatch):
    list_weekly = AsyncMock(return_value=[_weekly("w5", "Friday")])
    monkeypatch.setattr(f"{BREWERY_REPO}.list_weekly_events", list_weekly)

    response = client.get("/api/weekly-events/friday")

    assert response.status_code == 200
    assert response.json()[0]["day"] == "Friday"
    list_weekly.assert_awaited_once_with("Friday")


def test_weekly_events_unknown_day(monkeypatch):
    list_weekly = AsyncMock(return_value=[])
    monkeypatch.setattr(f"{BREWERY_REPO}.list_weekly_events", list_weekly)

    response = client.get("/api/weekly-events/caturday")

    assert response.status_code == 400
    list_weekly.assert_not_awaited()


def test_update_profile(monkeypatch, user_factory):
    update = AsyncMock(return_value=user_factory("ana", name="Ana Lucia", location="Tulsa, OK"))
    monkeypatch.setattr(f"{USER_REPO}.update_profile", update)

    response = client.put(
        "/api/users/ana", json={"name": "Ana Lucia", "location": "Tulsa, OK", "username": None}
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Ana Lucia"
    update.assert_awaited_once_with("ana", {"name": "Ana Lucia", "location": "Tulsa, OK"})


def test_update_profile_unknown_user(monkeypatch):
    monkeypatch.setattr(f"{USER_REPO}.update_profile", AsyncMock(return_value=None))

    response = client.put("/api/users/ghost", json={"name": "Nobody"})

    assert response.status_code == 404


def test_update_profile_username_taken(monkeypatch):
    def duplicate_username(user_id, updates):
        try:
            raise psycopg.errors.UniqueViolation("duplicate key value violates users_username_key")
        except psycopg.errors.UniqueViolation as e:
            raise DatabaseError(f"Query failed: {e}", operation="fetch_one") from e

    monkeypatch.setattr(
        f"{USER_REPO}.update_profile", AsyncMock(side_effect=duplicate_username)
    )

    response = client.put("/api/users/ana", json={"username": "ben"})

    assert response.status_code == 409
    assert "ben" in response.json()["detail"]


def test_update_profile_rejects_empty_username():
    response = client.put("/api/users/ana", json={"username": ""})

    assert response.status_code == 422

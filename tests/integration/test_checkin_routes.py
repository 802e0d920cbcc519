from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.db.helpers import DatabaseError
from app.main import app
from app.routes.checkins import get_checkin_gate, get_now
from app.services.checkin_service import CheckInGate

AT_BREWERY = {"latitude": 35.4676, "longitude": -97.5164}


@pytest.fixture
def clock(noon):
    """Mutable 'now' for the routes; tests move it forward."""
    return {"now": noon}


@pytest.fixture
def client(store, cooldown, clock):
    app.dependency_overrides[get_checkin_gate] = lambda: CheckInGate(
        store, cooldown=cooldown, radius_miles=0.1
    )
    app.dependency_overrides[get_now] = lambda: clock["now"]
    yield TestClient(app)
    app.dependency_overrides.clear()


def _check_in(client, brewery_id="brewery-1", **overrides):
    body = {"user_id": "user-123", "brewery_id": brewery_id, **AT_BREWERY, **overrides}
    return client.post("/api/checkins", json=body)


def test_check_in_created(client, store):
    response = _check_in(client, notes="Saison on tap")

    assert response.status_code == 201
    data = response.json()
    assert data["user_id"] == "user-123"
    assert data["brewery_id"] == "brewery-1"
    assert data["notes"] == "Saison on tap"
    assert store.users["user-123"].checkins == 1
    assert store.venues["brewery-1"].checkins == 1


def test_second_check_in_hits_cooldown(client, clock, noon):
    assert _check_in(client).status_code == 201

    clock["now"] = noon + timedelta(hours=8)
    response = _check_in(client)

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Check-in cooldown active"
    assert detail["time_remaining"] == 57600
    assert detail["friendly_time_remaining"] == "16h 0m"


def test_check_in_allowed_again_after_window(client, clock, noon, store):
    assert _check_in(client).status_code == 201

    clock["now"] = noon + timedelta(hours=24, seconds=1)

    assert _check_in(client).status_code == 201
    assert store.users["user-123"].checkins == 2


def test_check_in_too_far(client, store):
    response = _check_in(client, latitude=35.4900)

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["distance_miles"] == pytest.approx(1.5, abs=0.1)
    assert detail["radius_miles"] == 0.1
    assert store.check_ins == []


def test_check_in_unknown_brewery(client):
    response = _check_in(client, brewery_id="brewery-404")

    assert response.status_code == 404


def test_check_in_invalid_coordinates(client):
    response = _check_in(client, latitude=123.0)

    assert response.status_code == 400


def test_check_in_database_down(client, store):
    store.fail_with = DatabaseError("connection refused", operation="fetch_one")

    response = _check_in(client)

    assert response.status_code == 503


def test_check_in_loses_race(client, store, noon):
    record_check_in = store.record_check_in

    async def concurrent_winner(user_id, venue_id, timestamp, cooldown_start, notes=None):
        store.seed_check_in(user_id, venue_id, timestamp)
        return await record_check_in(user_id, venue_id, timestamp, cooldown_start, notes)

    store.record_check_in = concurrent_winner

    response = _check_in(client)

    assert response.status_code == 409
    assert response.json()["detail"]["time_remaining"] == 24 * 3600
    assert len(store.check_ins) == 1


def test_can_check_in_preview(client, store, noon):
    store.seed_check_in("user-123", "brewery-1", noon - timedelta(hours=23))

    response = client.get(
        "/api/checkins/can-checkin/user-123/brewery-1",
        params={"lat": "35.4676", "lng": "-97.5164"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["can_check_in"] is False
    assert data["status"] == "cooling_down"
    assert data["time_remaining"] == 3600
    assert data["friendly_time_remaining"] == "1h 0m"
    assert data["distance_miles"] == 0


def test_can_check_in_without_location_checks_cooldown_only(client):
    response = client.get("/api/checkins/can-checkin/user-123/brewery-1")

    assert response.status_code == 200
    data = response.json()
    assert data["can_check_in"] is True
    assert data["status"] == "allowed"
    assert data["distance_miles"] is None


def test_can_check_in_rejects_half_a_location(client):
    response = client.get(
        "/api/checkins/can-checkin/user-123/brewery-1", params={"lat": "35.4676"}
    )

    assert response.status_code == 400


def test_can_check_in_unknown_user(client):
    response = client.get("/api/checkins/can-checkin/ghost/brewery-1")

    assert response.status_code == 404


def test_check_in_at_brewery_with_corrupt_coordinates(client, store, brewery_factory):
    store.add_venue(brewery_factory("brewery-corrupt", 95.0, -97.5))

    response = _check_in(client, brewery_id="brewery-corrupt")

    assert response.status_code == 403
    assert response.json()["detail"]["distance_miles"] is None
    assert store.check_ins == []


def test_user_deleted_during_check_in(client, store):
    record_check_in = store.record_check_in

    async def delete_then_record(user_id, venue_id, *args):
        del store.users[user_id]
        return await record_check_in(user_id, venue_id, *args)

    store.record_check_in = delete_then_record

    response = _check_in(client)

    assert response.status_code == 404
    assert store.check_ins == []

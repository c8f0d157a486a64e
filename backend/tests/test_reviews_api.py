"""Integration-ish tests for /reviews endpoints (in-memory collaborators, fixed clock)."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from recall.main import app
from recall.repositories import InMemoryStateStore, PersistenceError
from recall.routers import reviews as reviews_router
from recall.services import get_item_locks, get_session_store

USER = {"X-User-Id": "test-user"}
T0 = datetime(2025, 12, 13, 9, 0, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RejectingStore(InMemoryStateStore):
    async def save(self, item_id, state):
        if item_id in self._records:
            raise PersistenceError("store offline")
        await super().save(item_id, state)


@pytest.fixture
def clock(monkeypatch):
    clock = Clock(T0)
    monkeypatch.setattr(reviews_router, "utc_now", clock)
    return clock


@pytest.fixture
def client():
    return TestClient(app)


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_enroll_item_is_due_now(client, clock):
    resp = client.post("/reviews/items/hola", headers=USER)
    assert resp.status_code == 201
    data = resp.json()
    assert data["itemId"] == "hola"
    assert data["easeFactor"] == 2.5
    assert data["intervalDays"] == 0
    assert data["repetitionCount"] == 0
    assert data["lapseCount"] == 0
    assert data["lastReviewedAt"] is None
    assert data["nextDueAt"] == "2025-12-13T09:00:00Z"
    assert data["state"] == 0
    assert data["stateName"] == "new"

    resp = client.get("/reviews/due", headers=USER)
    assert resp.json() == {"itemIds": ["hola"], "count": 1, "nextDueAt": None}



def test_enroll_existing_item_returns_200_unchanged(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    client.post("/reviews/items/hola/grade", json={"action": "good"}, headers=USER)

    clock.advance(days=3)
    resp = client.post("/reviews/items/hola", headers=USER)
    assert resp.status_code == 200
    data = resp.json()
    assert data["repetitionCount"] == 1
    assert data["nextDueAt"] == "2025-12-14T09:00:00Z"


def test_get_unknown_item_returns_404(client, clock):
    resp = client.get("/reviews/items/missing", headers=USER)
    assert resp.status_code == 404


def test_missing_user_header_returns_422(client, clock):
    resp = client.get("/reviews/due")
    assert resp.status_code == 422


def test_grade_flow(client, clock):
    client.post("/reviews/items/hola", headers=USER)

    resp = client.post("/reviews/items/hola/grade", json={"action": "good"}, headers=USER)
    assert resp.status_code == 200
    data = resp.json()
    assert data["repetitionCount"] == 1
    assert data["intervalDays"] == 1
    assert data["lastReviewedAt"] == "2025-12-13T09:00:00Z"
    assert data["nextDueAt"] == "2025-12-14T09:00:00Z"
    assert data["stateName"] == "learning"

    resp = client.get("/reviews/due", headers=USER)
    assert resp.json() == {"itemIds": [], "count": 0, "nextDueAt": "2025-12-14T09:00:00Z"}

    clock.advance(days=1)
    resp = client.post("/reviews/items/hola/grade", json={"action": "good"}, headers=USER)
    data = resp.json()
    assert data["repetitionCount"] == 2
    assert data["intervalDays"] == 6

    resp = client.get("/reviews/items/hola", headers=USER)
    assert resp.json()["intervalDays"] == 6


def test_grade_again_lapses_item(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.post("/reviews/items/hola/grade", json={"action": "again"}, headers=USER)
    data = resp.json()
    assert data["stateName"] == "lapsed"
    assert data["lapseCount"] == 1
    assert data["easeFactor"] == pytest.approx(2.3)


def test_grade_with_explicit_review_time(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.post(
        "/reviews/items/hola/grade",
        json={"action": "easy", "reviewedAt": "2025-12-13T12:00:00Z"},
        headers=USER,
    )
    assert resp.json()["nextDueAt"] == "2025-12-14T12:00:00Z"


def test_grade_invalid_review_time_returns_422(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.post(
        "/reviews/items/hola/grade",
        json={"action": "good", "reviewedAt": "not-a-time"},
        headers=USER,
    )
    assert resp.status_code == 422


def test_grade_invalid_action_returns_422(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.post("/reviews/items/hola/grade", json={"action": "perfect"}, headers=USER)
    assert resp.status_code == 422


def test_grade_unknown_item_returns_404(client, clock):
    resp = client.post("/reviews/items/missing/grade", json={"action": "good"}, headers=USER)
    assert resp.status_code == 404


def test_grade_not_saved_returns_503(monkeypatch, client, clock):
    store = RejectingStore()
    monkeypatch.setattr(reviews_router, "get_state_store", lambda user_id: store)

    client.post("/reviews/items/hola", headers=USER)
    resp = client.post("/reviews/items/hola/grade", json={"action": "good"}, headers=USER)

    assert resp.status_code == 503
    assert resp.json()["detail"] == "Review not saved, please try again"
    assert store.records()["hola"]["repetitionCount"] == 0


def test_preview(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.get("/reviews/items/hola/preview", headers=USER)
    assert resp.status_code == 200
    assert resp.json() == {
        "itemId": "hola",
        "intervals": {"again": 0, "hard": 1, "good": 1, "easy": 1},
    }


def test_delete_item(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.delete("/reviews/items/hola", headers=USER)
    assert resp.status_code == 204
    assert client.get("/reviews/items/hola", headers=USER).status_code == 404
    assert client.delete("/reviews/items/hola", headers=USER).status_code == 404


def test_items_are_scoped_per_user(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    resp = client.get("/reviews/items/hola", headers={"X-User-Id": "someone-else"})
    assert resp.status_code == 404


def test_session_and_stats(client, clock):
    for item_id in ["uno", "dos", "tres"]:
        client.post(f"/reviews/items/{item_id}", headers=USER)

    resp = client.post("/reviews/session", json={"limit": 2}, headers=USER)
    assert resp.status_code == 200
    assert resp.json() == {"queue": ["dos", "tres"], "count": 2, "nextItemId": "dos"}

    client.post("/reviews/items/dos/grade", json={"action": "again"}, headers=USER)
    client.post("/reviews/items/tres/grade", json={"action": "easy"}, headers=USER)

    resp = client.get("/reviews/session/stats", headers=USER)
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalReviewed"] == 2
    assert data["againCount"] == 1
    assert data["gradeDistribution"] == {"again": 1, "easy": 1}
    assert data["averageGrade"] == pytest.approx(1.5)
    assert data["remaining"] == 0
    assert data["nextItemId"] is None


def test_stats_without_session_returns_404(client, clock):
    resp = client.get("/reviews/session/stats", headers=USER)
    assert resp.status_code == 404


def test_learning_day_counters(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    client.post("/reviews/items/hola/grade", json={"action": "again"}, headers=USER)
    client.post("/reviews/items/hola/grade", json={"action": "good"}, headers=USER)

    resp = client.get("/reviews/days/2025-12-13", headers=USER)
    assert resp.json() == {"date": "2025-12-13", "reviewed": 2, "learned": 0, "lapsed": 1}

    resp = client.get("/reviews/days/2025-12-14", headers=USER)
    assert resp.json()["reviewed"] == 0


def test_restarted_session_shares_item_locks(client, clock):
    client.post("/reviews/items/hola", headers=USER)
    first = get_session_store().get("test-user")
    client.post("/reviews/session", json={}, headers=USER)
    second = get_session_store().get("test-user")

    assert first is not second
    assert first._locks is second._locks is get_item_locks("test-user")

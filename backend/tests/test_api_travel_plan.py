from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from schemas.travel import TimeOfDay, TourContext, TourSettings
from api.routes import travel_plan
from api.server import app
from modules.planning.plan_store import InMemoryTravelPlanStore

BASE = "/v1/tours"

GENERATE_BODY = {
    "home_base": {"name": "Madrid HQ", "address": "Calle Mayor 1", "latitude": 40.0, "longitude": -3.0},
    "tour_dates": [
        {"id": "d3", "date": "2025-03-06", "location": {"name": "Porto", "latitude": 45.0, "longitude": -8.0}},
        {"id": "d1", "date": "2025-03-01", "location": {"name": "Segovia", "latitude": 40.5, "longitude": -3.5}},
        {"id": "d2", "date": "2025-03-02", "location": {"name": "Valladolid", "latitude": 41.0, "longitude": -4.0}},
    ],
    "default_departure_time": "08:30",
    "default_return_time": "19:00",
    "can_edit": True,
}


@pytest.fixture
def plan_store() -> InMemoryTravelPlanStore:
    store = InMemoryTravelPlanStore()
    travel_plan.reset_state(store)
    yield store
    travel_plan.reset_state()


@pytest.fixture
def client(plan_store) -> TestClient:
    return TestClient(app)


def test_health(client):
    body = client.get("/v1/health").json()
    assert body["status"] == "ok"
    assert body["plan_store"] == "in_memory"


def test_generate(client):
    resp = client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)
    assert resp.status_code == 200

    body = resp.json()
    assert body["state"] == "generated"
    assert body["is_dirty"] is True
    assert [s["id"] for s in body["segments"]] == [
        "home-to-d1", "d1-to-d2", "d2-to-home", "home-to-d3", "d3-to-home",
    ]
    assert body["segments"][0]["departure_time"] == "08:30"
    assert body["segments"][2]["gap_days"] == 4
    assert body["summary"]["segment_count"] == 5
    assert body["warnings"] == []


def test_generate_reports_unlocated_dates(client):
    body = dict(GENERATE_BODY, tour_dates=GENERATE_BODY["tour_dates"] + [
        {"id": "d4", "date": "2025-03-07"},
    ])
    warnings = client.post(f"{BASE}/t1/travel-plan/generate", json=body).json()["warnings"]
    assert warnings == [{
        "date_id": "d4",
        "date": "2025-03-07",
        "reason": "missing_location",
        "detail": warnings[0]["detail"],
    }]


def test_generate_without_home_base_is_unprocessable(client):
    body = {k: v for k, v in GENERATE_BODY.items() if k != "home_base"}
    resp = client.post(f"{BASE}/t1/travel-plan/generate", json=body)
    assert resp.status_code == 422
    assert "home base" in resp.json()["detail"]


def test_generate_with_bad_time_is_unprocessable(client):
    body = dict(GENERATE_BODY, default_departure_time="nine")
    assert client.post(f"{BASE}/t1/travel-plan/generate", json=body).status_code == 422


def test_get_unknown_session_is_404(client):
    assert client.get(f"{BASE}/nope/travel-plan").status_code == 404


def test_patch_segment(client):
    client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)

    resp = client.patch(
        f"{BASE}/t1/travel-plan/segments/d1-to-d2",
        json={"field": "transport_type", "value": "train"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["updated"] is True
    assert body["segment"]["transport_type"] == "train"

    state = client.get(f"{BASE}/t1/travel-plan").json()["state"]
    assert state == "user_edited"


def test_patch_unknown_segment_is_a_no_op(client):
    client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)
    body = client.patch(
        f"{BASE}/t1/travel-plan/segments/ghost-to-home",
        json={"field": "notes", "value": "x"},
    ).json()
    assert body["updated"] is False
    assert body["segment"] is None


def test_patch_bad_value_is_unprocessable(client):
    client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)
    resp = client.patch(
        f"{BASE}/t1/travel-plan/segments/home-to-d1",
        json={"field": "departure_time", "value": "25:99"},
    )
    assert resp.status_code == 422


def test_read_only_session_cannot_edit_or_save(client):
    client.post(f"{BASE}/t1/travel-plan/generate", json=dict(GENERATE_BODY, can_edit=False))

    resp = client.patch(
        f"{BASE}/t1/travel-plan/segments/home-to-d1",
        json={"field": "notes", "value": "x"},
    )
    assert resp.status_code == 403
    assert client.post(f"{BASE}/t1/travel-plan/save").status_code == 403


def test_save_persists_plan(client, plan_store):
    client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)
    client.patch(
        f"{BASE}/t1/travel-plan/segments/home-to-d1",
        json={"field": "notes", "value": "pick up backline"},
    )

    resp = client.post(f"{BASE}/t1/travel-plan/save")
    assert resp.status_code == 200
    assert resp.json() == {"saved": True, "segment_count": 5}

    saved = plan_store.load_travel_plan("t1")
    assert saved[0].notes == "pick up backline"
    assert client.get(f"{BASE}/t1/travel-plan").json()["is_dirty"] is False


def test_open_unknown_tour_is_404(client):
    assert client.post(f"{BASE}/nope/travel-plan/open", json={}).status_code == 404


def test_open_registered_tour(client, plan_store, home_base, scenario_dates):
    plan_store.register_tour(TourContext(
        tour_id="t2",
        settings=TourSettings(home_base=home_base, default_departure_time=TimeOfDay(7, 0)),
        dates=scenario_dates,
    ))

    body = client.post(f"{BASE}/t2/travel-plan/open", json={"can_edit": True}).json()
    assert body["state"] == "generated"
    assert body["can_edit"] is True
    assert body["segments"][0]["departure_time"] == "07:00"
    assert body["segments"][0]["departure_date"] == date(2025, 3, 1).isoformat()

    client.post(f"{BASE}/t2/travel-plan/save")
    reopened = client.post(f"{BASE}/t2/travel-plan/open", json={}).json()
    assert reopened["state"] == "loaded"
    assert reopened["can_edit"] is False


def test_patch_unknown_segment_with_unknown_field_is_a_no_op(client):
    client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)
    resp = client.patch(
        f"{BASE}/t1/travel-plan/segments/ghost-to-home",
        json={"field": "departure_place", "value": "x"},
    )
    assert resp.status_code == 200
    assert resp.json()["updated"] is False


def test_session_reports_save_lock(client):
    body = client.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY).json()
    assert body["save_locked"] is False


def test_shutdown_drops_sessions(plan_store):
    with TestClient(app) as c:
        c.post(f"{BASE}/t1/travel-plan/generate", json=GENERATE_BODY)
        assert c.get(f"{BASE}/t1/travel-plan").status_code == 200
    assert travel_plan._sessions == {}

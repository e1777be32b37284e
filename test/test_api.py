import pytest
from fastapi.testclient import TestClient

from pawtrail.config import settings
from pawtrail.errors import InsufficientCandidatesError
from pawtrail.main import app, get_planner
from pawtrail.services.route_service import PlannerDependencies, RoutePlanner

from fakes import FakeMapService, FakeWeatherService, pet, plan_payload

PLAN_URL = "/api/v1/routes/plan"


class FailingPlanner:
    async def plan(self, request):
        raise InsufficientCandidatesError("No route candidates could be produced")


@pytest.fixture
def client():
    maps = FakeMapService(geocodes={"home": (40.0, -74.0)})
    planner = RoutePlanner(
        PlannerDependencies(map_service=maps, weather_service=FakeWeatherService()),
        deadline_s=5,
        timeout_s=1,
    )
    app.dependency_overrides[get_planner] = lambda: planner
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_plan_returns_camel_case_routes(client):
    response = client.post(PLAN_URL, json=plan_payload())

    assert response.status_code == 200
    body = response.json()
    assert 1 <= len(body["routes"]) <= 3
    route = body["routes"][0]
    for key in (
        "id",
        "routeType",
        "title",
        "polyline",
        "distanceMeters",
        "durationSec",
        "waypoints",
        "parksRatio",
        "score",
        "reasons",
        "advisories",
        "thumbnails",
    ):
        assert key in route
    assert body["weather"]["tempC"] == 18
    assert "medium energy" in body["context"]["petConstraints"]


def test_plan_accepts_place_reference_start(client):
    response = client.post(PLAN_URL, json=plan_payload(start={"placeId": "home"}))
    assert response.status_code == 200


@pytest.mark.parametrize(
    "overrides",
    [
        {"pets": []},
        {"target": {}},
        {"target": {"durationMin": 2}},
        {"target": {"distanceM": 50000}},
        {"endPolicy": "point"},
        {"endPolicy": "circle"},
        {"time": {"startISO": "tomorrow morning"}},
        {"pets": [pet(weightKg=0)]},
        {"pets": [pet(energy="extreme")]},
        {"start": {"lat": 123, "lng": 0}},
    ],
)
def test_invalid_requests_are_rejected(client, overrides):
    response = client.post(PLAN_URL, json=plan_payload(**overrides))

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["errorType"] == "ValidationError"
    assert body["error"]
    assert body["timestamp"]


def test_unknown_place_maps_to_not_found(client):
    response = client.post(PLAN_URL, json=plan_payload(start={"placeId": "atlantis"}))

    assert response.status_code == 404
    assert response.json()["errorType"] == "ResolutionError"


def test_planning_errors_use_their_status_code():
    app.dependency_overrides[get_planner] = lambda: FailingPlanner()
    try:
        response = TestClient(app).post(PLAN_URL, json=plan_payload())
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["errorType"] == "InsufficientCandidatesError"


def test_planner_is_built_at_startup(monkeypatch):
    monkeypatch.setattr(settings, "google_maps_api_key", "test-key")
    monkeypatch.setattr(settings, "openweather_api_key", "")
    monkeypatch.setattr(settings, "openai_api_key", "")
    try:
        with TestClient(app):
            assert isinstance(app.state.planner, RoutePlanner)
            assert app.state.planner_error is None
    finally:
        app.state.planner = None


def test_missing_map_key_returns_structured_error(monkeypatch):
    monkeypatch.setattr(settings, "google_maps_api_key", "")
    try:
        with TestClient(app) as client:
            response = client.post(PLAN_URL, json=plan_payload())
    finally:
        app.state.planner = None
        app.state.planner_error = None

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["errorType"] == "ConfigurationError"
    assert "Google Maps API Key" in body["error"]

"""
Tests for the analytics HTTP endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from trainload.api.analytics import get_training_load_calculator
from trainload.main import app
from trainload.services.analytics.calculator import ReportCache, TrainingLoadCalculator
from trainload.services.analytics.store import TransientStoreError
from trainload.services.analytics.windows import utc_now

from conftest import USER_ID


@pytest.fixture
def client_for(fake_store):
    """Build a TestClient whose calculator reads the given sets."""
    def _client(sets, error=None):
        store = fake_store(sets, error=error)
        app.dependency_overrides[get_training_load_calculator] = (
            lambda: TrainingLoadCalculator(store, cache=ReportCache(0))
        )
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


@pytest.fixture
def recent_sets(make_set):
    now = utc_now()
    return [
        make_set("Bench Press", seconds=-i * 120, weight=80, reps=8, rpe=8, now=now)
        for i in range(4)
    ]


class TestEndpoints:

    def test_health(self):
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_fatigue(self, client_for, recent_sets):
        response = client_for(recent_sets).get(f"/api/analytics/{USER_ID}/fatigue?days=14")

        assert response.status_code == 200
        body = response.json()
        assert body["totalSets"] == 4
        assert body["recentAvg"] == 8.0
        assert body["dataStatus"] == "ok"

    def test_volume(self, client_for, recent_sets):
        response = client_for(recent_sets).get(
            f"/api/analytics/{USER_ID}/volume", params={"windows": 3, "kind": "day", "muscle": "chest"}
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["windows"]) == 3
        assert body["trend"]["muscle"] == "chest"

    def test_rest(self, client_for, recent_sets):
        response = client_for(recent_sets).get(f"/api/analytics/{USER_ID}/rest")

        assert response.status_code == 200
        assert response.json()["totalSamples"] == 3

    def test_summary(self, client_for, recent_sets):
        response = client_for(recent_sets).get(f"/api/analytics/{USER_ID}/summary")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"fatigue", "volume", "heatmap", "rest", "text"}
        assert body["text"].startswith("### Training load")


class TestErrors:

    def test_invalid_days(self, client_for):
        response = client_for([]).get(f"/api/analytics/{USER_ID}/fatigue?days=0")
        assert response.status_code == 422

    def test_invalid_window_kind(self, client_for):
        response = client_for([]).get(f"/api/analytics/{USER_ID}/volume?kind=month")
        assert response.status_code == 422

    def test_unknown_muscle(self, client_for):
        response = client_for([]).get(f"/api/analytics/{USER_ID}/volume?muscle=wings")
        assert response.status_code == 422

    def test_store_unavailable(self, client_for):
        client = client_for([], error=TransientStoreError("timeout", "fake"))
        response = client.get(f"/api/analytics/{USER_ID}/summary")

        assert response.status_code == 503

from __future__ import annotations

from fastapi.testclient import TestClient

from app.api.dependencies import learner_repo
from tests.conftest import make_course, make_snapshot


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["checks"]["learner_store"] == "in_memory"


def test_health_reports_dashboard_counts(client: TestClient, token: str) -> None:
    learner_repo.put(make_snapshot(own=(make_course(),)))
    before = client.get("/health").json()["dashboards"]

    client.get("/v1/analytics/overview", headers={"Authorization": f"Bearer {token}"})

    after = client.get("/health").json()["dashboards"]
    assert after["served"] == before["served"] + 1
    assert after["failed"] == before["failed"]


def test_health_needs_no_auth(client: TestClient) -> None:
    assert client.get("/health").status_code == 200


def test_ready_returns_200(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200

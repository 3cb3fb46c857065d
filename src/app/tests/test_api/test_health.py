from datetime import datetime

from fastapi.testclient import TestClient


def test_health_reports_ok(client: TestClient):
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["uptime"] >= 0
    assert datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00")).tzinfo is not None


def test_health_does_not_need_the_database(app):
    # no lifespan: the database is never initialized
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200

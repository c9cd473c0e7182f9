"""Test health check and router wiring."""

from fastapi.testclient import TestClient

from fulqrun.main import app

client = TestClient(app)


def test_health_check():
    """Test that /health returns 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_qualification_routes_mounted_under_v1():
    paths = {route.path for route in app.routes}

    assert "/v1/qualification/score" in paths
    assert "/v1/opportunities/{opportunity_id}/stage-transition" in paths
    assert "/v1/admin/qualification-config" in paths
    assert "/v1/admin/qualification-config/recalculate" in paths

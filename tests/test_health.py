"""Health check tests."""

from tests.utils import PREFIX


def test_health_endpoint(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["db"] == "connected"
    assert "redis" in data
    # Redis is not reachable in tests
    assert data["status"] == "degraded"


def test_healthz(client):
    response = client.get(f"{PREFIX}/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_options_preflight_on_any_path(client):
    response = client.options(f"{PREFIX}/device-heartbeat")
    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "x-device-signature" in response.headers["access-control-allow-headers"]

    response = client.options("/does/not/exist")
    assert response.status_code == 200


def test_non_post_method_rejected(client):
    response = client.get(f"{PREFIX}/device-heartbeat")
    assert response.status_code == 405
    assert "error" in response.json()

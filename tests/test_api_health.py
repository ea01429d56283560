"""Tests for the liveness endpoints and the server entry point."""

from unittest.mock import patch

from gua import __main__ as entry
from gua.core.config import settings


def test_health_returns_ok(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "app" in data


def test_root_says_running(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text.endswith("is running!")


def test_module_entry_point_serves_app_on_configured_address():
    with patch.object(settings, "host", "127.0.0.1"), patch.object(settings, "port", 4010), \
            patch("gua.__main__.uvicorn.run") as run:
        entry.main()

    run.assert_called_once_with("gua.main:app", host="127.0.0.1", port=4010, reload=settings.debug)

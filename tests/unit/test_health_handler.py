"""Tests for the liveness and readiness endpoints."""

import logging

import pytest
from fastapi.testclient import TestClient

from plantnamer import __version__
from plantnamer.config import OpenAISettings, Settings
from plantnamer.main import create_app


@pytest.fixture
def settings_with_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return Settings(openai=OpenAISettings(api_key="sk-test-key"))


@pytest.fixture
def settings_without_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return Settings(openai=OpenAISettings(api_key=""))


class TestLiveness:
    """Tests for /health/live."""

    def test_alive_without_api_key(self, settings_without_api_key):
        client = TestClient(create_app(settings_without_api_key))

        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}


class TestReadiness:
    """Tests for /health/ready."""

    def test_ready_when_configured(self, settings_with_api_key):
        client = TestClient(create_app(settings_with_api_key))

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "version": __version__,
            "checks": {"api_key": True, "rate_limiter": True},
        }

    def test_missing_api_key_is_503(self, settings_without_api_key, caplog):
        caplog.set_level(logging.WARNING, logger="plantnamer.api.handlers.health")
        client = TestClient(create_app(settings_without_api_key))

        response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["checks"] == {"api_key": False, "rate_limiter": True}
        record = [r for r in caplog.records if r.getMessage() == "Not ready"][0]
        assert record.failing_checks == ["api_key"]

    def test_missing_rate_limiter_is_503(self, settings_with_api_key):
        app = create_app(settings_with_api_key)
        del app.state.rate_limiter
        client = TestClient(app)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"] == {"api_key": True, "rate_limiter": False}

    def test_does_not_call_the_model(self, settings_with_api_key, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("readiness must not build a model client")

        monkeypatch.setattr("plantnamer.api.deps.get_model_agent", fail)
        client = TestClient(create_app(settings_with_api_key))

        assert client.get("/health/ready").status_code == 200


class TestHealthIsNotRateLimited:
    """Health endpoints share no bucket with /api/name."""

    @pytest.mark.parametrize("path", ["/health/live", "/health/ready"])
    def test_repeated_requests(self, settings_with_api_key, path):
        client = TestClient(create_app(settings_with_api_key))

        statuses = [client.get(path).status_code for _ in range(3)]

        assert statuses == [200, 200, 200]

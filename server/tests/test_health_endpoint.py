"""Test health endpoint connectivity"""

import redis

from beta_signup.config import config
from beta_signup.main import app
from beta_signup.services.providers import get_redis


class UnreachableRedis:
    def ping(self):
        raise redis.ConnectionError("Connection refused")


class TestHealthEndpoint:
    """Test health endpoints are accessible"""

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "beta-signup"

    def test_detailed_health_reports_checks(self, client, monkeypatch):
        for key in ("airtable_api_key", "airtable_base_id", "mailgun_api_key"):
            monkeypatch.setitem(config, key, "configured")
        monkeypatch.setitem(config, "mailgun_domain", "mg.example.com")
        monkeypatch.setitem(config, "sender_email", "noreply@example.com")
        monkeypatch.setitem(config, "support_email", "support@example.com")
        monkeypatch.setitem(config, "recaptcha_secret_key", None)

        response = client.get("/health/detailed")

        assert response.status_code == 200
        checks = response.json()["checks"]
        assert checks["redis"] == "healthy"
        assert checks["configuration"] == "healthy"
        assert checks["bot_verification"] == "disabled"

    def test_detailed_health_unhealthy_without_settings(self, client, monkeypatch):
        monkeypatch.setitem(config, "airtable_api_key", None)

        response = client.get("/health/detailed")

        assert response.status_code == 503
        assert "airtable_api_key" in response.json()["detail"]["checks"]["configuration"]

    def test_redis_outage_only_degrades(self, client, monkeypatch):
        for key in (
            "airtable_api_key",
            "airtable_base_id",
            "mailgun_api_key",
            "mailgun_domain",
            "sender_email",
            "support_email",
        ):
            monkeypatch.setitem(config, key, "configured")
        app.dependency_overrides[get_redis] = lambda: UnreachableRedis()

        response = client.get("/health/detailed")

        assert response.status_code == 200
        assert response.json()["checks"]["redis"].startswith("degraded")

    def test_missing_support_address_is_unhealthy(self, client, monkeypatch):
        for key in (
            "airtable_api_key",
            "airtable_base_id",
            "mailgun_api_key",
            "mailgun_domain",
            "sender_email",
        ):
            monkeypatch.setitem(config, key, "configured")
        monkeypatch.setitem(config, "support_email", None)

        response = client.get("/health/detailed")

        assert response.status_code == 503
        configuration = response.json()["detail"]["checks"]["configuration"]
        assert configuration == "missing: support_email"

"""
Cross-cutting behaviour: locales, rate limiting, security headers and health
"""

import pytest
import redis

from premier_realty import rate_limiter
from premier_realty.i18n import negotiate_locale, normalize_locale, split_locale_prefix
from premier_realty.main import app
from tests.test_contact import MESSAGE
from tests.test_reservations import booking


class FakeRedis:
    def __init__(self):
        self.values = {}
        self.ttls = {}

    def get(self, key):
        return self.values.get(key)

    def ttl(self, key):
        return self.ttls.get(key, -2)

    def set(self, key, value, ex=None):
        self.values[key] = str(value)
        self.ttls[key] = ex


class BrokenRedis(FakeRedis):
    def get(self, key):
        raise redis.ConnectionError("down")

    def set(self, key, value, ex=None):
        raise redis.ConnectionError("down")


@pytest.fixture
def fresh_counters(monkeypatch):
    monkeypatch.setattr(rate_limiter, "memory_cache", {})
    monkeypatch.setattr(rate_limiter, "last_cleanup_time", 0)


class TestLocales:
    def test_normalize(self):
        assert normalize_locale("pt-BR") == "pt"
        assert normalize_locale("TR") == "tr"
        assert normalize_locale("zh_CN") == "zh"
        assert normalize_locale("nl") is None
        assert normalize_locale(None) is None

    def test_negotiate(self):
        assert negotiate_locale(None) == "en"
        assert negotiate_locale("de-DE,de;q=0.9,en;q=0.8") == "de"
        assert negotiate_locale("nl;q=1.0, fr;q=0.5, tr;q=0.7") == "tr"
        assert negotiate_locale("nl, sv") == "en"

    def test_split_prefix(self):
        assert split_locale_prefix("/tr/blog/guide") == ("tr", "/blog/guide")
        assert split_locale_prefix("/ja") == ("ja", "/")
        assert split_locale_prefix("/blog/tr") == (None, "/blog/tr")
        assert split_locale_prefix("/properties") == (None, "/properties")

    def test_locales_endpoint(self, client):
        data = client.get("/locales").json()
        assert data["default"] == "en"
        assert len(data["locales"]) == 12
        assert {"code": "tr", "name": "Türkçe", "flag": "🇹🇷"} in data["locales"]

    def test_content_language(self, client):
        assert client.get("/health").headers["content-language"] == "en"
        assert client.get("/health", headers={"Accept-Language": "fr-CA"}).headers["content-language"] == "fr"
        assert client.get("/es/blog").headers["content-language"] == "es"
        assert client.get("/es/blog").status_code == 200


class TestRateLimiting:
    def test_counts_within_window(self, fresh_counters):
        store = FakeRedis()
        results = [rate_limiter.check_rate_limit("contact:1.2.3.4", 2, 3600, store)[0] for _ in range(3)]
        assert results == [True, True, False]

    def test_resumes_window_from_redis(self, fresh_counters):
        store = FakeRedis()
        store.values["booking:1.2.3.4"] = "5"
        store.ttls["booking:1.2.3.4"] = 1200

        allowed, count, ttl = rate_limiter.check_rate_limit("booking:1.2.3.4", 5, 3600, store)

        assert allowed is False
        assert count == 5
        assert 1190 <= ttl <= 1200

    def test_works_when_redis_errors(self, fresh_counters):
        allowed, count, _ = rate_limiter.check_rate_limit("contact:x", 5, 3600, BrokenRedis())
        assert allowed is True
        assert count == 1

    def test_endpoint_returns_429(self, client, fresh_counters, monkeypatch):
        monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: FakeRedis())
        app.dependency_overrides.pop(rate_limiter.contact_rate_limiter)

        statuses = [client.post("/contact", json=MESSAGE).status_code for _ in range(6)]

        assert statuses == [200] * 5 + [429]
        response = client.post("/contact", json=MESSAGE)
        assert int(response.headers["retry-after"]) > 0

    def test_fails_closed_without_redis(self, client, fresh_counters, monkeypatch):
        def unavailable():
            raise redis.ConnectionError("down")

        monkeypatch.setattr(rate_limiter, "get_redis_client", unavailable)
        app.dependency_overrides.pop(rate_limiter.contact_rate_limiter)

        assert client.post("/contact", json=MESSAGE).status_code == 503

    def test_booking_stays_open_without_redis(self, client, fresh_counters, queue_down, monkeypatch):
        def unavailable():
            raise redis.ConnectionError("down")

        monkeypatch.setattr(rate_limiter, "get_redis_client", unavailable)
        app.dependency_overrides.pop(rate_limiter.booking_rate_limiter)

        response = client.post("/reservations", json=booking())

        assert response.status_code == 201
        assert queue_down == [("process_new_reservation_task", (1,))]


class TestSecurityHeaders:
    def test_api_responses(self, client):
        response = client.get("/blog")

        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert response.headers["x-content-type-options"] == "nosniff"
        assert "content-security-policy" in response.headers
        assert response.headers["cache-control"] == "no-store, no-cache, must-revalidate"

    def test_health_excluded(self, client):
        response = client.get("/health")
        assert response.json() == {"status": "healthy"}
        assert "x-frame-options" not in response.headers


def test_validation_errors_are_json(client):
    response = client.post("/reservations", json={"name": "Jane"})
    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)

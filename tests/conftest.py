"""
Test configuration and shared fixtures for the Premier Realty API tests.

This file contains:
- Environment configuration applied before the application is imported
- Database, client and admin-token fixtures
- Fakes for the email, queue, storage and Google Calendar seams
"""

import json
import os
from datetime import datetime, timedelta, timezone

# Configuration is read at import time, so it has to be in place first
TEST_ENV = {
    "DATABASE_URL": "sqlite://",
    "SECRET_KEY": "test-secret-key",
    "SUPABASE_JWT_SECRET": "test-platform-jwt-secret",
    "CRON_SECRET": "test-cron-secret",
    "ADMIN_EMAIL": "office@premier-realty.test",
    "RESEND_API_KEY": "re_test_key",
    "GOOGLE_CLIENT_ID": "test-client-id.apps.googleusercontent.com",
    "GOOGLE_CLIENT_SECRET": "test-client-secret",
    "GOOGLE_REDIRECT_URI": "http://testserver/google-calendar/callback",
    "STORAGE_ENDPOINT_URL": "http://storage.test/s3",
    "STORAGE_PUBLIC_URL": "http://storage.test/public/images",
    "SECURITY_HEADERS_ENABLED": "true",
    "DB_LOG_SLOW_QUERIES": "false",
}
for _key, _value in TEST_ENV.items():
    os.environ[_key] = _value
os.environ.pop("GOOGLE_REFRESH_TOKEN", None)
os.environ.pop("TOKEN_ENCRYPTION_KEY", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from premier_realty import email_service, jobs  # noqa: E402
from premier_realty.database import Base, SessionLocal, engine  # noqa: E402
from premier_realty.main import app  # noqa: E402
from premier_realty.models import AdminUser  # noqa: E402
from premier_realty.rate_limiter import booking_rate_limiter, contact_rate_limiter  # noqa: E402
from premier_realty.services import google_calendar_service  # noqa: E402

ADMIN_ADDRESS = "agent@premier-realty.test"


def make_platform_token(email, audience="authenticated", secret=None, expires_in=3600):
    """Access token shaped like the ones the hosted auth platform issues"""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "00000000-0000-0000-0000-000000000001",
        "aud": audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, secret or TEST_ENV["SUPABASE_JWT_SECRET"], algorithm="HS256")


@pytest.fixture
def db_session():
    """Fresh schema for each test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sent_emails(monkeypatch):
    """Record every outgoing email instead of calling Resend."""
    sent = []

    def recorder(name):
        async def send(*args, **kwargs):
            sent.append({"type": name, "args": args, **kwargs})
            return {"id": f"email-{len(sent)}"}

        return send

    for name in (
        "send_new_reservation_notification",
        "send_reservation_received",
        "send_reservation_confirmation",
        "send_reservation_rejection",
        "send_contact_message",
        "send_daily_digest",
    ):
        monkeypatch.setattr(email_service, name, recorder(name))
    return sent


@pytest.fixture
def queue_down(monkeypatch):
    """Redis is unreachable, so jobs run as in-process background tasks."""
    queued = []

    async def enqueue_job(task_name, *args):
        queued.append((task_name, args))
        return None

    monkeypatch.setattr(jobs, "enqueue_job", enqueue_job)
    return queued


class FakeGoogle:
    """Stand-in for the Google OAuth and Calendar endpoints."""

    def __init__(self):
        self.requests = []
        self.token_response = (200, {"access_token": "ya29.test-access", "expires_in": 3600})
        self.exchange_response = (
            200,
            {"access_token": "ya29.test-access", "refresh_token": "1//test-refresh", "expires_in": 3599},
        )
        self.reject_conference = False
        self.delete_status = 204
        self.event_counter = 0
        self.events = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url.startswith(google_calendar_service.GOOGLE_TOKEN_URL):
            body = dict(httpx.QueryParams(request.content.decode()))
            if body.get("grant_type") == "authorization_code":
                status, payload = self.exchange_response
            else:
                status, payload = self.token_response
            return httpx.Response(status, json=payload)

        if url.startswith(google_calendar_service.GOOGLE_REVOKE_URL):
            return httpx.Response(200, json={})

        if "/calendarList/primary" in url:
            return httpx.Response(200, json={"id": "owner@premier-realty.test"})

        if "/calendarList" in url:
            return httpx.Response(200, json={"items": [{"id": "primary"}]})

        if "/events" in url and request.method == "POST":
            payload = json.loads(request.content)
            if "conferenceData" in payload and self.reject_conference:
                return httpx.Response(400, json={"error": {"message": "Invalid conference type value."}})
            if payload.get("id") in self.events:
                conflict = {"error": {"code": 409, "message": "The requested identifier already exists."}}
                return httpx.Response(409, json=conflict)
            self.event_counter += 1
            event_id = payload.get("id") or f"evt{self.event_counter}"
            event = {
                "id": event_id,
                "status": "confirmed",
                "htmlLink": f"https://www.google.com/calendar/event?eid={event_id}",
            }
            if "conferenceData" in payload:
                event["conferenceData"] = {
                    "entryPoints": [
                        {"entryPointType": "phone", "uri": "tel:+1-555-0100"},
                        {"entryPointType": "video", "uri": "https://meet.google.com/abc-defg-hij"},
                    ]
                }
            self.events[event_id] = event
            return httpx.Response(200, json=event)

        if "/events/" in url and request.method == "GET":
            event = self.events.get(request.url.path.rsplit("/", 1)[-1])
            if event is None:
                return httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}})
            return httpx.Response(200, json=event)

        if "/events/" in url and request.method == "DELETE":
            event = self.events.get(request.url.path.rsplit("/", 1)[-1])
            if event is not None and self.delete_status in (200, 204):
                event["status"] = "cancelled"
            return httpx.Response(self.delete_status)

        return httpx.Response(404, json={"error": "not found"})

    def calls_to(self, fragment, method=None):
        return [
            r for r in self.requests if fragment in str(r.url) and (method is None or r.method == method)
        ]


@pytest.fixture
def google(monkeypatch):
    fake = FakeGoogle()

    def client_factory():
        return httpx.AsyncClient(transport=httpx.MockTransport(fake.handler), timeout=5.0)

    monkeypatch.setattr(google_calendar_service, "get_http_client", client_factory)
    return fake


@pytest.fixture
def connected_calendar(db_session, google):
    """A stored Google credential."""
    google_calendar_service.save_refresh_token(
        db_session, refresh_token="1//stored-refresh", google_email="owner@premier-realty.test"
    )
    return google


@pytest.fixture
def client(db_session, sent_emails, queue_down, google):
    app.dependency_overrides[booking_rate_limiter] = lambda: None
    app.dependency_overrides[contact_rate_limiter] = lambda: None
    with_client = TestClient(app)
    yield with_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db_session):
    admin = AdminUser(email=ADMIN_ADDRESS)
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {make_platform_token(ADMIN_ADDRESS)}"}

"""
Google Calendar Service
Handles token refresh, consultation event creation with Google Meet, and deletion
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
from sqlalchemy.orm import Session

from ..config import (
    BRAND_NAME,
    BUSINESS_TIMEZONE,
    GOOGLE_CALENDAR_ID,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_REDIRECT_URI,
    GOOGLE_REFRESH_TOKEN,
)
from ..database import utcnow
from ..models import Reservation
from ..models_google_calendar import GoogleCalendarIntegration
from ..security_utils import decrypt_secret, encrypt_secret
from .booking_service import get_meeting_window

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
GOOGLE_CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
]

# Refresh access tokens this long before Google expires them
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)

KNOWN_GOOGLE_ERRORS = {
    "invalid_grant": "Google authorization has expired or been revoked. Reconnect Google Calendar from the admin panel.",
    "accessNotConfigured": "Google Calendar API is not enabled for this project. Enable it in Google Cloud Console.",
    "insufficientPermissions": "The connected Google account lacks calendar permissions. Reconnect and grant calendar access.",
}


class GoogleCalendarError(Exception):
    """Raised when Google Calendar cannot be reached with the stored credentials"""


@dataclass
class CalendarEventResult:
    success: bool
    event_id: Optional[str] = None
    meet_link: Optional[str] = None
    calendar_link: Optional[str] = None
    error: Optional[str] = None


def get_http_client() -> httpx.AsyncClient:
    """HTTP client for Google APIs"""
    return httpx.AsyncClient(timeout=20.0)


def is_oauth_configured() -> bool:
    return bool(GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET and GOOGLE_REDIRECT_URI)


def describe_google_error(message: str) -> str:
    """Turn a raw Google error payload into an actionable message"""
    for marker, friendly in KNOWN_GOOGLE_ERRORS.items():
        if marker in message:
            return friendly
    return message or "Unknown error occurred"


# ============================================================================
# CREDENTIALS
# ============================================================================


def get_integration(db: Session) -> Optional[GoogleCalendarIntegration]:
    """
    Stored calendar credential.

    A refresh token provided through GOOGLE_REFRESH_TOKEN is adopted into the
    database the first time it is needed.
    """
    integration = db.query(GoogleCalendarIntegration).order_by(GoogleCalendarIntegration.id).first()
    if integration or not GOOGLE_REFRESH_TOKEN:
        return integration

    logger.info("🔑 Adopting GOOGLE_REFRESH_TOKEN from environment")
    integration = GoogleCalendarIntegration(
        refresh_token=encrypt_secret(GOOGLE_REFRESH_TOKEN),
        google_calendar_id=GOOGLE_CALENDAR_ID,
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)
    return integration


def save_refresh_token(
    db: Session,
    refresh_token: str,
    access_token: Optional[str] = None,
    expires_in: int = 3600,
    google_email: Optional[str] = None,
    calendar_id: Optional[str] = None,
) -> GoogleCalendarIntegration:
    """Upsert the single calendar credential"""
    integration = db.query(GoogleCalendarIntegration).order_by(GoogleCalendarIntegration.id).first()
    if not integration:
        integration = GoogleCalendarIntegration(refresh_token="")
        db.add(integration)

    integration.refresh_token = encrypt_secret(refresh_token)
    if access_token:
        integration.access_token = encrypt_secret(access_token)
        integration.token_expires_at = utcnow() + timedelta(seconds=expires_in)
    else:
        integration.access_token = None
        integration.token_expires_at = None
    integration.google_user_email = google_email
    integration.google_calendar_id = calendar_id or GOOGLE_CALENDAR_ID
    integration.updated_at = utcnow()

    db.commit()
    db.refresh(integration)
    return integration


async def get_valid_access_token(integration: GoogleCalendarIntegration, db: Session) -> str:
    """
    Get a valid access token, refreshing if necessary

    Raises:
        GoogleCalendarError: if the refresh token is unusable
    """
    if (
        integration.access_token
        and integration.token_expires_at
        and integration.token_expires_at > utcnow() + TOKEN_REFRESH_MARGIN
    ):
        access_token = decrypt_secret(integration.access_token)
        if access_token:
            return access_token

    logger.info("🔄 Google Calendar access token expired, refreshing...")

    refresh_token = decrypt_secret(integration.refresh_token)
    if not refresh_token:
        raise GoogleCalendarError("Stored Google credential is unreadable. Reconnect Google Calendar.")

    try:
        async with get_http_client() as client:
            response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": GOOGLE_CLIENT_ID,
                    "client_secret": GOOGLE_CLIENT_SECRET,
                    "refresh_token": refresh_token,
                    "grant_type": "refresh_token",
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Token refresh request failed: {str(e)}")
        raise GoogleCalendarError(f"Could not reach Google: {str(e)}") from e

    if response.status_code != 200:
        logger.error(f"❌ Token refresh failed: {response.text}")
        raise GoogleCalendarError(describe_google_error(response.text))

    tokens = response.json()
    new_access_token = tokens.get("access_token")
    expires_in = tokens.get("expires_in", 3600)

    if not new_access_token:
        logger.error("❌ No access token in refresh response")
        raise GoogleCalendarError("Google did not return an access token")

    integration.access_token = encrypt_secret(new_access_token)
    integration.token_expires_at = utcnow() + timedelta(seconds=expires_in)
    # Google may rotate the refresh token
    if tokens.get("refresh_token"):
        integration.refresh_token = encrypt_secret(tokens["refresh_token"])
    db.commit()

    logger.info("✅ Google Calendar token refreshed successfully")
    return new_access_token


async def get_access_token_for_calendar(db: Session) -> tuple[str, str]:
    """Access token and calendar id for the connected calendar"""
    integration = get_integration(db)
    if not integration:
        raise GoogleCalendarError("Google Calendar is not connected")
    access_token = await get_valid_access_token(integration, db)
    return access_token, integration.google_calendar_id or GOOGLE_CALENDAR_ID


# ============================================================================
# OAUTH
# ============================================================================


def build_authorization_url(state: str) -> str:
    params = httpx.QueryParams(
        {
            "client_id": GOOGLE_CLIENT_ID,
            "redirect_uri": GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": " ".join(GOOGLE_CALENDAR_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
    )
    return f"{GOOGLE_AUTH_URL}?{params}"


async def exchange_code_for_tokens(code: str) -> dict[str, Any]:
    """Exchange an authorization code. Codes are single use."""
    try:
        async with get_http_client() as client:
            response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": GOOGLE_CLIENT_ID,
                    "client_secret": GOOGLE_CLIENT_SECRET,
                    "redirect_uri": GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Token exchange request failed: {str(e)}")
        raise GoogleCalendarError(f"Could not reach Google: {str(e)}") from e

    if response.status_code != 200:
        logger.error(f"❌ Token exchange failed: {response.text}")
        raise GoogleCalendarError(describe_google_error(response.text))

    return response.json()


async def get_primary_calendar(access_token: str) -> dict[str, Any]:
    """The primary calendar's id is the Google account email"""
    try:
        async with get_http_client() as client:
            response = await client.get(
                f"{GOOGLE_CALENDAR_API}/users/me/calendarList/primary",
                headers={"Authorization": f"Bearer {access_token}"},
            )
    except httpx.HTTPError as e:
        logger.warning(f"⚠️ Could not read primary calendar: {str(e)}")
        return {}
    if response.status_code != 200:
        logger.warning(f"⚠️ Could not read primary calendar: {response.text}")
        return {}
    return response.json()


async def revoke_token(token: str) -> None:
    try:
        async with get_http_client() as client:
            await client.post(GOOGLE_REVOKE_URL, params={"token": token})
    except httpx.HTTPError as e:
        logger.warning(f"Failed to revoke Google token: {str(e)}")


# ============================================================================
# EVENTS
# ============================================================================


def build_event_description(
    name: str, email: str, phone: Optional[str] = None, message: Optional[str] = None
) -> str:
    description = f"Property Consultation with {name}\n\n"
    description += "Contact Information:\n"
    description += f"Email: {email}\n"
    if phone:
        description += f"Phone: {phone}\n"
    if message:
        description += f"\nClient Message:\n{message}\n"
    description += f"\n---\nThis meeting was automatically scheduled via {BRAND_NAME} booking system."
    return description


def extract_meet_link(event: dict[str, Any]) -> Optional[str]:
    entry_points = (event.get("conferenceData") or {}).get("entryPoints") or []
    for entry_point in entry_points:
        if entry_point.get("entryPointType") == "video" and entry_point.get("uri"):
            return entry_point["uri"]
    return event.get("hangoutLink")


async def create_consultation_event(
    db: Session,
    name: str,
    email: str,
    start: datetime,
    end: datetime,
    phone: Optional[str] = None,
    message: Optional[str] = None,
    request_id: Optional[str] = None,
    event_id: Optional[str] = None,
) -> CalendarEventResult:
    """
    Create a consultation event with a Google Meet conference.

    Retries without conferencing when Google refuses to create the conference.
    Reusing request_id makes Google return the same conference on retries.
    With event_id the insert is idempotent: when Google already holds an event
    under that id (409), the existing event is returned instead.
    """
    try:
        access_token, calendar_id = await get_access_token_for_calendar(db)
    except GoogleCalendarError as e:
        logger.error(f"❌ Failed to get valid access token: {e}")
        return CalendarEventResult(success=False, error=str(e))

    base_event = {
        "summary": f"Property Consultation - {name}",
        "description": f"{build_event_description(name, email, phone, message)}\n\nClient: {name} ({email})",
        "start": {"dateTime": start.isoformat(), "timeZone": BUSINESS_TIMEZONE},
        "end": {"dateTime": end.isoformat(), "timeZone": BUSINESS_TIMEZONE},
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "popup", "minutes": 60},
                {"method": "popup", "minutes": 15},
            ],
        },
    }
    if event_id:
        base_event["id"] = event_id
    event_with_meet = {
        **base_event,
        "conferenceData": {
            "createRequest": {
                "requestId": request_id or f"meet-{uuid.uuid4().hex}",
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        },
    }

    url = f"{GOOGLE_CALENDAR_API}/calendars/{calendar_id}/events"
    headers = {"Authorization": f"Bearer {access_token}"}

    try:
        async with get_http_client() as client:
            response = await client.post(
                url,
                headers=headers,
                params={"conferenceDataVersion": 1, "sendUpdates": "none"},
                json=event_with_meet,
            )

            if response.status_code not in [200, 201, 409]:
                logger.warning(
                    f"⚠️ Could not create Meet conference, creating event without Meet: {response.text}"
                )
                response = await client.post(
                    url, headers=headers, params={"sendUpdates": "none"}, json=base_event
                )

            if response.status_code == 409 and event_id:
                logger.info(f"ℹ️ Google Calendar event {event_id} already exists, reusing it")
                response = await client.get(f"{url}/{event_id}", headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"❌ Error creating calendar event: {str(e)}")
        return CalendarEventResult(success=False, error=str(e))

    if response.status_code not in [200, 201]:
        logger.error(f"❌ Failed to create calendar event: {response.text}")
        return CalendarEventResult(success=False, error=describe_google_error(response.text))

    event = response.json()
    if event.get("status") == "cancelled":
        # Deleted event ids stay reserved
        logger.error(f"❌ Google Calendar event {event.get('id')} was deleted and cannot be recreated")
        return CalendarEventResult(success=False, error="The calendar event for this booking was deleted")

    result = CalendarEventResult(
        success=True,
        event_id=event.get("id"),
        meet_link=extract_meet_link(event),
        calendar_link=event.get("htmlLink"),
    )
    logger.info(f"✅ Google Calendar event ready: {result.event_id} (meet: {bool(result.meet_link)})")
    return result


async def delete_calendar_event(db: Session, event_id: str) -> CalendarEventResult:
    """Delete an event and notify its guests. An event that is already gone counts as deleted."""
    try:
        access_token, calendar_id = await get_access_token_for_calendar(db)
    except GoogleCalendarError as e:
        logger.error(f"❌ Failed to get valid access token: {e}")
        return CalendarEventResult(success=False, error=str(e))

    try:
        async with get_http_client() as client:
            response = await client.delete(
                f"{GOOGLE_CALENDAR_API}/calendars/{calendar_id}/events/{event_id}",
                headers={"Authorization": f"Bearer {access_token}"},
                params={"sendUpdates": "all"},
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Error deleting calendar event: {str(e)}")
        return CalendarEventResult(success=False, error=str(e))

    if response.status_code in [404, 410]:
        logger.info(f"ℹ️ Google Calendar event already gone: {event_id}")
        return CalendarEventResult(success=True, event_id=event_id)

    if response.status_code not in [200, 204]:
        logger.error(f"❌ Failed to delete calendar event: {response.text}")
        return CalendarEventResult(success=False, error=describe_google_error(response.text))

    logger.info(f"✅ Google Calendar event deleted: {event_id}")
    return CalendarEventResult(success=True, event_id=event_id)


# ============================================================================
# RESERVATION SYNC
# ============================================================================


def reservation_event_id(reservation: Reservation) -> str:
    """Stable Google event id for a reservation (base32hex: the UUID's hex digits)"""
    return reservation.public_id.replace("-", "")


async def ensure_reservation_event(db: Session, reservation: Reservation) -> CalendarEventResult:
    """
    Create the calendar event for a reservation unless it already has one.

    The event id is derived from the reservation, so concurrent or retried
    tasks converge on a single Google event.
    """
    if reservation.calendar_event_id:
        return CalendarEventResult(
            success=True,
            event_id=reservation.calendar_event_id,
            meet_link=reservation.meet_link,
            calendar_link=reservation.calendar_link,
        )

    start, end = get_meeting_window(reservation.date, reservation.time)
    result = await create_consultation_event(
        db,
        name=reservation.name,
        email=reservation.email,
        phone=reservation.phone,
        message=reservation.message,
        start=start,
        end=end,
        request_id=f"reservation-{reservation.public_id}",
        event_id=reservation_event_id(reservation),
    )

    if result.success:
        reservation.calendar_event_id = result.event_id
        reservation.meet_link = result.meet_link
        reservation.calendar_link = result.calendar_link
        db.commit()
        db.refresh(reservation)
    return result


async def remove_reservation_event(db: Session, reservation: Reservation) -> bool:
    """Delete a reservation's calendar event and clear the stored links"""
    if not reservation.calendar_event_id:
        return True

    result = await delete_calendar_event(db, reservation.calendar_event_id)
    if not result.success:
        return False

    reservation.calendar_event_id = None
    reservation.meet_link = None
    reservation.calendar_link = None
    db.commit()
    return True


async def run_diagnostics(db: Session) -> dict[str, Any]:
    """Configuration and connectivity checks for the admin panel"""
    checks: dict[str, Any] = {
        "oauthConfigured": is_oauth_configured(),
        "envRefreshTokenSet": bool(GOOGLE_REFRESH_TOKEN),
    }
    diagnostics: dict[str, Any] = {"timestamp": utcnow().isoformat(), "checks": checks}

    integration = get_integration(db)
    checks["connected"] = integration is not None
    if not integration:
        diagnostics["error"] = "Google Calendar is not connected"
        return diagnostics

    checks["googleEmail"] = integration.google_user_email
    checks["calendarId"] = integration.google_calendar_id or GOOGLE_CALENDAR_ID

    try:
        access_token = await get_valid_access_token(integration, db)
        checks["authSuccess"] = True
    except GoogleCalendarError as e:
        checks["authSuccess"] = False
        diagnostics["error"] = str(e)
        return diagnostics

    try:
        async with get_http_client() as client:
            response = await client.get(
                f"{GOOGLE_CALENDAR_API}/users/me/calendarList",
                headers={"Authorization": f"Bearer {access_token}"},
                params={"maxResults": 1},
            )
    except httpx.HTTPError as e:
        checks["calendarAccess"] = False
        diagnostics["error"] = str(e)
        return diagnostics

    checks["calendarAccess"] = response.status_code == 200
    if response.status_code != 200:
        diagnostics["error"] = describe_google_error(response.text)
    return diagnostics

"""
Google Calendar Integration Routes
Handles the OAuth connection of the business calendar and ad-hoc consultation events
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..config import GOOGLE_CALENDAR_ID, SITE_URL
from ..database import get_db
from ..models import AdminUser
from ..schemas import CalendarEventDeleteRequest, CalendarEventRequest, CalendarEventResponse
from ..security_utils import decrypt_secret, generate_timed_token, verify_timed_token
from ..services import google_calendar_service as calendar_service
from ..services.booking_service import get_meeting_window
from ..shared.validators import validate_iso_date, validate_time_slot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/google-calendar", tags=["google-calendar"])

OAUTH_STATE_SALT = "google-calendar-oauth"
OAUTH_STATE_MAX_AGE = 600  # seconds

REVOKE_HINT = (
    "Google did not return a refresh token. "
    "Try revoking app access at https://myaccount.google.com/permissions and connect again."
)

SUCCESS_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Google Calendar Connected</title></head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; text-align: center; padding: 60px;">
  <h1>Google Calendar Connected!</h1>
  <p>Consultation bookings will now create calendar events with Google Meet links.</p>
  <p><a href="{admin_url}">Return to the admin panel</a></p>
</body>
</html>"""


@router.get("/status")
async def get_google_calendar_status(
    admin: AdminUser = Depends(get_current_admin), db: Session = Depends(get_db)
):
    """Get Google Calendar connection status"""
    integration = calendar_service.get_integration(db)

    if not integration:
        return {
            "connected": False,
            "oauth_configured": calendar_service.is_oauth_configured(),
            "user_email": None,
            "calendar_id": None,
        }

    return {
        "connected": True,
        "oauth_configured": calendar_service.is_oauth_configured(),
        "user_email": integration.google_user_email,
        "calendar_id": integration.google_calendar_id or GOOGLE_CALENDAR_ID,
    }


@router.get("/connect")
async def initiate_google_calendar_oauth(admin: AdminUser = Depends(get_current_admin)):
    """Initiate Google Calendar OAuth flow"""
    if not calendar_service.is_oauth_configured():
        raise HTTPException(status_code=500, detail="Google Calendar OAuth is not configured")

    state = generate_timed_token({"admin_id": admin.id}, salt=OAUTH_STATE_SALT)
    logger.info(f"Google Calendar OAuth initiated by admin: {admin.email}")

    return {"authorization_url": calendar_service.build_authorization_url(state)}


@router.get("/callback", response_class=HTMLResponse)
async def handle_google_calendar_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Google redirects here after consent"""
    if error:
        logger.warning(f"⚠️ Google OAuth returned error: {error}")
        raise HTTPException(status_code=400, detail=f"Google authorization failed: {error}")

    if not code:
        raise HTTPException(status_code=400, detail="No authorization code provided")

    if not calendar_service.is_oauth_configured():
        raise HTTPException(status_code=500, detail="Google Calendar OAuth is not configured")

    if not state or not verify_timed_token(state, max_age=OAUTH_STATE_MAX_AGE, salt=OAUTH_STATE_SALT):
        raise HTTPException(status_code=400, detail="Invalid or expired OAuth state")

    try:
        tokens = await calendar_service.exchange_code_for_tokens(code)
    except calendar_service.GoogleCalendarError as e:
        raise HTTPException(status_code=400, detail=f"Failed to exchange authorization code: {e}") from e

    refresh_token = tokens.get("refresh_token")
    if not refresh_token:
        logger.warning("⚠️ Token response did not include a refresh token")
        raise HTTPException(status_code=400, detail=REVOKE_HINT)

    access_token = tokens.get("access_token")
    calendar = await calendar_service.get_primary_calendar(access_token) if access_token else {}

    calendar_service.save_refresh_token(
        db,
        refresh_token=refresh_token,
        access_token=access_token,
        expires_in=int(tokens.get("expires_in", 3600)),
        google_email=calendar.get("id"),
        calendar_id=GOOGLE_CALENDAR_ID,
    )

    logger.info(f"✅ Google Calendar connected: {calendar.get('id') or 'unknown account'}")
    return HTMLResponse(SUCCESS_PAGE.format(admin_url=f"{SITE_URL}/admin"))


@router.post("/disconnect")
async def disconnect_google_calendar(
    admin: AdminUser = Depends(get_current_admin), db: Session = Depends(get_db)
):
    """Revoke and remove the stored credential"""
    integration = calendar_service.get_integration(db)
    if not integration:
        raise HTTPException(status_code=404, detail="Google Calendar not connected")

    refresh_token = decrypt_secret(integration.refresh_token)
    if refresh_token:
        await calendar_service.revoke_token(refresh_token)

    db.delete(integration)
    db.commit()

    logger.info(f"✅ Google Calendar disconnected by admin: {admin.email}")
    return {"success": True, "message": "Google Calendar disconnected successfully"}


@router.get("/diagnostics")
async def google_calendar_diagnostics(
    admin: AdminUser = Depends(get_current_admin), db: Session = Depends(get_db)
):
    return await calendar_service.run_diagnostics(db)


@router.post("/events", response_model=CalendarEventResponse)
async def create_calendar_event(
    data: CalendarEventRequest,
    admin: AdminUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Create a consultation event outside the booking flow"""
    if not all([data.name, data.email, data.date, data.time]):
        raise HTTPException(status_code=400, detail="Missing required fields: name, email, date, time")

    try:
        day = validate_iso_date(data.date)
        time_slot = validate_time_slot(data.time)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    start, end = get_meeting_window(day, time_slot)
    result = await calendar_service.create_consultation_event(
        db,
        name=data.name,
        email=data.email,
        phone=data.phone,
        message=data.message,
        start=start,
        end=end,
        request_id=f"manual-{int(time.time() * 1000)}",
    )

    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "Failed to create calendar event")

    return {
        "success": True,
        "eventId": result.event_id,
        "meetLink": result.meet_link,
        "calendarLink": result.calendar_link,
    }


@router.post("/events/delete", response_model=CalendarEventResponse)
async def delete_calendar_event(
    data: CalendarEventDeleteRequest,
    admin: AdminUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    if not data.eventId:
        raise HTTPException(status_code=400, detail="Missing eventId")

    result = await calendar_service.delete_calendar_event(db, data.eventId)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "Failed to delete calendar event")

    return {"success": True, "eventId": data.eventId}

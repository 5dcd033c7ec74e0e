"""
Reservation reminders
Daily digest for the operator and upcoming-meeting alerts for the admin dashboard
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from .. import email_service
from ..models import Reservation
from .booking_service import business_now, business_today, format_long_date, get_meeting_window

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("pending", "confirmed")
UPCOMING_ALERT_WINDOW = timedelta(minutes=60)


def get_reservations_for_day(db: Session, day: date) -> list[Reservation]:
    """Pending and confirmed reservations on a day, earliest first"""
    return (
        db.query(Reservation)
        .filter(Reservation.date == day, Reservation.status.in_(ACTIVE_STATUSES))
        .order_by(Reservation.time.asc())
        .all()
    )


async def send_daily_reminder(db: Session, today: Optional[date] = None) -> dict:
    """
    Email today's appointments to the operator.

    Returns the summary the cron endpoint responds with.
    """
    today = today or business_today()
    reservations = get_reservations_for_day(db, today)

    if not reservations:
        logger.info(f"📭 No appointments on {today.isoformat()} - digest skipped")
        return {"message": "No appointments today", "sent": False}

    appointments = [
        {
            "name": r.name,
            "email": r.email,
            "phone": r.phone,
            "time": r.time,
            "status": r.status,
            "meet_link": r.meet_link,
        }
        for r in reservations
    ]
    await email_service.send_daily_digest(format_long_date(today), appointments)

    count = len(reservations)
    logger.info(f"✅ Daily digest sent for {count} appointment(s)")
    return {"message": f"Reminder sent for {count} appointment(s)", "sent": True, "count": count}


def build_notification_payload(reservation: Reservation, minutes_until: int) -> dict:
    """Message shape the admin service worker displays"""
    return {
        "type": "SHOW_NOTIFICATION",
        "title": f"Upcoming meeting in {minutes_until} min",
        "body": f"{reservation.name} at {reservation.time}",
        "tag": f"reservation-{reservation.id}",
        "data": {"reservationId": reservation.id},
    }


def collect_upcoming_alerts(db: Session, now: Optional[datetime] = None) -> list[dict]:
    """
    Alerts for meetings starting within the next hour.

    Each reservation is reported once; reported reservations are stamped with notified_at.
    """
    now = now or business_now()
    horizon = now + UPCOMING_ALERT_WINDOW

    candidates = (
        db.query(Reservation)
        .filter(
            Reservation.date.in_({now.date(), horizon.date()}),
            Reservation.status.in_(ACTIVE_STATUSES),
            Reservation.notified_at.is_(None),
        )
        .order_by(Reservation.date.asc(), Reservation.time.asc())
        .all()
    )

    alerts = []
    for reservation in candidates:
        start, _ = get_meeting_window(reservation.date, reservation.time)
        seconds_until = (start - now).total_seconds()
        if 0 < seconds_until <= UPCOMING_ALERT_WINDOW.total_seconds():
            minutes_until = max(1, round(seconds_until / 60))
            alerts.append(build_notification_payload(reservation, minutes_until))
            reservation.notified_at = now.astimezone(timezone.utc).replace(tzinfo=None)

    if alerts:
        db.commit()
        logger.info(f"🔔 {len(alerts)} upcoming meeting alert(s)")
    return alerts

"""
Reservation Notification Service
Runs the calendar sync and emails that follow each reservation lifecycle event.
The calendar step never blocks the emails.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from .. import email_service
from ..models import Reservation
from . import google_calendar_service
from .booking_service import format_long_date

logger = logging.getLogger(__name__)


async def deliver_email(notification_type: str, recipient: str, email_func, **email_kwargs) -> bool:
    """Send one email, logging instead of raising so sibling notifications still go out"""
    try:
        logger.info(f"📧 Sending {notification_type} email to {recipient}")
        await email_func(**email_kwargs)
        logger.info(f"✅ {notification_type} email sent successfully to {recipient}")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send {notification_type} email to {recipient}: {e}")
        return False


def _load_reservation(db: Session, reservation_id: int) -> Optional[Reservation]:
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        logger.warning(f"⚠️ Reservation {reservation_id} no longer exists - skipping notifications")
    return reservation


async def process_new_reservation(db: Session, reservation_id: int) -> dict:
    """Create the calendar event, then notify the operator and acknowledge the customer"""
    result = {"calendar_synced": False, "admin_email_sent": False, "customer_email_sent": False}
    reservation = _load_reservation(db, reservation_id)
    if not reservation:
        return result

    calendar = await google_calendar_service.ensure_reservation_event(db, reservation)
    result["calendar_synced"] = calendar.success
    if not calendar.success:
        logger.warning(f"⚠️ Calendar event not created for reservation {reservation.id}: {calendar.error}")

    date_label = format_long_date(reservation.date)
    result["admin_email_sent"] = await deliver_email(
        "new reservation",
        "operator",
        email_service.send_new_reservation_notification,
        name=reservation.name,
        email=reservation.email,
        phone=reservation.phone,
        message=reservation.message,
        date_label=date_label,
        time=reservation.time,
    )
    result["customer_email_sent"] = await deliver_email(
        "reservation received",
        reservation.email,
        email_service.send_reservation_received,
        to=reservation.email,
        name=reservation.name,
        date_label=date_label,
        time=reservation.time,
    )
    return result


async def process_reservation_confirmed(db: Session, reservation_id: int) -> dict:
    """Make sure the meeting exists, then send the customer the confirmation with the Meet link"""
    result = {"calendar_synced": False, "customer_email_sent": False}
    reservation = _load_reservation(db, reservation_id)
    if not reservation or reservation.status != "confirmed":
        return result

    calendar = await google_calendar_service.ensure_reservation_event(db, reservation)
    result["calendar_synced"] = calendar.success
    if not calendar.success:
        logger.warning(f"⚠️ Confirming reservation {reservation.id} without a calendar event: {calendar.error}")

    result["customer_email_sent"] = await deliver_email(
        "reservation confirmed",
        reservation.email,
        email_service.send_reservation_confirmation,
        to=reservation.email,
        name=reservation.name,
        date_label=format_long_date(reservation.date),
        time=reservation.time,
        meet_link=reservation.meet_link,
    )
    return result


async def process_reservation_cancelled(
    db: Session, reservation_id: int, notify_customer: bool = True
) -> dict:
    """Remove the calendar event and tell the customer why"""
    result = {"calendar_removed": False, "customer_email_sent": False}
    reservation = _load_reservation(db, reservation_id)
    if not reservation or reservation.status != "cancelled":
        return result

    result["calendar_removed"] = await google_calendar_service.remove_reservation_event(db, reservation)

    if notify_customer:
        result["customer_email_sent"] = await deliver_email(
            "reservation rejected",
            reservation.email,
            email_service.send_reservation_rejection,
            to=reservation.email,
            name=reservation.name,
            date_label=format_long_date(reservation.date),
            time=reservation.time,
            reason=reservation.cancellation_reason,
        )
    return result


async def process_reservation_deleted(db: Session, calendar_event_id: Optional[str]) -> dict:
    """Clean up the calendar after a reservation row is gone"""
    if not calendar_event_id:
        return {"calendar_removed": True}
    deleted = await google_calendar_service.delete_calendar_event(db, calendar_event_id)
    return {"calendar_removed": deleted.success}

"""Reservation service - Booking rules and the admin status workflow"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE
from ...models import Reservation
from ...services.booking_service import TIME_SLOTS, business_today, get_bookable_days, slot_error
from ...shared.validators import validate_iso_date
from .repository import ReservationRepository
from .schemas import ReservationCreate, ReservationStatusUpdate

logger = logging.getLogger(__name__)

# pending -> confirmed|cancelled, confirmed -> cancelled; cancelled is final
STATUS_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"cancelled"},
    "cancelled": set(),
}

SLOT_TAKEN_MESSAGE = "This time slot has just been booked. Please choose another time."


def reservation_to_dict(reservation: Reservation) -> dict:
    return {
        "id": reservation.id,
        "publicId": reservation.public_id,
        "name": reservation.name,
        "email": reservation.email,
        "phone": reservation.phone,
        "message": reservation.message,
        "date": reservation.date.isoformat(),
        "time": reservation.time,
        "status": reservation.status,
        "locale": reservation.locale,
        "calendarEventId": reservation.calendar_event_id,
        "meetLink": reservation.meet_link,
        "calendarLink": reservation.calendar_link,
        "cancellationReason": reservation.cancellation_reason,
        "createdAt": reservation.created_at,
    }


class ReservationService:
    """Service layer for reservation business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReservationRepository()

    # ------------------------------------------------------------------
    # Public booking
    # ------------------------------------------------------------------

    def get_bookable_days(self) -> dict:
        return {
            "timezone": BUSINESS_TIMEZONE,
            "days": [day.isoformat() for day in get_bookable_days()],
            "timeSlots": TIME_SLOTS,
        }

    def get_availability(self, day_value: str) -> dict:
        """Booked and free slots for a day"""
        try:
            day = validate_iso_date(day_value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        booked = self.repo.get_booked_times(self.db, day)
        return {
            "date": day.isoformat(),
            "timezone": BUSINESS_TIMEZONE,
            "bookedSlots": booked,
            "slots": [
                {"time": slot, "available": slot not in booked and slot_error(day, slot) is None}
                for slot in TIME_SLOTS
            ],
        }

    def create_reservation(self, data: ReservationCreate, locale: Optional[str] = None) -> Reservation:
        """Validate the slot and store a pending reservation"""
        logger.info(f"📥 Booking request for {data.date.isoformat()} {data.time}")

        error = slot_error(data.date, data.time)
        if error:
            logger.warning(f"⚠️ Rejected booking for {data.date.isoformat()} {data.time}: {error}")
            raise HTTPException(status_code=400, detail=error)

        if data.time in self.repo.get_booked_times(self.db, data.date):
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

        try:
            reservation = self.repo.create_reservation(
                self.db,
                name=data.name,
                email=data.email,
                phone=data.phone,
                message=data.message,
                date=data.date,
                time=data.time,
                locale=data.locale or locale,
                status="pending",
            )
        except IntegrityError as e:
            # Lost the race for the slot to a concurrent booking
            logger.warning(f"⚠️ Slot {data.date.isoformat()} {data.time} taken concurrently")
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE) from e

        logger.info(f"✅ Reservation {reservation.id} created for {reservation.date} {reservation.time}")
        return reservation

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def list_reservations(self, status: Optional[str] = None) -> list[Reservation]:
        if status and status not in STATUS_TRANSITIONS:
            raise HTTPException(status_code=400, detail="Invalid status filter")
        return self.repo.get_reservations(self.db, status)

    def get_stats(self) -> dict:
        counts = self.repo.count_by_status(self.db)
        return {"total": sum(counts.values()), **counts}

    def get_month(self, month: Optional[str] = None) -> dict:
        """Reservations of a month grouped by ISO day, for the calendar view"""
        try:
            if month:
                first = datetime.strptime(month, "%Y-%m").date()
            else:
                first = business_today().replace(day=1)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Month must be in YYYY-MM format") from e

        following = date(first.year + 1, 1, 1) if first.month == 12 else date(first.year, first.month + 1, 1)

        days: dict[str, list[dict]] = {}
        for reservation in self.repo.get_reservations_between(self.db, first, following):
            days.setdefault(reservation.date.isoformat(), []).append(reservation_to_dict(reservation))
        return {"month": first.strftime("%Y-%m"), "days": days}

    def get_reservation(self, reservation_id: int) -> Reservation:
        reservation = self.repo.get_reservation_by_id(self.db, reservation_id)
        if not reservation:
            raise HTTPException(status_code=404, detail="Reservation not found")
        return reservation

    def update_status(self, reservation_id: int, data: ReservationStatusUpdate) -> tuple[Reservation, bool]:
        """
        Apply a status change.

        Returns the reservation and whether anything changed; setting the current
        status again is a no-op.
        """
        reservation = self.get_reservation(reservation_id)

        if reservation.status == data.status:
            return reservation, False

        if data.status not in STATUS_TRANSITIONS[reservation.status]:
            raise HTTPException(
                status_code=409,
                detail=f"Cannot change a {reservation.status} reservation to {data.status}",
            )

        updates = {"status": data.status}
        if data.status == "cancelled":
            updates["cancellation_reason"] = (data.reason or "").strip() or None

        reservation = self.repo.update_reservation(self.db, reservation, **updates)
        logger.info(f"🔄 Reservation {reservation.id} is now {reservation.status}")
        return reservation, True

    def delete_reservation(self, reservation_id: int) -> Optional[str]:
        """Delete a reservation and return its calendar event id for cleanup"""
        reservation = self.get_reservation(reservation_id)
        calendar_event_id = reservation.calendar_event_id
        self.repo.delete_reservation(self.db, reservation)
        logger.info(f"🗑️ Reservation {reservation_id} deleted")
        return calendar_event_id

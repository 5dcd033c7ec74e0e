"""Reservation repository - Database operations for reservations"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import RESERVATION_STATUSES, Reservation


class ReservationRepository:
    """Repository for reservation database operations"""

    @staticmethod
    def get_reservations(db: Session, status: Optional[str] = None) -> list[Reservation]:
        """All reservations, soonest first"""
        query = db.query(Reservation)
        if status:
            query = query.filter(Reservation.status == status)
        return query.order_by(Reservation.date.asc(), Reservation.time.asc()).all()

    @staticmethod
    def get_reservations_between(db: Session, start: date, end: date) -> list[Reservation]:
        """Reservations with start <= date < end"""
        return (
            db.query(Reservation)
            .filter(Reservation.date >= start, Reservation.date < end)
            .order_by(Reservation.date.asc(), Reservation.time.asc())
            .all()
        )

    @staticmethod
    def get_reservation_by_id(db: Session, reservation_id: int) -> Optional[Reservation]:
        return db.query(Reservation).filter(Reservation.id == reservation_id).first()

    @staticmethod
    def get_booked_times(db: Session, day: date) -> list[str]:
        """Times held by non-cancelled reservations on a day"""
        rows = (
            db.query(Reservation.time)
            .filter(Reservation.date == day, Reservation.status != "cancelled")
            .all()
        )
        return sorted({row.time[:5] for row in rows})

    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        counts = dict.fromkeys(RESERVATION_STATUSES, 0)
        rows = db.query(Reservation.status, func.count(Reservation.id)).group_by(Reservation.status).all()
        for status, count in rows:
            counts[status] = count
        return counts

    @staticmethod
    def create_reservation(db: Session, **reservation_data) -> Reservation:
        """Create a reservation. Raises IntegrityError when the slot is already held."""
        reservation = Reservation(**reservation_data)
        db.add(reservation)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(reservation)
        return reservation

    @staticmethod
    def update_reservation(db: Session, reservation: Reservation, **updates) -> Reservation:
        for key, value in updates.items():
            if hasattr(reservation, key):
                setattr(reservation, key, value)
        db.commit()
        db.refresh(reservation)
        return reservation

    @staticmethod
    def delete_reservation(db: Session, reservation: Reservation) -> None:
        db.delete(reservation)
        db.commit()

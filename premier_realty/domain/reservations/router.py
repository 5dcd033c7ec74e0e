"""Reservations router - Public booking and admin back-office endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...i18n import get_request_locale
from ...jobs import dispatch_job
from ...models import AdminUser
from ...rate_limiter import booking_rate_limiter
from ...schemas import MessageResponse
from ...services.reminder_service import collect_upcoming_alerts
from .schemas import (
    AvailabilityResponse,
    BookableDaysResponse,
    CalendarMonthResponse,
    ReservationBooked,
    ReservationCreate,
    ReservationResponse,
    ReservationStats,
    ReservationStatusUpdate,
    UpcomingAlert,
)
from .service import ReservationService, reservation_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["Reservations"])
admin_router = APIRouter(prefix="/admin/reservations", tags=["Admin Reservations"])


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    """Dependency injection for ReservationService"""
    return ReservationService(db)


# ============================================================================
# PUBLIC BOOKING
# ============================================================================


@router.get("/days", response_model=BookableDaysResponse)
async def get_bookable_days(service: ReservationService = Depends(get_reservation_service)):
    """Working days open for booking"""
    return service.get_bookable_days()


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    date: str = Query(..., description="Day to check, YYYY-MM-DD"),
    service: ReservationService = Depends(get_reservation_service),
):
    """Booked and free slots for a day"""
    return service.get_availability(date)


@router.post("", response_model=ReservationBooked, status_code=201)
async def create_reservation(
    data: ReservationCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    _: None = Depends(booking_rate_limiter),
    service: ReservationService = Depends(get_reservation_service),
):
    """Book a consultation. Calendar sync and emails run in the background."""
    reservation = service.create_reservation(data, locale=get_request_locale(request))

    mode = await dispatch_job(background_tasks, "process_new_reservation_task", reservation.id)
    logger.info(f"📨 Notifications for reservation {reservation.id} dispatched ({mode})")

    return ReservationBooked(
        publicId=reservation.public_id,
        date=reservation.date.isoformat(),
        time=reservation.time,
        status=reservation.status,
        message="Your consultation request has been received",
    )


# ============================================================================
# ADMIN BACK-OFFICE
# ============================================================================


@admin_router.get("", response_model=list[ReservationResponse])
async def list_reservations(
    status: Optional[str] = Query(None),
    admin: AdminUser = Depends(get_current_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    """All reservations ordered by date and time"""
    return [reservation_to_dict(r) for r in service.list_reservations(status)]


@admin_router.get("/stats", response_model=ReservationStats)
async def get_reservation_stats(
    admin: AdminUser = Depends(get_current_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    return service.get_stats()


@admin_router.get("/calendar", response_model=CalendarMonthResponse)
async def get_reservation_calendar(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    admin: AdminUser = Depends(get_current_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    """Reservations of a month grouped by day"""
    return service.get_month(month)


@admin_router.get("/upcoming-alerts", response_model=list[UpcomingAlert])
async def get_upcoming_alerts(
    admin: AdminUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Meetings starting within the hour that have not been announced yet"""
    return collect_upcoming_alerts(db)


@admin_router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    return reservation_to_dict(service.get_reservation(reservation_id))


@admin_router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: int,
    data: ReservationStatusUpdate,
    background_tasks: BackgroundTasks,
    admin: AdminUser = Depends(get_current_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    """Confirm or cancel a reservation"""
    reservation, changed = service.update_status(reservation_id, data)

    if changed and reservation.status == "confirmed":
        await dispatch_job(background_tasks, "reservation_confirmed_task", reservation.id)
    elif changed and reservation.status == "cancelled":
        await dispatch_job(
            background_tasks, "reservation_cancelled_task", reservation.id, data.notifyCustomer
        )

    logger.info(f"👤 {admin.email} set reservation {reservation.id} to {reservation.status}")
    return reservation_to_dict(reservation)


@admin_router.delete("/{reservation_id}", response_model=MessageResponse)
async def delete_reservation(
    reservation_id: int,
    background_tasks: BackgroundTasks,
    admin: AdminUser = Depends(get_current_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    calendar_event_id = service.delete_reservation(reservation_id)
    if calendar_event_id:
        await dispatch_job(background_tasks, "reservation_deleted_task", calendar_event_id)
    return {"message": "Reservation deleted"}

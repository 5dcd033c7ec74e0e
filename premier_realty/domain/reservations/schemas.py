"""Reservation domain schemas - Pydantic models for validation"""

from datetime import date as dt_date
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...i18n import normalize_locale
from ...models import RESERVATION_STATUSES
from ...shared.validators import validate_email, validate_iso_date, validate_phone, validate_time_slot


class ReservationCreate(BaseModel):
    """Schema for a public consultation booking"""

    name: str
    email: str
    date: dt_date
    time: str
    phone: Optional[str] = None
    message: Optional[str] = None
    locale: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > 255:
            raise ValueError("Name is too long")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return validate_iso_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_slot(v)

    @field_validator("phone")
    @classmethod
    def validate_phone_number(cls, v):
        if v:
            return validate_phone(v)
        return None

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) > 2000:
            raise ValueError("Message must be 2000 characters or fewer")
        return v or None

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v):
        return normalize_locale(v)


class ReservationBooked(BaseModel):
    """What the public booking form gets back"""

    publicId: str
    date: str
    time: str
    status: str
    message: str


class ReservationStatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None
    notifyCustomer: bool = True

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in RESERVATION_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(RESERVATION_STATUSES)}")
        return v


class ReservationResponse(BaseModel):
    id: int
    publicId: str
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    date: str
    time: str
    status: str
    locale: Optional[str] = None
    calendarEventId: Optional[str] = None
    meetLink: Optional[str] = None
    calendarLink: Optional[str] = None
    cancellationReason: Optional[str] = None
    createdAt: Optional[datetime] = None


class ReservationStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    cancelled: int


class TimeSlotAvailability(BaseModel):
    time: str
    available: bool


class AvailabilityResponse(BaseModel):
    date: str
    timezone: str
    bookedSlots: list[str]
    slots: list[TimeSlotAvailability]


class BookableDaysResponse(BaseModel):
    timezone: str
    days: list[str]
    timeSlots: list[str]


class CalendarMonthResponse(BaseModel):
    month: str
    days: dict[str, list[ReservationResponse]]


class UpcomingAlertData(BaseModel):
    reservationId: int


class UpcomingAlert(BaseModel):
    type: str
    title: str
    body: str
    tag: str
    data: UpcomingAlertData

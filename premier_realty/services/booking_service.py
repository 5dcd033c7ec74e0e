"""
Booking calendar rules
Working days, hourly consultation slots and timestamp computation in the business timezone
"""

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import BUSINESS_TIMEZONE, MEETING_DURATION_MINUTES

BUSINESS_TZ = ZoneInfo(BUSINESS_TIMEZONE)

# Hourly consultation slots, 08:00 to 20:00 inclusive
TIME_SLOTS = [f"{hour:02d}:00" for hour in range(8, 21)]

BOOKING_WINDOW_DAYS = 30
BOOKING_SEARCH_DAYS = 45


def business_now() -> datetime:
    """Current time in the business timezone"""
    return datetime.now(BUSINESS_TZ)


def business_today() -> date:
    return business_now().date()


def is_working_day(day: date) -> bool:
    """Monday to Saturday"""
    return day.weekday() < 6


def get_bookable_days(today: Optional[date] = None) -> list[date]:
    """The next 30 working days starting today, looking at most 45 calendar days ahead"""
    today = today or business_today()
    days = []
    for offset in range(BOOKING_SEARCH_DAYS):
        day = today + timedelta(days=offset)
        if is_working_day(day):
            days.append(day)
        if len(days) >= BOOKING_WINDOW_DAYS:
            break
    return days


def get_meeting_window(day: date, time_slot: str) -> tuple[datetime, datetime]:
    """Timezone-aware start and end of a consultation"""
    hour, minute = (int(part) for part in time_slot.split(":"))
    start = datetime(day.year, day.month, day.day, hour, minute, tzinfo=BUSINESS_TZ)
    end = start + timedelta(minutes=MEETING_DURATION_MINUTES)
    return start, end


def is_slot_in_past(day: date, time_slot: str, now: Optional[datetime] = None) -> bool:
    now = now or business_now()
    start, _ = get_meeting_window(day, time_slot)
    return start <= now


def slot_error(day: date, time_slot: str, now: Optional[datetime] = None) -> Optional[str]:
    """
    Why a date/time pair cannot be booked, or None when it can.

    Availability against existing reservations is checked separately.
    """
    now = now or business_now()
    if time_slot not in TIME_SLOTS:
        return "Selected time is outside consultation hours"
    if not is_working_day(day):
        return "Consultations are not available on Sundays"
    if day not in get_bookable_days(now.date()):
        return "Selected date is outside the booking window"
    if is_slot_in_past(day, time_slot, now):
        return "Selected time has already passed"
    return None


def format_long_date(day: date) -> str:
    """Monday, March 3, 2025"""
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"

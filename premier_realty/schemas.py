from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from .shared.validators import validate_email


class MessageResponse(BaseModel):
    message: str


class AdminUserResponse(BaseModel):
    id: int
    email: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContactRequest(BaseModel):
    # Presence is checked by the route so a missing field yields "All fields are required"
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class SiteContentUpdate(BaseModel):
    content: dict[str, Any]


class SiteContentResponse(BaseModel):
    content: dict[str, Any]
    updatedAt: Optional[datetime] = None


class UploadedImageResponse(BaseModel):
    key: str
    url: str


class StoredImageResponse(BaseModel):
    key: str
    url: str
    size: int
    lastModified: str


class CalendarEventRequest(BaseModel):
    """Ad-hoc consultation event created from the admin panel"""

    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        if v:
            return validate_email(v)
        return v


class CalendarEventDeleteRequest(BaseModel):
    eventId: Optional[str] = None


class CalendarEventResponse(BaseModel):
    success: bool
    eventId: Optional[str] = None
    meetLink: Optional[str] = None
    calendarLink: Optional[str] = None

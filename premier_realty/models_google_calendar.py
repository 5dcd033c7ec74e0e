"""
Google Calendar Integration Models
"""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class GoogleCalendarIntegration(Base):
    """The operator's calendar credential. The site books into one calendar, so one row at most."""

    __tablename__ = "google_calendar_integrations"

    id = Column(Integer, primary_key=True, index=True)

    # OAuth tokens (encrypted)
    refresh_token = Column(Text, nullable=False)
    access_token = Column(Text, nullable=True)
    token_expires_at = Column(DateTime, nullable=True)

    # Google user info
    google_user_email = Column(String(255), nullable=True)
    google_calendar_id = Column(String(500), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.sql import func

from .database import Base

RESERVATION_STATUSES = ("pending", "confirmed", "cancelled")
PROPERTY_STATUSES = ("active", "sold", "rented", "inactive")
PROPERTY_LISTING_TYPES = ("sale", "rent")
BLOG_STATUSES = ("draft", "published")


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        # One live booking per slot; cancelled rows free the slot
        Index(
            "uq_reservations_active_slot",
            "date",
            "time",
            unique=True,
            postgresql_where=text("status != 'cancelled'"),
            sqlite_where=text("status != 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    message = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM, business timezone
    status = Column(String(20), nullable=False, default="pending", index=True)
    locale = Column(String(10), nullable=True)

    # Google Calendar sync
    calendar_event_id = Column(String(255), nullable=True)
    meet_link = Column(String(500), nullable=True)
    calendar_link = Column(String(1000), nullable=True)

    cancellation_reason = Column(Text, nullable=True)
    notified_at = Column(DateTime, nullable=True)  # Upcoming-meeting alert already surfaced

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    type = Column(String(10), nullable=False)  # sale, rent
    status = Column(String(20), nullable=False, default="active", index=True)
    featured = Column(Boolean, default=False, nullable=False)
    location = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    property_type = Column(String(50), nullable=True)  # apartment, villa, ...
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    area = Column(Float, nullable=True)  # m²
    year_built = Column(Integer, nullable=True)
    floor_number = Column(Integer, nullable=True)
    total_floors = Column(Integer, nullable=True)
    parking_spaces = Column(Integer, nullable=True)
    furnished = Column(Boolean, nullable=True)
    heating_type = Column(String(50), nullable=True)
    cooling_type = Column(String(50), nullable=True)
    images = Column(JSON, nullable=True)  # list of public URLs
    floor_plans = Column(JSON, nullable=True)
    rooms = Column(JSON, nullable=True)  # [{"name": str, "area": float}]
    amenities = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class BlogPost(Base):
    __tablename__ = "blog_posts"
    __table_args__ = (UniqueConstraint("slug", name="uq_blog_posts_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, index=True)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)  # sanitized HTML
    featured_image = Column(String(1000), nullable=True)
    author = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    featured = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class HeroSlide(Base):
    __tablename__ = "hero_slides"

    id = Column(Integer, primary_key=True, index=True)
    image = Column(String(1000), nullable=False)
    title = Column(String(255), nullable=True)
    highlight = Column(String(255), nullable=True)
    subtitle = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, server_default=func.now())


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class SiteContent(Base):
    """Single row holding the editable copy of the public pages."""

    __tablename__ = "site_content"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

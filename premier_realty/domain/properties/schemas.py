"""Property domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import PROPERTY_LISTING_TYPES, PROPERTY_STATUSES


class RoomSpec(BaseModel):
    name: Optional[str] = None
    area: Optional[float] = None


class PropertyPayload(BaseModel):
    """
    Schema for creating or replacing a listing.

    Required-field checks live in the service so the admin form gets one
    message per missing field.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    type: Optional[str] = None
    status: str = "active"
    featured: bool = False
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    propertyType: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    yearBuilt: Optional[int] = None
    floorNumber: Optional[int] = None
    totalFloors: Optional[int] = None
    parkingSpaces: Optional[int] = None
    furnished: Optional[bool] = None
    heatingType: Optional[str] = None
    coolingType: Optional[str] = None
    images: list[str] = []
    floorPlans: list[str] = []
    rooms: list[RoomSpec] = []
    amenities: list[str] = []
    saveAsDraft: bool = False

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v and v not in PROPERTY_LISTING_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(PROPERTY_LISTING_TYPES)}")
        return v or None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in PROPERTY_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PROPERTY_STATUSES)}")
        return v

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v):
        if v is not None and not -90 <= v <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v):
        if v is not None and not -180 <= v <= 180:
            raise ValueError("Longitude must be between -180 and 180")
        return v


class PropertyStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in PROPERTY_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PROPERTY_STATUSES)}")
        return v


class PropertyResponse(BaseModel):
    id: int
    title: str
    description: str
    price: float
    type: str
    status: str
    featured: bool
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    propertyType: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    yearBuilt: Optional[int] = None
    floorNumber: Optional[int] = None
    totalFloors: Optional[int] = None
    parkingSpaces: Optional[int] = None
    furnished: Optional[bool] = None
    heatingType: Optional[str] = None
    coolingType: Optional[str] = None
    images: Optional[list[str]] = None
    floorPlans: Optional[list[str]] = None
    rooms: Optional[list[RoomSpec]] = None
    amenities: Optional[list[str]] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class PropertyListResponse(BaseModel):
    items: list[PropertyResponse]
    total: int
    page: int
    per_page: int
    total_pages: int


class PropertyDetail(BaseModel):
    property: PropertyResponse
    related: list[PropertyResponse]

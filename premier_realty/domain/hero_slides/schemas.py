"""Hero slide schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class HeroSlideCreate(BaseModel):
    image: str
    title: Optional[str] = None
    highlight: Optional[str] = None
    subtitle: Optional[str] = None
    active: bool = True

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        if not v or not v.strip():
            raise ValueError("Image is required")
        return v.strip()


class HeroSlideUpdate(BaseModel):
    image: Optional[str] = None
    title: Optional[str] = None
    highlight: Optional[str] = None
    subtitle: Optional[str] = None
    active: Optional[bool] = None
    sortOrder: Optional[int] = None


class HeroSlideResponse(BaseModel):
    id: int
    image: str
    title: Optional[str] = None
    highlight: Optional[str] = None
    subtitle: Optional[str] = None
    active: bool
    sortOrder: int
    createdAt: Optional[datetime] = None

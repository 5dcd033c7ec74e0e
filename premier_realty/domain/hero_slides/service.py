"""Hero slide service"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import HeroSlide
from .repository import HeroSlideRepository
from .schemas import HeroSlideCreate, HeroSlideUpdate

logger = logging.getLogger(__name__)


def slide_to_dict(slide: HeroSlide) -> dict:
    return {
        "id": slide.id,
        "image": slide.image,
        "title": slide.title,
        "highlight": slide.highlight,
        "subtitle": slide.subtitle,
        "active": slide.active,
        "sortOrder": slide.sort_order,
        "createdAt": slide.created_at,
    }


class HeroSlideService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = HeroSlideRepository()

    def list_active(self) -> list[HeroSlide]:
        return self.repo.get_slides(self.db, active_only=True)

    def list_all(self) -> list[HeroSlide]:
        return self.repo.get_slides(self.db)

    def get_slide(self, slide_id: int) -> HeroSlide:
        slide = self.repo.get_slide_by_id(self.db, slide_id)
        if not slide:
            raise HTTPException(status_code=404, detail="Slide not found")
        return slide

    def create_slide(self, data: HeroSlideCreate) -> HeroSlide:
        # New slides go to the end of the carousel
        slide = self.repo.create_slide(
            self.db,
            image=data.image,
            title=data.title,
            highlight=data.highlight,
            subtitle=data.subtitle,
            active=data.active,
            sort_order=self.repo.next_sort_order(self.db),
        )
        logger.info(f"🖼️ Hero slide {slide.id} created")
        return slide

    def update_slide(self, slide_id: int, data: HeroSlideUpdate) -> HeroSlide:
        slide = self.get_slide(slide_id)
        if data.image is not None and not data.image.strip():
            raise HTTPException(status_code=400, detail="Image is required")
        return self.repo.update_slide(
            self.db,
            slide,
            image=data.image.strip() if data.image else None,
            title=data.title,
            highlight=data.highlight,
            subtitle=data.subtitle,
            active=data.active,
            sort_order=data.sortOrder,
        )

    def toggle_active(self, slide_id: int) -> HeroSlide:
        slide = self.get_slide(slide_id)
        return self.repo.update_slide(self.db, slide, active=not slide.active)

    def delete_slide(self, slide_id: int) -> None:
        slide = self.get_slide(slide_id)
        self.repo.delete_slide(self.db, slide)
        logger.info(f"🗑️ Hero slide {slide_id} deleted")

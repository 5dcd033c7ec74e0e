"""Hero slide repository - Database operations for home page slides"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import HeroSlide


class HeroSlideRepository:
    """Repository for hero slide database operations"""

    @staticmethod
    def get_slides(db: Session, active_only: bool = False) -> list[HeroSlide]:
        query = db.query(HeroSlide)
        if active_only:
            query = query.filter(HeroSlide.active.is_(True))
        return query.order_by(HeroSlide.sort_order.asc(), HeroSlide.id.asc()).all()

    @staticmethod
    def get_slide_by_id(db: Session, slide_id: int) -> Optional[HeroSlide]:
        return db.query(HeroSlide).filter(HeroSlide.id == slide_id).first()

    @staticmethod
    def next_sort_order(db: Session) -> int:
        highest = db.query(func.max(HeroSlide.sort_order)).scalar()
        return 0 if highest is None else highest + 1

    @staticmethod
    def create_slide(db: Session, **slide_data) -> HeroSlide:
        slide = HeroSlide(**slide_data)
        db.add(slide)
        db.commit()
        db.refresh(slide)
        return slide

    @staticmethod
    def update_slide(db: Session, slide: HeroSlide, **updates) -> HeroSlide:
        for key, value in updates.items():
            if value is not None and hasattr(slide, key):
                setattr(slide, key, value)
        db.commit()
        db.refresh(slide)
        return slide

    @staticmethod
    def delete_slide(db: Session, slide: HeroSlide) -> None:
        db.delete(slide)
        db.commit()

"""Hero slides router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import AdminUser
from ...schemas import MessageResponse
from .schemas import HeroSlideCreate, HeroSlideResponse, HeroSlideUpdate
from .service import HeroSlideService, slide_to_dict

router = APIRouter(prefix="/hero-slides", tags=["Hero Slides"])
admin_router = APIRouter(prefix="/admin/hero-slides", tags=["Admin Hero Slides"])


def get_hero_slide_service(db: Session = Depends(get_db)) -> HeroSlideService:
    return HeroSlideService(db)


@router.get("", response_model=list[HeroSlideResponse])
async def list_active_slides(service: HeroSlideService = Depends(get_hero_slide_service)):
    """Active slides in carousel order"""
    return [slide_to_dict(s) for s in service.list_active()]


@admin_router.get("", response_model=list[HeroSlideResponse])
async def list_slides(
    admin: AdminUser = Depends(get_current_admin),
    service: HeroSlideService = Depends(get_hero_slide_service),
):
    return [slide_to_dict(s) for s in service.list_all()]


@admin_router.post("", response_model=HeroSlideResponse, status_code=201)
async def create_slide(
    data: HeroSlideCreate,
    admin: AdminUser = Depends(get_current_admin),
    service: HeroSlideService = Depends(get_hero_slide_service),
):
    return slide_to_dict(service.create_slide(data))


@admin_router.put("/{slide_id}", response_model=HeroSlideResponse)
async def update_slide(
    slide_id: int,
    data: HeroSlideUpdate,
    admin: AdminUser = Depends(get_current_admin),
    service: HeroSlideService = Depends(get_hero_slide_service),
):
    return slide_to_dict(service.update_slide(slide_id, data))


@admin_router.patch("/{slide_id}/toggle", response_model=HeroSlideResponse)
async def toggle_slide(
    slide_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: HeroSlideService = Depends(get_hero_slide_service),
):
    return slide_to_dict(service.toggle_active(slide_id))


@admin_router.delete("/{slide_id}", response_model=MessageResponse)
async def delete_slide(
    slide_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: HeroSlideService = Depends(get_hero_slide_service),
):
    service.delete_slide(slide_id)
    return {"message": "Slide deleted"}

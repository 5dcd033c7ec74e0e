"""Properties router - Public listings and admin listing management"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import PROPERTY_LISTING_TYPES, AdminUser
from ...schemas import MessageResponse
from .schemas import (
    PropertyDetail,
    PropertyListResponse,
    PropertyPayload,
    PropertyResponse,
    PropertyStatusUpdate,
)
from .service import DEFAULT_PER_PAGE, MAX_PER_PAGE, PropertyService, property_to_dict

router = APIRouter(prefix="/properties", tags=["Properties"])
admin_router = APIRouter(prefix="/admin/properties", tags=["Admin Properties"])


def get_property_service(db: Session = Depends(get_db)) -> PropertyService:
    """Dependency injection for PropertyService"""
    return PropertyService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("", response_model=PropertyListResponse)
async def list_properties(
    type: Optional[str] = Query(None, pattern="^(" + "|".join(PROPERTY_LISTING_TYPES) + ")$"),
    propertyType: Optional[str] = None,
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    minArea: Optional[float] = None,
    maxArea: Optional[float] = None,
    bedrooms: Optional[int] = Query(None, ge=0),
    bathrooms: Optional[int] = Query(None, ge=0),
    minYear: Optional[int] = None,
    maxYear: Optional[int] = None,
    furnished: Optional[bool] = None,
    amenities: Optional[str] = Query(None, description="Comma-separated, all must match"),
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    service: PropertyService = Depends(get_property_service),
):
    """Visible listings, featured first"""
    filters = {
        "type": type,
        "property_type": propertyType,
        "min_price": minPrice,
        "max_price": maxPrice,
        "min_area": minArea,
        "max_area": maxArea,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "min_year": minYear,
        "max_year": maxYear,
        "furnished": furnished,
    }
    return service.search(filters, amenities=amenities, page=page, per_page=per_page)


@router.get("/{property_id}", response_model=PropertyDetail)
async def get_property(property_id: int, service: PropertyService = Depends(get_property_service)):
    prop, related = service.get_public_property(property_id)
    return {"property": property_to_dict(prop), "related": [property_to_dict(p) for p in related]}


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=list[PropertyResponse])
async def admin_list_properties(
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    return [property_to_dict(p) for p in service.list_properties()]


@admin_router.get("/{property_id}", response_model=PropertyResponse)
async def admin_get_property(
    property_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    return property_to_dict(service.get_property(property_id))


@admin_router.post("", response_model=PropertyResponse, status_code=201)
async def create_property(
    data: PropertyPayload,
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    return property_to_dict(service.create_property(data))


@admin_router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: int,
    data: PropertyPayload,
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    return property_to_dict(service.update_property(property_id, data))


@admin_router.patch("/{property_id}/status", response_model=PropertyResponse)
async def update_property_status(
    property_id: int,
    data: PropertyStatusUpdate,
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    return property_to_dict(service.set_status(property_id, data.status))


@admin_router.patch("/{property_id}/featured", response_model=PropertyResponse)
async def toggle_property_featured(
    property_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    prop = service.get_property(property_id)
    return property_to_dict(service.set_featured(property_id, not prop.featured))


@admin_router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: PropertyService = Depends(get_property_service),
):
    service.delete_property(property_id)
    return {"message": "Property deleted"}

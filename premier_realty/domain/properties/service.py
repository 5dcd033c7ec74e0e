"""Property service - Listing validation, search and related listings"""

import logging
import math
import random
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Property
from .repository import PropertyRepository
from .schemas import PropertyPayload

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 12
MAX_PER_PAGE = 48
RELATED_LIMIT = 6
RELATED_POOL_SIZE = 20


def property_to_dict(prop: Property) -> dict:
    return {
        "id": prop.id,
        "title": prop.title,
        "description": prop.description,
        "price": prop.price,
        "type": prop.type,
        "status": prop.status,
        "featured": prop.featured,
        "location": prop.location,
        "latitude": prop.latitude,
        "longitude": prop.longitude,
        "propertyType": prop.property_type,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "area": prop.area,
        "yearBuilt": prop.year_built,
        "floorNumber": prop.floor_number,
        "totalFloors": prop.total_floors,
        "parkingSpaces": prop.parking_spaces,
        "furnished": prop.furnished,
        "heatingType": prop.heating_type,
        "coolingType": prop.cooling_type,
        "images": prop.images,
        "floorPlans": prop.floor_plans,
        "rooms": prop.rooms,
        "amenities": prop.amenities,
        "createdAt": prop.created_at,
        "updatedAt": prop.updated_at,
    }


def parse_amenities(value: Optional[str]) -> list[str]:
    """'pool, gym,,parking' -> ['pool', 'gym', 'parking']"""
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class PropertyService:
    """Service layer for property business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository()

    def _build_record(self, data: PropertyPayload) -> dict:
        """Validate an admin form submission and map it onto model columns"""
        missing = []
        if not (data.title or "").strip():
            missing.append("title")
        if data.price is None:
            missing.append("price")
        if not (data.description or "").strip():
            missing.append("description")
        if not (data.location or "").strip():
            missing.append("location")
        if not data.type:
            missing.append("type")
        images = [url for url in data.images if url]
        if not images:
            missing.append("images")
        if missing:
            raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")

        if data.price < 0:
            raise HTTPException(status_code=400, detail="Price must be positive")

        rooms = [
            {"name": room.name.strip(), "area": room.area}
            for room in data.rooms
            if room.name and room.name.strip() and room.area and room.area > 0
        ]
        floor_plans = [url for url in data.floorPlans if url]
        amenities = [a for a in data.amenities if a]

        return {
            "title": data.title.strip(),
            "description": data.description.strip(),
            "price": data.price,
            "type": data.type,
            "status": "inactive" if data.saveAsDraft else data.status,
            "featured": data.featured,
            "location": data.location.strip(),
            "latitude": data.latitude,
            "longitude": data.longitude,
            "property_type": data.propertyType or None,
            "bedrooms": data.bedrooms or None,
            "bathrooms": data.bathrooms or None,
            "area": data.area or None,
            "year_built": data.yearBuilt or None,
            "floor_number": data.floorNumber or None,
            "total_floors": data.totalFloors or None,
            "parking_spaces": data.parkingSpaces or None,
            "furnished": data.furnished,
            "heating_type": data.heatingType or None,
            "cooling_type": data.coolingType or None,
            "images": images,
            "floor_plans": floor_plans or None,
            "rooms": rooms or None,
            "amenities": amenities or None,
        }

    # Public

    def search(
        self,
        filters: dict,
        amenities: Optional[str] = None,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> dict:
        """Filtered, paginated public listing"""
        page = max(page, 1)
        per_page = min(max(per_page, 1), MAX_PER_PAGE)

        properties = self.repo.get_visible_properties(self.db, filters)

        required = parse_amenities(amenities)
        if required:
            properties = [p for p in properties if all(a in (p.amenities or []) for a in required)]

        total = len(properties)
        start = (page - 1) * per_page
        return {
            "items": [property_to_dict(p) for p in properties[start : start + per_page]],
            "total": total,
            "page": page,
            "per_page": per_page,
            "total_pages": math.ceil(total / per_page) if total else 0,
        }

    def get_public_property(self, property_id: int) -> tuple[Property, list[Property]]:
        prop = self.repo.get_property_by_id(self.db, property_id, visible_only=True)
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")

        pool = self.repo.get_related_candidates(self.db, exclude_id=prop.id, limit=RELATED_POOL_SIZE)
        related = random.sample(pool, min(RELATED_LIMIT, len(pool)))
        return prop, related

    # Admin

    def list_properties(self) -> list[Property]:
        return self.repo.get_all_properties(self.db)

    def get_property(self, property_id: int) -> Property:
        prop = self.repo.get_property_by_id(self.db, property_id)
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        return prop

    def create_property(self, data: PropertyPayload) -> Property:
        prop = self.repo.create_property(self.db, **self._build_record(data))
        logger.info(f"🏠 Property {prop.id} created ({prop.status})")
        return prop

    def update_property(self, property_id: int, data: PropertyPayload) -> Property:
        prop = self.get_property(property_id)
        prop = self.repo.update_property(self.db, prop, **self._build_record(data))
        logger.info(f"✏️ Property {prop.id} updated ({prop.status})")
        return prop

    def set_status(self, property_id: int, status: str) -> Property:
        prop = self.get_property(property_id)
        return self.repo.update_property(self.db, prop, status=status)

    def set_featured(self, property_id: int, featured: bool) -> Property:
        prop = self.get_property(property_id)
        return self.repo.update_property(self.db, prop, featured=featured)

    def delete_property(self, property_id: int) -> None:
        prop = self.get_property(property_id)
        self.repo.delete_property(self.db, prop)
        logger.info(f"🗑️ Property {property_id} deleted")

"""Property repository - Database operations for listings"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Property

VISIBLE_STATUSES = ("active", "sold", "rented")


class PropertyRepository:
    """Repository for property database operations"""

    @staticmethod
    def get_all_properties(db: Session) -> list[Property]:
        return db.query(Property).order_by(Property.created_at.desc(), Property.id.desc()).all()

    @staticmethod
    def get_visible_properties(db: Session, filters: Optional[dict] = None) -> list[Property]:
        """
        Publicly listed properties, featured first then newest.

        filters holds the scalar search criteria; keys with a None value are ignored.
        """
        filters = {k: v for k, v in (filters or {}).items() if v is not None}
        query = db.query(Property).filter(Property.status.in_(VISIBLE_STATUSES))

        if "type" in filters:
            query = query.filter(Property.type == filters["type"])
        if "property_type" in filters:
            query = query.filter(Property.property_type == filters["property_type"])
        if "min_price" in filters:
            query = query.filter(Property.price >= filters["min_price"])
        if "max_price" in filters:
            query = query.filter(Property.price <= filters["max_price"])
        if "min_area" in filters:
            query = query.filter(Property.area >= filters["min_area"])
        if "max_area" in filters:
            query = query.filter(Property.area <= filters["max_area"])
        if "bedrooms" in filters:
            query = query.filter(Property.bedrooms >= filters["bedrooms"])
        if "bathrooms" in filters:
            query = query.filter(Property.bathrooms >= filters["bathrooms"])
        if "min_year" in filters:
            query = query.filter(Property.year_built >= filters["min_year"])
        if "max_year" in filters:
            query = query.filter(Property.year_built <= filters["max_year"])
        if "furnished" in filters:
            query = query.filter(Property.furnished == filters["furnished"])

        return query.order_by(Property.featured.desc(), Property.created_at.desc(), Property.id.desc()).all()

    @staticmethod
    def get_property_by_id(db: Session, property_id: int, visible_only: bool = False) -> Optional[Property]:
        query = db.query(Property).filter(Property.id == property_id)
        if visible_only:
            query = query.filter(Property.status.in_(VISIBLE_STATUSES))
        return query.first()

    @staticmethod
    def get_related_candidates(db: Session, exclude_id: int, limit: int = 20) -> list[Property]:
        return (
            db.query(Property)
            .filter(Property.id != exclude_id, Property.status.in_(VISIBLE_STATUSES))
            .limit(limit)
            .all()
        )

    @staticmethod
    def create_property(db: Session, **property_data) -> Property:
        prop = Property(**property_data)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def update_property(db: Session, prop: Property, **updates) -> Property:
        for key, value in updates.items():
            if hasattr(prop, key):
                setattr(prop, key, value)
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def delete_property(db: Session, prop: Property) -> None:
        db.delete(prop)
        db.commit()

"""Blog repository - Database operations for blog posts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import BlogPost


class BlogRepository:
    """Repository for blog post database operations"""

    @staticmethod
    def get_all_posts(db: Session) -> list[BlogPost]:
        """Every post, newest first (admin list)"""
        return db.query(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()

    @staticmethod
    def get_published_posts(db: Session) -> list[BlogPost]:
        """Published posts, featured first then newest"""
        return (
            db.query(BlogPost)
            .filter(BlogPost.status == "published")
            .order_by(BlogPost.featured.desc(), BlogPost.published_at.desc(), BlogPost.id.desc())
            .all()
        )

    @staticmethod
    def get_post_by_id(db: Session, post_id: int) -> Optional[BlogPost]:
        return db.query(BlogPost).filter(BlogPost.id == post_id).first()

    @staticmethod
    def get_post_by_slug(db: Session, slug: str, published_only: bool = False) -> Optional[BlogPost]:
        query = db.query(BlogPost).filter(BlogPost.slug == slug)
        if published_only:
            query = query.filter(BlogPost.status == "published")
        return query.first()

    @staticmethod
    def get_recent_posts(db: Session, exclude_id: int, limit: int = 3) -> list[BlogPost]:
        return (
            db.query(BlogPost)
            .filter(BlogPost.status == "published", BlogPost.id != exclude_id)
            .order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(BlogPost.id).filter(BlogPost.slug == slug)
        if exclude_id is not None:
            query = query.filter(BlogPost.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def create_post(db: Session, **post_data) -> BlogPost:
        post = BlogPost(**post_data)
        db.add(post)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(post)
        return post

    @staticmethod
    def update_post(db: Session, post: BlogPost, **updates) -> BlogPost:
        for key, value in updates.items():
            if hasattr(post, key):
                setattr(post, key, value)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(post)
        return post

    @staticmethod
    def delete_post(db: Session, post: BlogPost) -> None:
        db.delete(post)
        db.commit()

"""Blog service - Publishing rules for blog posts"""

import logging
import math
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...database import utcnow
from ...models import BlogPost
from ...security_utils import sanitize_html, strip_html
from ...shared.validators import slugify
from .repository import BlogRepository
from .schemas import BlogPostCreate, BlogPostUpdate

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
RELATED_POSTS_LIMIT = 3


def estimate_read_time(content: Optional[str]) -> int:
    """Minutes to read, at 200 words per minute, rounded up"""
    words = len(strip_html(content or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def post_to_dict(post: BlogPost, include_read_time: bool = False) -> dict:
    data = {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "content": post.content,
        "featuredImage": post.featured_image,
        "author": post.author,
        "status": post.status,
        "featured": post.featured,
        "publishedAt": post.published_at,
        "createdAt": post.created_at,
        "updatedAt": post.updated_at,
    }
    if include_read_time:
        data["readTime"] = estimate_read_time(post.content)
    return data


class BlogService:
    """Service layer for blog business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BlogRepository()

    def _resolve_slug(self, slug: Optional[str], title: str, exclude_id: Optional[int] = None) -> str:
        slug = slugify(slug or "") or slugify(title)
        if not slug:
            raise HTTPException(status_code=400, detail="Slug is required")
        if self.repo.slug_taken(self.db, slug, exclude_id):
            raise HTTPException(status_code=409, detail="A post with this slug already exists")
        return slug

    # Public

    def list_published(self) -> list[BlogPost]:
        return self.repo.get_published_posts(self.db)

    def get_published_post(self, slug: str) -> tuple[BlogPost, list[BlogPost]]:
        post = self.repo.get_post_by_slug(self.db, slug, published_only=True)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        related = self.repo.get_recent_posts(self.db, exclude_id=post.id, limit=RELATED_POSTS_LIMIT)
        return post, related

    # Admin

    def list_posts(self) -> list[BlogPost]:
        return self.repo.get_all_posts(self.db)

    def get_post(self, post_id: int) -> BlogPost:
        post = self.repo.get_post_by_id(self.db, post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post

    def create_post(self, data: BlogPostCreate) -> BlogPost:
        status = "draft" if data.saveAsDraft else data.status
        post_data = {
            "title": data.title,
            "slug": self._resolve_slug(data.slug, data.title),
            "excerpt": (data.excerpt or "").strip() or None,
            "content": sanitize_html(data.content),
            "featured_image": data.featuredImage or None,
            "author": (data.author or "").strip() or None,
            "status": status,
            "featured": data.featured,
            "published_at": utcnow() if status == "published" else None,
        }

        try:
            post = self.repo.create_post(self.db, **post_data)
        except IntegrityError as e:
            raise HTTPException(status_code=409, detail="A post with this slug already exists") from e

        logger.info(f"📝 Blog post {post.id} created ({post.status}): {post.slug}")
        return post

    def update_post(self, post_id: int, data: BlogPostUpdate) -> BlogPost:
        post = self.get_post(post_id)

        updates = {}
        title = post.title
        if data.title is not None:
            title = data.title.strip()
            if not title:
                raise HTTPException(status_code=400, detail="Title is required")
            updates["title"] = title
        if data.slug is not None and slugify(data.slug) != post.slug:
            updates["slug"] = self._resolve_slug(data.slug, title, exclude_id=post.id)
        if data.excerpt is not None:
            updates["excerpt"] = data.excerpt.strip() or None
        if data.content is not None:
            if not data.content.strip():
                raise HTTPException(status_code=400, detail="Content is required")
            updates["content"] = sanitize_html(data.content)
        if data.featuredImage is not None:
            updates["featured_image"] = data.featuredImage or None
        if data.author is not None:
            updates["author"] = data.author.strip() or None
        if data.featured is not None:
            updates["featured"] = data.featured

        status = "draft" if data.saveAsDraft else (data.status or post.status)
        updates["status"] = status
        # First publication stamps the date; later edits keep it
        if status == "published" and post.published_at is None:
            updates["published_at"] = utcnow()

        try:
            post = self.repo.update_post(self.db, post, **updates)
        except IntegrityError as e:
            raise HTTPException(status_code=409, detail="A post with this slug already exists") from e

        logger.info(f"✏️ Blog post {post.id} updated ({post.status})")
        return post

    def delete_post(self, post_id: int) -> None:
        post = self.get_post(post_id)
        self.repo.delete_post(self.db, post)
        logger.info(f"🗑️ Blog post {post_id} deleted")

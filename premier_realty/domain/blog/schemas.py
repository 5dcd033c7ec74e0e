"""Blog domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import BLOG_STATUSES


class BlogPostBase(BaseModel):
    title: str
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: str
    featuredImage: Optional[str] = None
    author: Optional[str] = None
    status: str = "draft"
    featured: bool = False

    @field_validator("title", "content")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("This field is required")
        return v.strip()

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in BLOG_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(BLOG_STATUSES)}")
        return v


class BlogPostCreate(BlogPostBase):
    """Schema for creating a blog post"""

    saveAsDraft: bool = False


class BlogPostUpdate(BaseModel):
    """Schema for updating a blog post"""

    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    featuredImage: Optional[str] = None
    author: Optional[str] = None
    status: Optional[str] = None
    featured: Optional[bool] = None
    saveAsDraft: bool = False

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in BLOG_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(BLOG_STATUSES)}")
        return v


class BlogPostResponse(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    featuredImage: Optional[str] = None
    author: Optional[str] = None
    status: str
    featured: bool
    publishedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    readTime: Optional[int] = None


class BlogPostDetail(BaseModel):
    """Public post page: the post and the newest other posts"""

    post: BlogPostResponse
    related: list[BlogPostResponse]

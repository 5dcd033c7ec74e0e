"""Blog router - Public blog pages and admin post management"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import AdminUser
from ...schemas import MessageResponse
from .schemas import BlogPostCreate, BlogPostDetail, BlogPostResponse, BlogPostUpdate
from .service import BlogService, post_to_dict

router = APIRouter(prefix="/blog", tags=["Blog"])
admin_router = APIRouter(prefix="/admin/blog", tags=["Admin Blog"])


def get_blog_service(db: Session = Depends(get_db)) -> BlogService:
    """Dependency injection for BlogService"""
    return BlogService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("", response_model=list[BlogPostResponse])
async def list_published_posts(service: BlogService = Depends(get_blog_service)):
    """Published posts, featured first"""
    return [post_to_dict(post, include_read_time=True) for post in service.list_published()]


@router.get("/{slug}", response_model=BlogPostDetail)
async def get_published_post(slug: str, service: BlogService = Depends(get_blog_service)):
    post, related = service.get_published_post(slug)
    return {
        "post": post_to_dict(post, include_read_time=True),
        "related": [post_to_dict(p, include_read_time=True) for p in related],
    }


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=list[BlogPostResponse])
async def list_posts(
    admin: AdminUser = Depends(get_current_admin),
    service: BlogService = Depends(get_blog_service),
):
    return [post_to_dict(post) for post in service.list_posts()]


@admin_router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(
    post_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: BlogService = Depends(get_blog_service),
):
    return post_to_dict(service.get_post(post_id))


@admin_router.post("", response_model=BlogPostResponse, status_code=201)
async def create_post(
    data: BlogPostCreate,
    admin: AdminUser = Depends(get_current_admin),
    service: BlogService = Depends(get_blog_service),
):
    return post_to_dict(service.create_post(data))


@admin_router.put("/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: int,
    data: BlogPostUpdate,
    admin: AdminUser = Depends(get_current_admin),
    service: BlogService = Depends(get_blog_service),
):
    return post_to_dict(service.update_post(post_id, data))


@admin_router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    admin: AdminUser = Depends(get_current_admin),
    service: BlogService = Depends(get_blog_service),
):
    service.delete_post(post_id)
    return {"message": "Post deleted"}

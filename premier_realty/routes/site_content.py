"""
Site Content Routes
The editable copy of the public pages, stored as one JSON document
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..models import AdminUser, SiteContent
from ..schemas import SiteContentResponse, SiteContentUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/site-content", tags=["Site Content"])


def _get_row(db: Session) -> SiteContent:
    return db.query(SiteContent).order_by(SiteContent.id).first()


@router.get("", response_model=SiteContentResponse)
async def get_site_content(db: Session = Depends(get_db)):
    row = _get_row(db)
    if not row:
        return {"content": {}, "updatedAt": None}
    return {"content": row.content or {}, "updatedAt": row.updated_at}


@router.put("", response_model=SiteContentResponse)
async def update_site_content(
    data: SiteContentUpdate,
    admin: AdminUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    row = _get_row(db)
    if row:
        row.content = data.content
    else:
        row = SiteContent(content=data.content)
        db.add(row)
    db.commit()
    db.refresh(row)

    logger.info(f"✏️ Site content updated by {admin.email}")
    return {"content": row.content, "updatedAt": row.updated_at}

"""Admin account routes"""

from fastapi import APIRouter, Depends

from ..auth import get_current_admin
from ..models import AdminUser
from ..schemas import AdminUserResponse

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/me", response_model=AdminUserResponse)
async def get_me(admin: AdminUser = Depends(get_current_admin)):
    return admin

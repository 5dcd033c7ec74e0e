import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import func
from sqlalchemy.orm import Session

from .database import get_db
from .models import AdminUser
from .security_utils import verify_platform_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> AdminUser:
    """
    Authenticate an admin from the platform-issued access token.

    The token proves who the caller is; membership in admin_users decides access.
    """
    claims = verify_platform_token(credentials.credentials)
    if not claims:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    email = (claims.get("email") or "").strip().lower()
    if not email:
        logger.warning("❌ Token has no email claim")
        raise HTTPException(status_code=401, detail="Invalid token: email missing")

    admin = db.query(AdminUser).filter(func.lower(AdminUser.email) == email).first()
    if not admin:
        logger.warning(f"🚫 Non-admin login attempt: {email}")
        raise HTTPException(status_code=403, detail="You do not have admin access")

    return admin

"""
Cron Routes
Endpoint form of the scheduled jobs, for external schedulers
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..config import CRON_SECRET
from ..database import get_db
from ..security_utils import constant_time_compare
from ..services.reminder_service import send_daily_reminder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"])


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Require Authorization: Bearer <CRON_SECRET>"""
    if not CRON_SECRET:
        logger.error("❌ CRON_SECRET not configured")
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not authorization or not constant_time_compare(authorization, f"Bearer {CRON_SECRET}"):
        logger.warning("🚫 Rejected cron call with bad secret")
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.get("/daily-reminder")
async def daily_reminder(_: None = Depends(verify_cron_secret), db: Session = Depends(get_db)):
    """Email the operator today's appointments"""
    try:
        return await send_daily_reminder(db)
    except Exception as e:
        logger.error(f"❌ Daily reminder failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to send daily reminder") from e

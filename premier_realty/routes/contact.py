"""
Contact Form Routes
Forwards public contact-form submissions to the operator mailbox
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from .. import email_service
from ..rate_limiter import contact_rate_limiter
from ..schemas import ContactRequest, MessageResponse
from ..shared.validators import validate_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["Contact"])

MAX_MESSAGE_LENGTH = 5000


@router.post("", response_model=MessageResponse)
async def submit_contact_form(data: ContactRequest, _: None = Depends(contact_rate_limiter)):
    fields = {
        "name": (data.name or "").strip(),
        "email": (data.email or "").strip(),
        "phone": (data.phone or "").strip(),
        "subject": (data.subject or "").strip(),
        "message": (data.message or "").strip(),
    }
    if not all(fields.values()):
        raise HTTPException(status_code=400, detail="All fields are required")

    try:
        fields["email"] = validate_email(fields["email"])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    if len(fields["message"]) > MAX_MESSAGE_LENGTH:
        raise HTTPException(status_code=400, detail="Message is too long")

    try:
        await email_service.send_contact_message(**fields)
    except Exception as e:
        logger.error(f"❌ Contact form delivery failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to send message") from e

    logger.info(f"✅ Contact message forwarded from {fields['email']}")
    return {"message": "Message sent successfully"}

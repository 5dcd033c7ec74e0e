"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import ADMIN_EMAIL, BRAND_NAME, EMAIL_FROM_ADDRESS, RESEND_API_KEY, SITE_URL
from .email_templates import (
    contact_message_template,
    daily_digest_template,
    new_reservation_admin_template,
    reservation_confirmed_template,
    reservation_received_template,
    reservation_rejected_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfigured(Exception):
    """Raised when an email is requested but no transport or recipient is configured"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # Newer mjml releases return an object with html/errors attributes
        if isinstance(result, dict):
            errors, html = result.get("errors"), result.get("html", "")
        else:
            errors, html = getattr(result, "errors", None), getattr(result, "html", str(result))
        if errors:
            logger.warning(f"MJML compilation warnings: {errors}")
        return html
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address
        reply_to: Optional reply-to address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfigured("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        email_data = {
            "from": from_address or EMAIL_FROM_ADDRESS,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
        if reply_to:
            email_data["reply_to"] = reply_to

        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


def _require_admin_email() -> str:
    if not ADMIN_EMAIL:
        logger.error("❌ ADMIN_EMAIL not configured")
        raise EmailNotConfigured("ADMIN_EMAIL not configured")
    return ADMIN_EMAIL


# ============================================
# Pre-built Emails for Booking and Site Events
# ============================================


async def send_new_reservation_notification(
    name: str,
    email: str,
    phone: Optional[str],
    message: Optional[str],
    date_label: str,
    time: str,
) -> dict:
    """Notify the operator of a new consultation request"""
    mjml_content = new_reservation_admin_template(
        name, email, phone, message, date_label, time, admin_url=f"{SITE_URL}/admin"
    )
    return await send_email(
        to=_require_admin_email(),
        subject=f"New Consultation Request - {name}",
        mjml_content=mjml_content,
        reply_to=email,
    )


async def send_reservation_received(to: str, name: str, date_label: str, time: str) -> dict:
    """Acknowledge a booking to the customer"""
    mjml_content = reservation_received_template(name, date_label, time)
    return await send_email(
        to=to,
        subject=f"We Received Your Consultation Request - {BRAND_NAME}",
        mjml_content=mjml_content,
    )


async def send_reservation_confirmation(
    to: str, name: str, date_label: str, time: str, meet_link: Optional[str] = None
) -> dict:
    mjml_content = reservation_confirmed_template(name, date_label, time, meet_link)
    return await send_email(
        to=to,
        subject=f"Your Appointment is Confirmed - {BRAND_NAME}",
        mjml_content=mjml_content,
    )


async def send_reservation_rejection(
    to: str, name: str, date_label: str, time: str, reason: Optional[str] = None
) -> dict:
    mjml_content = reservation_rejected_template(name, date_label, time, reason)
    return await send_email(
        to=to,
        subject=f"Regarding Your Appointment Request - {BRAND_NAME}",
        mjml_content=mjml_content,
    )


async def send_contact_message(name: str, email: str, phone: str, subject: str, message: str) -> dict:
    """Forward a contact form submission to the operator"""
    mjml_content = contact_message_template(name, email, phone, subject, message)
    return await send_email(
        to=_require_admin_email(),
        subject=f"Contact Form: {subject} - {name}",
        mjml_content=mjml_content,
        reply_to=email,
    )


async def send_daily_digest(date_label: str, appointments: list[dict]) -> dict:
    """Morning summary of today's appointments for the operator"""
    count = len(appointments)
    mjml_content = daily_digest_template(date_label, appointments)
    return await send_email(
        to=_require_admin_email(),
        subject=f"📅 You have {count} appointment{'s' if count != 1 else ''} today",
        mjml_content=mjml_content,
    )

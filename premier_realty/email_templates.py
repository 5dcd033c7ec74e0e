"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility.
Callers pass raw values; every user supplied string is escaped here.
"""

from typing import Optional

from .config import BRAND_NAME, SITE_URL
from .utils.sanitization import sanitize_multiline, sanitize_string

# Brand colors - Navy/Amber color scheme
THEME = {
    "primary": "#f59e0b",
    "primary_dark": "#d97706",
    "primary_light": "#fef3c7",
    "navy": "#0c0a1d",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
    "danger": "#ef4444",
}

LOGO_URL = f"{SITE_URL}/logo.png"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="{THEME['navy']}" padding="32px 20px">
          <mj-column>
            <mj-image
              src="{LOGO_URL}"
              alt="{BRAND_NAME}"
              width="140px"
              href="{SITE_URL}"
              padding="0" />
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © {BRAND_NAME}. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _appointment_card(date_label: str, time: str) -> str:
    return f"""
    <mj-text background-color="{THEME['primary_light']}" padding="16px 20px" font-size="18px" font-weight="600" color="{THEME['text_primary']}">
      📅 {sanitize_string(date_label)}<br/>
      🕐 {sanitize_string(time)} ({BRAND_NAME} office time)
    </mj-text>
    """


def new_reservation_admin_template(
    name: str,
    email: str,
    phone: Optional[str],
    message: Optional[str],
    date_label: str,
    time: str,
    admin_url: Optional[str] = None,
) -> str:
    """Operator notification for a new consultation request"""
    message_section = ""
    if message:
        message_section = f"""
    <mj-text font-weight="600" padding="16px 0 4px 0">Message</mj-text>
    <mj-text color="{THEME['text_muted']}" padding="0">{sanitize_multiline(message)}</mj-text>
    """

    content = f"""
    <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
      A new consultation has been requested through the website.
    </mj-text>

    {_appointment_card(date_label, time)}

    <mj-text padding="24px 0 0 0">
      <strong>Name:</strong> {sanitize_string(name)}<br/>
      <strong>Email:</strong> {sanitize_string(email)}<br/>
      <strong>Phone:</strong> {sanitize_string(phone) or "—"}
    </mj-text>

    {message_section}
    """

    return get_base_template(
        title="New Consultation Request",
        preview_text=f"{sanitize_string(name)} booked {sanitize_string(date_label)} at {sanitize_string(time)}",
        content_sections=content,
        cta_url=admin_url,
        cta_label="Review in Admin" if admin_url else None,
    )


def reservation_received_template(name: str, date_label: str, time: str) -> str:
    """Customer acknowledgement sent right after booking"""
    content = f"""
    <mj-text>
      Dear {sanitize_string(name)},
    </mj-text>

    <mj-text>
      Your exclusive consultation with {BRAND_NAME} has been scheduled. We look forward to helping
      you discover your perfect property.
    </mj-text>

    {_appointment_card(date_label, time)}

    <mj-text color="{THEME['text_muted']}" padding="24px 0 0 0">
      Our team will review your request and send you a confirmation with the video meeting link.
    </mj-text>
    """

    return get_base_template(
        title="We Received Your Consultation Request",
        preview_text=f"Your consultation on {sanitize_string(date_label)} at {sanitize_string(time)}",
        content_sections=content,
    )


def reservation_confirmed_template(
    name: str, date_label: str, time: str, meet_link: Optional[str] = None
) -> str:
    """Customer confirmation with the Google Meet link when one exists"""
    meet_section = ""
    if meet_link:
        meet_section = f"""
    <mj-text padding="24px 0 0 0">
      Join the meeting from any device using Google Meet:<br/>
      <a href="{sanitize_string(meet_link)}" style="color: {THEME['primary_dark']};">{sanitize_string(meet_link)}</a>
    </mj-text>
    """

    content = f"""
    <mj-text>
      Dear {sanitize_string(name)},
    </mj-text>

    <mj-text>
      Great news! Your consultation appointment has been confirmed.
    </mj-text>

    {_appointment_card(date_label, time)}

    {meet_section}

    <mj-text color="{THEME['text_muted']}" padding="24px 0 0 0">
      If you need to reschedule, simply reply to this email.
    </mj-text>
    """

    return get_base_template(
        title="Your Appointment is Confirmed",
        preview_text=f"See you on {sanitize_string(date_label)} at {sanitize_string(time)}",
        content_sections=content,
        cta_url=meet_link,
        cta_label="Join Google Meet" if meet_link else None,
    )


def reservation_rejected_template(
    name: str, date_label: str, time: str, reason: Optional[str] = None
) -> str:
    """Customer notice that a request could not be accommodated"""
    reason_section = ""
    if reason:
        reason_section = f"""
    <mj-text font-weight="600" padding="16px 0 4px 0">Reason</mj-text>
    <mj-text color="{THEME['text_muted']}" padding="0">{sanitize_multiline(reason)}</mj-text>
    """

    content = f"""
    <mj-text>
      Dear {sanitize_string(name)},
    </mj-text>

    <mj-text>
      We regret to inform you that your consultation request for the following date and time could
      not be accommodated at this time.
    </mj-text>

    {_appointment_card(date_label, time)}

    {reason_section}

    <mj-text padding="24px 0 0 0">
      You are welcome to book another time that suits you.
    </mj-text>
    """

    return get_base_template(
        title="Regarding Your Appointment Request",
        preview_text="An update about your consultation request",
        content_sections=content,
        cta_url=f"{SITE_URL}/book",
        cta_label="Book Another Time",
    )


def contact_message_template(name: str, email: str, phone: str, subject: str, message: str) -> str:
    """Contact form submission forwarded to the operator"""
    content = f"""
    <mj-text padding="0 0 16px 0">
      <strong>Name:</strong> {sanitize_string(name)}<br/>
      <strong>Email:</strong> {sanitize_string(email)}<br/>
      <strong>Phone:</strong> {sanitize_string(phone)}<br/>
      <strong>Subject:</strong> {sanitize_string(subject)}
    </mj-text>

    <mj-divider border-color="{THEME['border']}" border-width="1px" padding="8px 0 16px 0" />

    <mj-text>{sanitize_multiline(message)}</mj-text>
    """

    return get_base_template(
        title="New Contact Form Message",
        preview_text=f"{sanitize_string(name)}: {sanitize_string(subject)}",
        content_sections=content,
    )


def daily_digest_template(date_label: str, appointments: list[dict]) -> str:
    """
    Morning summary of today's appointments.

    Each appointment dict carries name, email, phone, time, status and meet_link.
    """
    rows = ""
    for appointment in appointments:
        status_color = THEME["success"] if appointment["status"] == "confirmed" else THEME["primary_dark"]
        meet = ""
        if appointment.get("meet_link"):
            meet = f'<br/><a href="{sanitize_string(appointment["meet_link"])}" style="color: {THEME["primary_dark"]};">Google Meet</a>'
        rows += f"""
        <tr style="border-bottom: 1px solid {THEME['border']};">
          <td style="padding: 12px 8px; font-weight: 600;">{sanitize_string(appointment['time'])}</td>
          <td style="padding: 12px 8px;">
            {sanitize_string(appointment['name'])}<br/>
            <span style="color: {THEME['text_muted']}; font-size: 14px;">{sanitize_string(appointment['email'])} · {sanitize_string(appointment.get('phone')) or "—"}</span>
            {meet}
          </td>
          <td style="padding: 12px 8px; color: {status_color}; text-transform: capitalize;">{appointment['status']}</td>
        </tr>
        """

    count = len(appointments)
    content = f"""
    <mj-text color="{THEME['text_muted']}" padding="0 0 16px 0">
      {sanitize_string(date_label)} · {count} appointment{"s" if count != 1 else ""}
    </mj-text>

    <mj-table font-size="15px" color="{THEME['text_secondary']}">
      {rows}
    </mj-table>
    """

    return get_base_template(
        title="Today's Appointments",
        preview_text=f"You have {count} appointment(s) today",
        content_sections=content,
        cta_url=f"{SITE_URL}/admin",
        cta_label="Open Dashboard",
    )

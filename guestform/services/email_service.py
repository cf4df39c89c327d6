"""
Admin notification e-mail for new and updated guest forms, sent via Resend
with the generated PDF attached.
"""

import asyncio
import logging
from typing import Optional

import resend
from jinja2 import Environment, select_autoescape

from guestform.core.config import settings
from guestform.models import GuestSubmission

logger = logging.getLogger(__name__)

_env = Environment(autoescape=select_autoescape(default=True))

ADMIN_TEMPLATE = _env.from_string(
    """
<h1>{{ heading }}</h1>
<p>Dear Admin,</p>
<p>A guest form has been submitted. Here are the details:</p>
<ul>
  <li>Unit Information:
    <ul>
      <li>Unit Owner: {{ b.unit_owner }}</li>
      <li>Tower &amp; Unit Number: {{ b.tower_and_unit_number }}</li>
      <li>Onsite Contact Person: {{ b.owner_onsite_contact_person }}</li>
      <li>Contact Number: {{ b.owner_contact_number }}</li>
    </ul>
  </li>
  <li>Primary Guest:
    <ul>
      <li>Name: {{ b.primary_guest_name }}</li>
      <li>Email: {{ b.guest_email }}</li>
      <li>Phone: {{ b.guest_phone_number }}</li>
      <li>Address: {{ b.guest_address }}</li>
      <li>Nationality: {{ b.nationality or 'Not specified' }}</li>
    </ul>
  </li>
  <li>Stay Details:
    <ul>
      <li>Check-in: {{ b.check_in_date }} {{ b.check_in_time or '' }}</li>
      <li>Check-out: {{ b.check_out_date }} {{ b.check_out_time or '' }}</li>
      <li>Number of Nights: {{ b.number_of_nights or 'Not specified' }}</li>
      <li>Number of Adults: {{ b.number_of_adults or 'Not specified' }}</li>
      <li>Number of Children: {{ b.number_of_children or 0 }}</li>
    </ul>
  </li>
  {% if guests %}
  <li>Additional Guests:
    <ul>{% for g in guests %}<li>{{ g }}</li>{% endfor %}</ul>
  </li>
  {% endif %}
  {% if b.need_parking %}
  <li>Car Information:
    <ul>
      <li>Car Plate Number: {{ b.car_plate_number }}</li>
      <li>Car Brand &amp; Model: {{ b.car_brand_model }}</li>
      <li>Car Color: {{ b.car_color }}</li>
    </ul>
  </li>
  {% endif %}
  {% if b.has_pets %}
  <li>Pet Information:
    <ul>
      <li>Name: {{ b.pet_name }}</li>
      <li>Breed: {{ b.pet_breed }}</li>
      <li>Age: {{ b.pet_age }}</li>
      <li>Vaccination Date: {{ b.pet_vaccination_date }}</li>
    </ul>
  </li>
  {% endif %}
  {% if b.guest_special_requests %}
  <li>Special Requests: {{ b.guest_special_requests }}</li>
  {% endif %}
</ul>
<p>Payment receipt: <a href="{{ b.payment_receipt_url }}">{{ b.payment_receipt_url }}</a></p>
<p>Valid ID: <a href="{{ b.valid_id_url }}">{{ b.valid_id_url }}</a></p>
"""
)


def render_admin_email(booking: GuestSubmission, is_update: bool = False) -> str:
    guests = [
        g
        for g in (booking.guest2_name, booking.guest3_name, booking.guest4_name, booking.guest5_name)
        if g
    ]
    heading = "Updated Guest Form Submission" if is_update else "New Guest Form Submission"
    return ADMIN_TEMPLATE.render(b=booking, guests=guests, heading=heading)


def build_subject(booking: GuestSubmission, is_update: bool = False) -> str:
    prefix = "Updated Guest Form" if is_update else "New Guest Form"
    return (
        f"{prefix}: {booking.primary_guest_name} "
        f"({booking.check_in_date} to {booking.check_out_date})"
    )


async def send_admin_notification(
    booking: GuestSubmission,
    pdf_bytes: Optional[bytes] = None,
    is_update: bool = False,
) -> dict:
    """
    E-mail the submission to the configured admins.
    Returns a result dict; skipped when Resend or recipients are not configured.
    """
    recipients = settings.admin_email_list
    if not settings.resend_api_key or not recipients:
        logger.info("Email not configured (RESEND_API_KEY/ADMIN_EMAILS), skipping notification")
        return {"success": True, "sent": 0, "skipped": True}

    resend.api_key = settings.resend_api_key

    email_data = {
        "from": settings.email_from,
        "to": recipients,
        "reply_to": booking.guest_email or None,
        "subject": build_subject(booking, is_update),
        "html": render_admin_email(booking, is_update),
    }
    if not email_data["reply_to"]:
        del email_data["reply_to"]

    if pdf_bytes:
        safe_name = booking.primary_guest_name.replace(" ", "_")
        email_data["attachments"] = [
            {"filename": f"guest-form-{safe_name}.pdf", "content": list(pdf_bytes)}
        ]

    try:
        logger.info(f"📧 Sending guest form email via Resend to: {recipients}")
        response = await asyncio.to_thread(resend.Emails.send, email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return {"success": True, "sent": len(recipients)}
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}", exc_info=True)
        return {"success": False, "sent": 0, "error": str(e)}

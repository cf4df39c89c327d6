"""
Google Calendar mirror of bookings.

Each booking is one event; the booking id is kept in the event's private
extended properties so it can be found again for updates and cancellation.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from guestform.core.config import settings
from guestform.domain.dates import format_time_ampm, parse_date
from guestform.models import GuestSubmission

logger = logging.getLogger(__name__)

TEST_MARKER = "[TEST]"


def is_test_booking(booking: GuestSubmission) -> bool:
    return (booking.guest_facebook_name or "").startswith(TEST_MARKER)


def event_datetime(date_value: str, time_value: Optional[str], is_check_in: bool) -> str:
    """Stay date + "02:00 PM" style time -> "2024-01-05T14:00:00" """
    day = parse_date(date_value)
    time_12h = format_time_ampm(time_value, is_check_in=is_check_in)
    time_24h = datetime.strptime(time_12h, "%I:%M %p").strftime("%H:%M")
    return f"{day.isoformat()}T{time_24h}:00"


def build_event_summary(booking: GuestSubmission) -> str:
    pax = (booking.number_of_adults or 0) + (booking.number_of_children or 0)
    nights = booking.number_of_nights or 0
    summary = f"{pax}pax {nights}night{'s' if nights > 1 else ''} - {booking.primary_guest_name}"
    if is_test_booking(booking):
        summary = f"{TEST_MARKER} {summary}"
    return summary


def build_event_description(booking: GuestSubmission) -> str:
    lines = [
        "<strong>Guest Information</strong>",
        f"Facebook Name: {booking.guest_facebook_name}",
        f"Primary Guest: {booking.primary_guest_name}",
        f"Email: {booking.guest_email}",
        f"Phone Number: {booking.guest_phone_number}",
        f"Address: {booking.guest_address}",
        f"Nationality: {booking.nationality or ''}",
    ]

    extra_guests = [
        (i, name)
        for i, name in enumerate(
            [booking.guest2_name, booking.guest3_name, booking.guest4_name, booking.guest5_name],
            start=2,
        )
        if name
    ]
    if extra_guests:
        lines.append("<strong>Additional Guests</strong>")
        lines.extend(f"Guest {i}: {name}" for i, name in extra_guests)

    lines += [
        "",
        "<strong>Stay Details</strong>",
        f"Check-in Date: {booking.check_in_date} {booking.check_in_time or ''}",
        f"Check-out Date: {booking.check_out_date} {booking.check_out_time or ''}",
        f"Number of Nights: {booking.number_of_nights or 'N/A'}",
        f"Number of Adults: {booking.number_of_adults}",
        f"Number of Children: {booking.number_of_children}",
        "",
        "<strong>Parking Information</strong>",
    ]
    if booking.need_parking:
        lines += [
            "Parking Required: Yes",
            f"Car Plate: {booking.car_plate_number or 'N/A'}",
            f"Car Brand/Model: {booking.car_brand_model or 'N/A'}",
            f"Car Color: {booking.car_color or 'N/A'}",
        ]
    else:
        lines.append("Parking Required: No")

    lines += ["", "<strong>Pet Information</strong>"]
    if booking.has_pets:
        lines += [
            "Has Pets: Yes",
            f"Pet Name: {booking.pet_name or 'N/A'}",
            f"Pet Breed: {booking.pet_breed or 'N/A'}",
            f"Pet Age: {booking.pet_age or 'N/A'}",
            f"Vaccination Date: {booking.pet_vaccination_date or 'N/A'}",
        ]
    else:
        lines.append("Has Pets: No")

    lines += [
        "",
        "<strong>Additional Information</strong>",
        f"How Found Us: {booking.find_us}",
    ]
    if booking.find_us_details:
        lines.append(f"Details: {booking.find_us_details}")
    lines += [
        f"Special Requests: {booking.guest_special_requests or 'None'}",
        "",
        "<strong>Documents</strong>",
        f"Payment Receipt: {booking.payment_receipt_url}",
        f"Valid ID: {booking.valid_id_url}",
    ]
    return "\n".join(lines)


def build_event(booking: GuestSubmission, timezone: str) -> dict:
    return {
        "summary": build_event_summary(booking),
        "description": build_event_description(booking),
        "start": {
            "dateTime": event_datetime(booking.check_in_date, booking.check_in_time, True),
            "timeZone": timezone,
        },
        "end": {
            "dateTime": event_datetime(booking.check_out_date, booking.check_out_time, False),
            "timeZone": timezone,
        },
        "colorId": "2",
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "email", "minutes": 24 * 60},
                {"method": "popup", "minutes": 60},
            ],
        },
        "extendedProperties": {"private": {"bookingId": booking.id}},
    }


class GoogleCalendarService:
    """Keeps one calendar event per booking"""

    SCOPES = ["https://www.googleapis.com/auth/calendar.events"]

    def __init__(self):
        self.calendar_id = settings.google_calendar_id
        self.service = None

    @property
    def configured(self) -> bool:
        return bool(self.calendar_id) and settings.google_configured

    def connect(self):
        creds = service_account.Credentials.from_service_account_file(
            settings.google_service_account_file, scopes=self.SCOPES
        )
        self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)

    def _events(self):
        if not self.service:
            self.connect()
        return self.service.events()

    def find_event_ids(self, booking_id: str) -> list[str]:
        response = (
            self._events()
            .list(
                calendarId=self.calendar_id,
                privateExtendedProperty=f"bookingId={booking_id}",
                showDeleted=False,
            )
            .execute()
        )
        return [item["id"] for item in response.get("items", [])]

    def upsert_event(self, booking: GuestSubmission) -> dict:
        body = build_event(booking, settings.booking_timezone)
        existing = self.find_event_ids(booking.id)

        if existing:
            event = (
                self._events()
                .update(calendarId=self.calendar_id, eventId=existing[0], body=body)
                .execute()
            )
            logger.info(f"🗓️ Updated calendar event {event.get('id')} for booking {booking.id}")
            return {"success": True, "eventId": event.get("id"), "updated": True}

        event = self._events().insert(calendarId=self.calendar_id, body=body).execute()
        logger.info(f"🗓️ Created calendar event {event.get('id')} for booking {booking.id}")
        return {"success": True, "eventId": event.get("id"), "updated": False}

    def _delete_event(self, event_id: str) -> bool:
        try:
            self._events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
            return True
        except HttpError as e:
            # Already gone
            if e.resp.status in (404, 410):
                return False
            raise

    def delete_events_for_booking(self, booking_id: str) -> dict:
        event_ids = self.find_event_ids(booking_id)
        if not event_ids:
            logger.info(f"No calendar event found for booking {booking_id}")
            return {"success": True, "deleted": 0, "message": "No calendar event found"}

        deleted = sum(1 for event_id in event_ids if self._delete_event(event_id))
        logger.info(f"🗓️ Deleted {deleted} calendar event(s) for booking {booking_id}")
        return {"success": True, "deleted": deleted}

    def delete_test_events(self) -> dict:
        deleted = 0
        total = 0
        page_token = None
        while True:
            response = (
                self._events()
                .list(calendarId=self.calendar_id, maxResults=2500, pageToken=page_token)
                .execute()
            )
            for event in response.get("items", []):
                if (event.get("summary") or "").startswith(TEST_MARKER):
                    total += 1
                    try:
                        if self._delete_event(event["id"]):
                            deleted += 1
                    except HttpError as e:
                        logger.error(f"Failed to delete test event {event['id']}: {e}")
            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.info(f"🗓️ Deleted {deleted}/{total} test calendar events")
        return {"success": True, "deleted": deleted, "total": total}

    async def _run(self, func, *args) -> dict:
        """Run a blocking API call in a thread, turning failures into a result dict"""
        if not self.configured:
            logger.info("Google Calendar not configured, skipping")
            return {"success": True, "deleted": 0, "skipped": True}
        try:
            return await asyncio.to_thread(func, *args)
        except Exception as e:
            logger.error(f"❌ Calendar operation {func.__name__} failed: {e}", exc_info=True)
            return {"success": False, "error": str(e), "deleted": 0}

    async def upsert_event_async(self, booking: GuestSubmission) -> dict:
        return await self._run(self.upsert_event, booking)

    async def delete_events_for_booking_async(self, booking_id: str) -> dict:
        return await self._run(self.delete_events_for_booking, booking_id)

    async def delete_test_events_async(self) -> dict:
        return await self._run(self.delete_test_events)


calendar_service = GoogleCalendarService()

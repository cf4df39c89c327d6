"""
Booking orchestration: guest form submission, retrieval, booked dates,
cancellation and test-data cleanup.

Storage goes through a BookingRepository; the date logic lives in
guestform.domain. Calendar, Sheets and e-mail are mirrors: their failures
are logged and reported, never rolled back into the stored booking.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from guestform.core.config import settings
from guestform.domain.dates import (
    count_nights,
    format_time_ampm,
    to_storage_format,
    today_in_manila,
)
from guestform.domain.overlap import BookedDateRange, active_booked_ranges, has_overlap
from guestform.models import BookingStatus, GuestSubmission
from guestform.repositories.booking_repository import BookingRepository
from guestform.schemas.booking import GuestFormOut, GuestFormSubmission
from guestform.services import upload_service as uploads
from guestform.services.calendar_service import calendar_service
from guestform.services.email_service import send_admin_notification
from guestform.services.errors import (
    BookingConflictError,
    BookingNotFoundError,
    BookingValidationError,
)
from guestform.services.pdf_service import generate_guest_form_pdf
from guestform.services.sheets_service import sheets_service

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    filename: str
    content: bytes


@dataclass
class SubmissionResult:
    booking: GuestSubmission
    is_update: bool
    mirrors: dict = field(default_factory=dict)


def parse_submission(fields: dict) -> GuestFormSubmission:
    """Validate raw form fields, turning pydantic errors into one readable message"""
    try:
        return GuestFormSubmission.model_validate(fields)
    except ValidationError as e:
        first = e.errors()[0]
        message = str(first.get("msg", "Invalid form data")).removeprefix("Value error, ")
        location = ".".join(str(p) for p in first.get("loc", ()))
        if first.get("type") == "missing":
            message = f"{location} is required"
        raise BookingValidationError(message) from e


def build_submission_record(form: GuestFormSubmission, file_urls: dict) -> dict:
    """Column values for a guest_submissions row"""
    nights = form.number_of_nights
    if nights is None:
        nights = count_nights(form.check_in_date, form.check_out_date)

    return {
        "guest_facebook_name": form.guest_facebook_name,
        "primary_guest_name": form.primary_guest_name.strip(),
        "guest_email": form.guest_email,
        "guest_phone_number": form.guest_phone_number,
        "guest_address": form.guest_address,
        "nationality": form.nationality,
        "check_in_date": to_storage_format(form.check_in_date),
        "check_out_date": to_storage_format(form.check_out_date),
        "check_in_time": format_time_ampm(form.check_in_time, is_check_in=True),
        "check_out_time": format_time_ampm(form.check_out_time, is_check_in=False),
        "number_of_adults": form.number_of_adults,
        "number_of_children": form.number_of_children,
        "number_of_nights": nights,
        "guest2_name": form.guest2_name,
        "guest3_name": form.guest3_name,
        "guest4_name": form.guest4_name,
        "guest5_name": form.guest5_name,
        "guest_special_requests": form.guest_special_requests,
        "find_us": form.find_us or "Facebook",
        "find_us_details": form.find_us_details,
        "need_parking": form.need_parking,
        "car_plate_number": form.car_plate_number,
        "car_brand_model": form.car_brand_model,
        "car_color": form.car_color,
        "has_pets": form.has_pets,
        "pet_name": form.pet_name,
        "pet_breed": form.pet_breed,
        "pet_age": form.pet_age,
        "pet_vaccination_date": (
            to_storage_format(form.pet_vaccination_date) if form.pet_vaccination_date else None
        ),
        "unit_owner": form.unit_owner or settings.default_unit_owner,
        "tower_and_unit_number": form.tower_and_unit_number or settings.default_tower_and_unit,
        "owner_onsite_contact_person": (
            form.owner_onsite_contact_person or settings.default_onsite_contact
        ),
        "owner_contact_number": form.owner_contact_number or settings.default_owner_contact_number,
        **file_urls,
    }


def booking_to_form(booking: GuestSubmission) -> GuestFormOut:
    status = getattr(booking.status, "value", booking.status) or BookingStatus.BOOKED.value
    return GuestFormOut(
        guest_facebook_name=booking.guest_facebook_name or "",
        primary_guest_name=booking.primary_guest_name or "",
        guest_email=booking.guest_email or "",
        guest_phone_number=booking.guest_phone_number or "",
        guest_address=booking.guest_address or "",
        check_in_date=to_storage_format(booking.check_in_date),
        check_in_time=format_time_ampm(booking.check_in_time, is_check_in=True),
        check_out_date=to_storage_format(booking.check_out_date),
        check_out_time=format_time_ampm(booking.check_out_time, is_check_in=False),
        nationality=booking.nationality or "",
        number_of_adults=booking.number_of_adults or 1,
        number_of_children=booking.number_of_children or 0,
        number_of_nights=booking.number_of_nights,
        guest2_name=booking.guest2_name or "",
        guest3_name=booking.guest3_name or "",
        guest4_name=booking.guest4_name or "",
        guest5_name=booking.guest5_name or "",
        guest_special_requests=booking.guest_special_requests or "",
        find_us=booking.find_us or "Facebook",
        find_us_details=booking.find_us_details or "",
        need_parking=bool(booking.need_parking),
        car_plate_number=booking.car_plate_number or "",
        car_brand_model=booking.car_brand_model or "",
        car_color=booking.car_color or "",
        has_pets=bool(booking.has_pets),
        pet_name=booking.pet_name or "",
        pet_breed=booking.pet_breed or "",
        pet_age=booking.pet_age or "",
        pet_vaccination_date=(
            to_storage_format(booking.pet_vaccination_date) if booking.pet_vaccination_date else ""
        ),
        payment_receipt_url=booking.payment_receipt_url or "",
        valid_id_url=booking.valid_id_url or "",
        pet_vaccination_url=booking.pet_vaccination_url or "",
        pet_image_url=booking.pet_image_url or "",
        unit_owner=booking.unit_owner or "",
        tower_and_unit_number=booking.tower_and_unit_number or "",
        owner_onsite_contact_person=booking.owner_onsite_contact_person or "",
        owner_contact_number=booking.owner_contact_number or "",
        status=status,
    )


def _deleted(result: dict) -> int:
    return result.get("deleted", 0) or 0


class BookingService:
    """Business logic for guest submissions"""

    # Form file field -> (bucket, required for new bookings)
    FILE_FIELDS = {
        "paymentReceipt": (uploads.PAYMENT_RECEIPTS, True),
        "validId": (uploads.VALID_IDS, True),
        "petVaccination": (uploads.PET_VACCINATIONS, False),
        "petImage": (uploads.PET_IMAGES, False),
    }

    REQUIRED_FILE_MESSAGES = {
        "paymentReceipt": "Payment receipt is required",
        "validId": "Valid ID is required",
    }

    def __init__(
        self,
        repo: BookingRepository,
        upload_service: uploads.UploadService = uploads.upload_service,
        calendar=calendar_service,
        sheets=sheets_service,
        notify=send_admin_notification,
        render_pdf=generate_guest_form_pdf,
        timezone: Optional[str] = None,
    ):
        self.repo = repo
        self.uploads = upload_service
        self.calendar = calendar
        self.sheets = sheets
        self.notify = notify
        self.render_pdf = render_pdf
        self.tz = ZoneInfo(timezone or settings.booking_timezone)

    async def _get_or_404(self, booking_id: str) -> GuestSubmission:
        booking = await self.repo.get(booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    async def check_dates(
        self, check_in: str, check_out: str, exclude_id: Optional[str] = None
    ) -> None:
        """Raise BookingConflictError if the stay overlaps an active booking"""
        existing = await self.repo.list_all()
        result = has_overlap(check_in, check_out, existing, exclude_id=exclude_id)
        if result.overlap:
            logger.warning(
                f"Booking dates {check_in} - {check_out} conflict with "
                f"{[b.id for b in result.conflicts]}"
            )
            raise BookingConflictError(result.conflicts)

    async def _store_files(
        self, files: dict, existing: Optional[GuestSubmission]
    ) -> dict:
        urls = {}
        for form_field, (bucket, required) in self.FILE_FIELDS.items():
            url_field = uploads.BUCKET_URL_FIELDS[bucket]
            upload: Optional[UploadedFile] = files.get(form_field)

            if upload and upload.content:
                urls[url_field] = await self.uploads.save(bucket, upload.filename, upload.content)
            elif existing is not None:
                urls[url_field] = getattr(existing, url_field)
            elif required:
                raise BookingValidationError(self.REQUIRED_FILE_MESSAGES[form_field])
            else:
                urls[url_field] = None
        return urls

    async def submit(
        self,
        form: GuestFormSubmission,
        files: dict,
        booking_id: Optional[str] = None,
    ) -> SubmissionResult:
        """
        Create a booking, or update it when booking_id is given.

        The overlap check excludes the booking being updated. Files omitted on
        update keep their stored URLs.
        """
        existing = await self._get_or_404(booking_id) if booking_id else None

        await self.check_dates(form.check_in_date, form.check_out_date, exclude_id=booking_id)

        file_urls = await self._store_files(files, existing)
        record = build_submission_record(form, file_urls)

        if existing is not None:
            logger.info(f"Updating booking {existing.id} for {record['primary_guest_name']}")
            booking = await self.repo.update(existing, record)
        else:
            logger.info(
                f"Creating booking for {record['primary_guest_name']} "
                f"({record['check_in_date']} - {record['check_out_date']})"
            )
            booking = await self.repo.add(record)

        mirrors = await self._mirror(booking, is_update=existing is not None)
        return SubmissionResult(booking=booking, is_update=existing is not None, mirrors=mirrors)

    async def _mirror(self, booking: GuestSubmission, is_update: bool) -> dict:
        try:
            pdf_bytes = await asyncio.to_thread(self.render_pdf, booking)
        except Exception as e:
            logger.error(f"❌ PDF generation failed for booking {booking.id}: {e}", exc_info=True)
            pdf_bytes = None

        email, calendar, sheets = await asyncio.gather(
            self.notify(booking, pdf_bytes, is_update),
            self.calendar.upsert_event_async(booking),
            self.sheets.upsert_booking_row_async(booking),
        )
        return {"email": email, "calendar": calendar, "sheets": sheets}

    async def get_form(self, booking_id: str) -> GuestFormOut:
        booking = await self._get_or_404(booking_id)
        return booking_to_form(booking)

    async def booked_dates(self, today: Optional[str] = None) -> list[BookedDateRange]:
        bookings = await self.repo.list_all()
        return list(active_booked_ranges(bookings, today or today_in_manila(self.tz)))

    async def cancel(self, booking_id: Optional[str], confirm) -> dict:
        """
        Soft-cancel a booking: the row is kept with status=canceled and its
        calendar event and sheet row are removed.
        """
        if not booking_id:
            raise BookingValidationError("Booking ID is required")
        if confirm is not True:
            raise BookingValidationError(
                'Cancellation requires confirmation. Send { "confirm": true } in request body.'
            )

        booking = await self._get_or_404(booking_id)

        if booking.status == BookingStatus.CANCELED:
            logger.info(f"Booking {booking_id} is already canceled")
        else:
            booking = await self.repo.mark_canceled(booking)
            logger.info(f"Booking {booking_id} ({booking.primary_guest_name}) canceled")

        calendar, sheets = await asyncio.gather(
            self.calendar.delete_events_for_booking_async(booking_id),
            self.sheets.delete_booking_row_async(booking_id),
        )
        results = {"calendar": calendar, "sheets": sheets, "database": {"success": True, "canceled": 1}}
        total_deleted = {"calendar": _deleted(calendar), "sheets": _deleted(sheets)}

        return {
            "bookingId": booking_id,
            "guestName": booking.primary_guest_name,
            "status": BookingStatus.CANCELED.value,
            "results": results,
            "summary": {
                "totalDeleted": total_deleted,
                "grandTotal": sum(total_deleted.values()),
            },
        }

    async def cleanup_test_data(self, confirm) -> dict:
        """
        Hard-delete test data everywhere: rows whose files carry TEST_, stored
        TEST_ files, and [TEST] calendar events and sheet rows.
        """
        if confirm is not True:
            raise BookingValidationError(
                'Cleanup requires confirmation. Send { "confirm": true } in request body.'
            )

        logger.info("🧹 Starting test data cleanup...")

        records = await self.repo.list_test_bookings()
        db_deleted = 0
        booking_files = 0
        for record in records:
            file_results = await self.uploads.delete_booking_files(record)
            booking_files += sum(_deleted(r) for r in file_results.values())
            await self.repo.delete(record)
            db_deleted += 1
            logger.info(f"✓ Deleted test booking {record.id} ({record.guest_facebook_name})")

        storage = await self.uploads.delete_test_files()
        calendar, sheets = await asyncio.gather(
            self.calendar.delete_test_events_async(),
            self.sheets.delete_test_rows_async(),
        )

        total_deleted = {
            "database": db_deleted,
            "storage": booking_files + sum(_deleted(r) for r in storage.values()),
            "calendar": _deleted(calendar),
            "sheets": _deleted(sheets),
        }
        logger.info(f"✅ Test data cleanup complete: {total_deleted}")

        return {
            "results": {
                "database": {"success": True, "deleted": db_deleted},
                "storage": storage,
                "calendar": calendar,
                "sheets": sheets,
            },
            "summary": {
                "totalDeleted": total_deleted,
                "grandTotal": sum(total_deleted.values()),
            },
        }

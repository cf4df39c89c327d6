"""
Tests for the calendar, sheets, e-mail and PDF renderings of a booking.
No Google or Resend calls are made.
"""
import pytest
from unittest.mock import MagicMock, patch

from guestform.services.calendar_service import (
    GoogleCalendarService,
    build_event,
    build_event_summary,
    event_datetime,
)
from guestform.services.email_service import build_subject, render_admin_email, send_admin_notification
from guestform.services.pdf_service import GuestFormPDFGenerator, generate_guest_form_pdf
from guestform.services.sheets_service import HEADERS, GoogleSheetsService, booking_to_row
from guestform.services.upload_service import file_name_from_url, sanitize_file_name


class TestCalendarEvent:
    def test_summary(self, booking_factory):
        booking = booking_factory(number_of_adults=2, number_of_children=1, number_of_nights=3)
        assert build_event_summary(booking) == "3pax 3nights - Juan Dela Cruz"

    def test_summary_single_night_and_test_marker(self, booking_factory):
        booking = booking_factory(guest_facebook_name="[TEST] Bot", number_of_nights=1,
                                  number_of_adults=1, number_of_children=0)
        assert build_event_summary(booking) == "[TEST] 1pax 1night - Juan Dela Cruz"

    def test_event_times(self):
        assert event_datetime("03-10-2026", "02:00 PM", True) == "2026-03-10T14:00:00"
        assert event_datetime("2026-03-12", None, False) == "2026-03-12T11:00:00"

    def test_event_carries_booking_id(self, booking_factory):
        booking = booking_factory(id="abc")
        event = build_event(booking, "Asia/Manila")
        assert event["extendedProperties"]["private"]["bookingId"] == "abc"
        assert event["start"]["timeZone"] == "Asia/Manila"

    @pytest.mark.asyncio
    async def test_skipped_when_not_configured(self, booking_factory):
        service = GoogleCalendarService()
        service.calendar_id = ""
        result = await service.upsert_event_async(booking_factory())
        assert result["skipped"] is True

    @pytest.mark.asyncio
    async def test_failure_captured(self, booking_factory):
        service = GoogleCalendarService()
        service.calendar_id = "cal"
        service.service = MagicMock()
        service.service.events.return_value.list.return_value.execute.side_effect = RuntimeError("boom")

        with patch("guestform.services.calendar_service.settings") as mock_settings:
            mock_settings.google_configured = True
            mock_settings.booking_timezone = "Asia/Manila"
            result = await service.delete_events_for_booking_async("abc")

        assert result == {"success": False, "error": "boom", "deleted": 0}


class TestSheetsRow:
    def test_row_matches_headers(self, booking_factory):
        row = booking_to_row(booking_factory(id="abc", need_parking=True))
        assert len(row) == len(HEADERS)
        assert row[0] == "abc"
        assert row[4] == "'09171234567"
        assert row[HEADERS.index("Need Parking")] == "Yes"
        assert row[HEADERS.index("Has Pets")] == "No"
        assert row[-1] == "booked"

    def test_created_at_preserved(self, booking_factory):
        row = booking_to_row(booking_factory(), created_at="2025-01-01 00:00:00")
        assert row[HEADERS.index("Created At")] == "2025-01-01 00:00:00"

    def test_find_row_skips_header(self):
        values = [["Booking ID"], ["x"], ["abc"]]
        assert GoogleSheetsService._find_row(values, "abc") == 3
        assert GoogleSheetsService._find_row(values, "Booking ID") is None

    def test_delete_test_rows_bottom_up(self):
        service = GoogleSheetsService()
        worksheet = MagicMock()
        worksheet.get_all_values.return_value = [
            HEADERS,
            ["a", "[TEST] One"],
            ["b", "Real Guest"],
            ["c", "[TEST] Two"],
        ]
        service._worksheet = MagicMock(return_value=worksheet)

        result = service.delete_test_rows()

        assert result["deleted"] == 2
        assert [c.args[0] for c in worksheet.delete_rows.call_args_list] == [4, 2]


class TestEmail:
    def test_render_escapes_and_lists_guests(self, booking_factory):
        booking = booking_factory(guest2_name="Ana <b>", guest_special_requests="Late check-in")
        html = render_admin_email(booking)
        assert "Ana &lt;b&gt;" in html
        assert "Late check-in" in html
        assert "New Guest Form Submission" in html

    def test_subject(self, booking_factory):
        subject = build_subject(booking_factory(), is_update=True)
        assert subject == "Updated Guest Form: Juan Dela Cruz (03-10-2026 to 03-12-2026)"

    @pytest.mark.asyncio
    async def test_skipped_without_api_key(self, booking_factory):
        with patch("guestform.services.email_service.settings") as mock_settings:
            mock_settings.resend_api_key = ""
            mock_settings.admin_email_list = ["admin@example.com"]
            result = await send_admin_notification(booking_factory())
        assert result["skipped"] is True

    @pytest.mark.asyncio
    async def test_sends_with_attachment(self, booking_factory):
        with patch("guestform.services.email_service.settings") as mock_settings, \
                patch("guestform.services.email_service.resend") as mock_resend:
            mock_settings.resend_api_key = "re_test"
            mock_settings.admin_email_list = ["a@example.com", "b@example.com"]
            mock_settings.email_from = "Guest Form <noreply@example.com>"
            mock_resend.Emails.send.return_value = {"id": "email-1"}

            result = await send_admin_notification(booking_factory(), b"%PDF")

        assert result == {"success": True, "sent": 2}
        payload = mock_resend.Emails.send.call_args.args[0]
        assert payload["attachments"][0]["filename"] == "guest-form-Juan_Dela_Cruz.pdf"
        assert payload["reply_to"] == "juan@example.com"


class TestPDF:
    def test_sections_follow_booking(self, booking_factory):
        sections = GuestFormPDFGenerator(
            booking_factory(has_pets=True, pet_name="Bantay", guest3_name="Ana")
        ).sections()
        titles = [title for title, _ in sections]
        assert "Pet" in titles
        assert "Additional Guests" in titles
        assert "Parking" not in titles

    def test_generate_returns_pdf(self, booking_factory):
        assert generate_guest_form_pdf(booking_factory()).startswith(b"%PDF")


class TestUploads:
    def test_sanitize(self):
        assert sanitize_file_name("my receipt’s #1.jpg") == "my_receipt_s__1.jpg"

    def test_file_name_from_url(self):
        assert file_name_from_url("http://x/uploads/valid-ids/TEST_id%201.png") == "TEST_id 1.png"
        assert file_name_from_url("dev-mode-skipped") is None

    @pytest.mark.asyncio
    async def test_save_reuses_existing(self, uploads):
        first = await uploads.save("valid-ids", "id.png", b"one")
        second = await uploads.save("valid-ids", "id.png", b"two")
        assert first == second == "http://test/uploads/valid-ids/id.png"
        assert (uploads.root / "valid-ids" / "id.png").read_bytes() == b"one"

    @pytest.mark.asyncio
    async def test_unknown_bucket(self, uploads):
        with pytest.raises(ValueError):
            await uploads.save("secrets", "x.txt", b"")

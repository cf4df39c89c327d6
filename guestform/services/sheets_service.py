"""
Google Sheets mirror of bookings: one row per booking, booking id in column A
"""
import asyncio
import logging
from datetime import datetime
from typing import List, Optional

import gspread
from google.oauth2.service_account import Credentials

from guestform.core.config import settings
from guestform.models import GuestSubmission

logger = logging.getLogger(__name__)

TEST_MARKER = "[TEST]"

HEADERS = [
    "Booking ID",
    "Facebook Name",
    "Primary Guest Name",
    "Email",
    "Phone Number",
    "Address",
    "Nationality",
    "Check-in Date",
    "Check-in Time",
    "Check-out Date",
    "Check-out Time",
    "Number of Nights",
    "Number of Adults",
    "Number of Children",
    "Guest 2 Name",
    "Guest 3 Name",
    "Guest 4 Name",
    "Guest 5 Name",
    "Need Parking",
    "Car Plate Number",
    "Car Brand/Model",
    "Car Color",
    "Has Pets",
    "Pet Name",
    "Pet Breed",
    "Pet Age",
    "Pet Vaccination Date",
    "How Found Us",
    "Find Us Details",
    "Special Requests",
    "Valid ID URL",
    "Payment Receipt URL",
    "Pet Vaccination URL",
    "Pet Image URL",
    "Created At",
    "Updated At",
    "Status",
]

CREATED_AT_COL = HEADERS.index("Created At")
LAST_COL = "AK"  # column letter of the last header


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def booking_to_row(booking: GuestSubmission, created_at: Optional[str] = None) -> List[str]:
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    status = getattr(booking.status, "value", booking.status) or "booked"
    return [
        booking.id,
        _cell(booking.guest_facebook_name),
        _cell(booking.primary_guest_name),
        _cell(booking.guest_email),
        # Leading quote keeps phone numbers as text
        f"'{booking.guest_phone_number}" if booking.guest_phone_number else "",
        _cell(booking.guest_address),
        _cell(booking.nationality),
        _cell(booking.check_in_date),
        _cell(booking.check_in_time),
        _cell(booking.check_out_date),
        _cell(booking.check_out_time),
        _cell(booking.number_of_nights),
        _cell(booking.number_of_adults),
        _cell(booking.number_of_children),
        _cell(booking.guest2_name),
        _cell(booking.guest3_name),
        _cell(booking.guest4_name),
        _cell(booking.guest5_name),
        _cell(bool(booking.need_parking)),
        _cell(booking.car_plate_number),
        _cell(booking.car_brand_model),
        _cell(booking.car_color),
        _cell(bool(booking.has_pets)),
        _cell(booking.pet_name),
        _cell(booking.pet_breed),
        _cell(booking.pet_age),
        _cell(booking.pet_vaccination_date),
        _cell(booking.find_us),
        _cell(booking.find_us_details),
        _cell(booking.guest_special_requests),
        _cell(booking.valid_id_url),
        _cell(booking.payment_receipt_url),
        _cell(booking.pet_vaccination_url),
        _cell(booking.pet_image_url),
        created_at or now,
        now,
        status,
    ]


class GoogleSheetsService:
    """Keeps the bookings worksheet in step with the database"""

    SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

    def __init__(self):
        self.spreadsheet_id = settings.google_spreadsheet_id
        self.sheet_name = settings.google_sheet_name
        self.client = None
        self.spreadsheet = None

    @property
    def configured(self) -> bool:
        return bool(self.spreadsheet_id) and settings.google_configured

    def connect(self):
        creds = Credentials.from_service_account_file(
            settings.google_service_account_file, scopes=self.SCOPES
        )
        self.client = gspread.authorize(creds)
        try:
            self.spreadsheet = self.client.open_by_key(self.spreadsheet_id)
        except Exception:
            self.client = None  # reset so the next call reconnects
            raise

    def _worksheet(self):
        if not self.client or not self.spreadsheet:
            self.connect()

        try:
            return self.spreadsheet.worksheet(self.sheet_name)
        except gspread.WorksheetNotFound:
            worksheet = self.spreadsheet.add_worksheet(
                title=self.sheet_name, rows=1000, cols=len(HEADERS)
            )
            worksheet.update(range_name=f"A1:{LAST_COL}1", values=[HEADERS])
            worksheet.format(f"A1:{LAST_COL}1", {
                "textFormat": {"bold": True},
                "backgroundColor": {"red": 0.9, "green": 0.9, "blue": 0.9},
            })
            worksheet.freeze(rows=1)
            return worksheet

    @staticmethod
    def _find_row(values: List[List[str]], booking_id: str) -> Optional[int]:
        """1-based row number of the booking, skipping the header"""
        for i, row in enumerate(values[1:], start=2):
            if row and row[0] == booking_id:
                return i
        return None

    def upsert_booking_row(self, booking: GuestSubmission) -> dict:
        worksheet = self._worksheet()
        values = worksheet.get_all_values()
        row_index = self._find_row(values, booking.id)

        if row_index:
            existing = values[row_index - 1]
            created_at = existing[CREATED_AT_COL] if len(existing) > CREATED_AT_COL else None
            row = booking_to_row(booking, created_at=created_at or None)
            worksheet.update(
                range_name=f"A{row_index}:{LAST_COL}{row_index}",
                values=[row],
                value_input_option="USER_ENTERED",
            )
            logger.info(f"📊 Updated sheet row {row_index} for booking {booking.id}")
            return {"success": True, "row": row_index, "updated": True}

        worksheet.append_row(booking_to_row(booking), value_input_option="USER_ENTERED")
        logger.info(f"📊 Appended sheet row for booking {booking.id}")
        return {"success": True, "updated": False}

    def delete_booking_row(self, booking_id: str) -> dict:
        worksheet = self._worksheet()
        row_index = self._find_row(worksheet.get_all_values(), booking_id)
        if not row_index:
            logger.info(f"No sheet row found for booking {booking_id}")
            return {"success": True, "deleted": 0, "message": "No sheet row found"}

        worksheet.delete_rows(row_index)
        logger.info(f"📊 Deleted sheet row {row_index} for booking {booking_id}")
        return {"success": True, "deleted": 1}

    def delete_test_rows(self) -> dict:
        worksheet = self._worksheet()
        values = worksheet.get_all_values()
        test_rows = [
            i
            for i, row in enumerate(values[1:], start=2)
            if len(row) > 1 and row[1].startswith(TEST_MARKER)
        ]

        # Bottom-up so earlier indexes stay valid
        for row_index in sorted(test_rows, reverse=True):
            worksheet.delete_rows(row_index)

        logger.info(f"📊 Deleted {len(test_rows)} test rows from sheet")
        return {"success": True, "deleted": len(test_rows)}

    async def _run(self, func, *args) -> dict:
        """Run a blocking gspread call in a thread, turning failures into a result dict"""
        if not self.configured:
            logger.info("Google Sheets not configured, skipping")
            return {"success": True, "deleted": 0, "skipped": True}
        try:
            return await asyncio.to_thread(func, *args)
        except Exception as e:
            logger.error(f"❌ Sheets operation {func.__name__} failed: {e}", exc_info=True)
            return {"success": False, "error": str(e), "deleted": 0}

    async def upsert_booking_row_async(self, booking: GuestSubmission) -> dict:
        return await self._run(self.upsert_booking_row, booking)

    async def delete_booking_row_async(self, booking_id: str) -> dict:
        return await self._run(self.delete_booking_row, booking_id)

    async def delete_test_rows_async(self) -> dict:
        return await self._run(self.delete_test_rows)


# Global service instance
sheets_service = GoogleSheetsService()

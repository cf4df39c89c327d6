"""
Pytest configuration for guest form tests
"""
import pytest
import sys
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

# Ensure guestform is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from guestform.models import BookingStatus, GuestSubmission  # noqa: E402


@dataclass
class StayRecord:
    """Minimal booking for the overlap detector"""
    id: str
    check_in_date: str
    check_out_date: str
    status: Optional[str] = None


def make_booking(**overrides) -> GuestSubmission:
    """A stored booking as the database would return it"""
    now = datetime(2026, 1, 2, 10, 0, 0)
    data = {
        "id": str(uuid.uuid4()),
        "guest_facebook_name": "Juan Dela Cruz",
        "primary_guest_name": "Juan Dela Cruz",
        "guest_email": "juan@example.com",
        "guest_phone_number": "09171234567",
        "guest_address": "Makati City",
        "nationality": "Filipino",
        "check_in_date": "03-10-2026",
        "check_out_date": "03-12-2026",
        "check_in_time": "02:00 PM",
        "check_out_time": "11:00 AM",
        "number_of_adults": 2,
        "number_of_children": 0,
        "number_of_nights": 2,
        "find_us": "Facebook",
        "need_parking": False,
        "has_pets": False,
        "payment_receipt_url": "http://test/uploads/payment-receipts/receipt.jpg",
        "valid_id_url": "http://test/uploads/valid-ids/id.jpg",
        "unit_owner": "Arianna Perez",
        "tower_and_unit_number": "Monaco 2604",
        "owner_onsite_contact_person": "Arianna Perez",
        "owner_contact_number": "0962 541 2941",
        "status": BookingStatus.BOOKED,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return GuestSubmission(**data)


class FakeBookingRepository:
    """In-memory BookingRepository"""

    def __init__(self, bookings=None):
        self.bookings = {b.id: b for b in (bookings or [])}
        self.deleted = []

    async def list_all(self):
        return sorted(self.bookings.values(), key=lambda b: b.check_in_date)

    async def get(self, booking_id):
        return self.bookings.get(booking_id)

    async def add(self, data):
        booking = make_booking(**data)
        self.bookings[booking.id] = booking
        return booking

    async def update(self, booking, data):
        for key, value in data.items():
            setattr(booking, key, value)
        booking.updated_at = datetime.now()
        return booking

    async def mark_canceled(self, booking):
        booking.status = BookingStatus.CANCELED
        return booking

    async def list_test_bookings(self):
        from guestform.repositories.booking_repository import is_test_booking

        return [b for b in self.bookings.values() if is_test_booking(b)]

    async def delete(self, booking):
        self.deleted.append(booking.id)
        self.bookings.pop(booking.id, None)


@pytest.fixture
def booking_factory():
    return make_booking


@pytest.fixture
def repo():
    return FakeBookingRepository()


@pytest.fixture
def calendar():
    mock = MagicMock()
    mock.upsert_event_async = AsyncMock(return_value={"success": True, "eventId": "evt1"})
    mock.delete_events_for_booking_async = AsyncMock(return_value={"success": True, "deleted": 1})
    mock.delete_test_events_async = AsyncMock(return_value={"success": True, "deleted": 2})
    return mock


@pytest.fixture
def sheets():
    mock = MagicMock()
    mock.upsert_booking_row_async = AsyncMock(return_value={"success": True, "updated": False})
    mock.delete_booking_row_async = AsyncMock(return_value={"success": True, "deleted": 1})
    mock.delete_test_rows_async = AsyncMock(return_value={"success": True, "deleted": 3})
    return mock


@pytest.fixture
def notify():
    return AsyncMock(return_value={"success": True, "sent": 1})


@pytest.fixture
def uploads(tmp_path):
    from guestform.services.upload_service import UploadService

    return UploadService(root=str(tmp_path / "uploads"), base_url="http://test")


@pytest.fixture
def service(repo, uploads, calendar, sheets, notify):
    from guestform.services.booking_service import BookingService

    return BookingService(
        repo,
        upload_service=uploads,
        calendar=calendar,
        sheets=sheets,
        notify=notify,
        render_pdf=MagicMock(return_value=b"%PDF-1.4 test"),
        timezone="Asia/Manila",
    )


@pytest.fixture
def sample_form_fields():
    """Form fields as the browser posts them"""
    return {
        "guestFacebookName": "Juan Dela Cruz",
        "primaryGuestName": "Juan Dela Cruz",
        "guestEmail": "juan@example.com",
        "guestPhoneNumber": "09171234567",
        "guestAddress": "Makati City",
        "nationality": "Filipino",
        "checkInDate": "2026-04-01",
        "checkOutDate": "2026-04-04",
        "checkInTime": "14:00",
        "checkOutTime": "11:00",
        "numberOfAdults": "2",
        "numberOfChildren": "1",
        "findUs": "Facebook",
    }

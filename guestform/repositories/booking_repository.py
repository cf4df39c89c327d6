"""Booking repository - database operations for guest submissions"""

from typing import Optional, Protocol, Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from guestform.models import BookingStatus, GuestSubmission
from guestform.services.upload_service import TEST_FILE_PREFIX, file_name_from_url


def is_test_file_url(url: Optional[str]) -> bool:
    """Same rule as stored test files: the file name starts with TEST_, case-sensitive"""
    name = file_name_from_url(url)
    return bool(name) and name.startswith(TEST_FILE_PREFIX)


def is_test_booking(booking: GuestSubmission) -> bool:
    return any(is_test_file_url(url) for url in booking.file_urls.values())


class BookingRepository(Protocol):
    """What the booking service needs from storage."""

    async def list_all(self) -> Sequence[GuestSubmission]: ...

    async def get(self, booking_id: str) -> Optional[GuestSubmission]: ...

    async def add(self, data: dict) -> GuestSubmission: ...

    async def update(self, booking: GuestSubmission, data: dict) -> GuestSubmission: ...

    async def mark_canceled(self, booking: GuestSubmission) -> GuestSubmission: ...

    async def list_test_bookings(self) -> Sequence[GuestSubmission]: ...

    async def delete(self, booking: GuestSubmission) -> None: ...


class SqlAlchemyBookingRepository:
    """BookingRepository backed by an AsyncSession"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> Sequence[GuestSubmission]:
        stmt = select(GuestSubmission).order_by(GuestSubmission.check_in_date)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get(self, booking_id: str) -> Optional[GuestSubmission]:
        return await self.session.get(GuestSubmission, booking_id)

    async def add(self, data: dict) -> GuestSubmission:
        booking = GuestSubmission(**data)
        self.session.add(booking)
        await self.session.commit()
        await self.session.refresh(booking)
        return booking

    async def update(self, booking: GuestSubmission, data: dict) -> GuestSubmission:
        for key, value in data.items():
            if hasattr(booking, key):
                setattr(booking, key, value)
        await self.session.commit()
        await self.session.refresh(booking)
        return booking

    async def mark_canceled(self, booking: GuestSubmission) -> GuestSubmission:
        booking.status = BookingStatus.CANCELED
        await self.session.commit()
        await self.session.refresh(booking)
        return booking

    async def list_test_bookings(self) -> Sequence[GuestSubmission]:
        """Rows with at least one uploaded file named TEST_*"""
        # SQLite LIKE ignores case, so the SQL side only narrows the rows
        stmt = select(GuestSubmission).where(
            or_(
                GuestSubmission.payment_receipt_url.contains(TEST_FILE_PREFIX, autoescape=True),
                GuestSubmission.valid_id_url.contains(TEST_FILE_PREFIX, autoescape=True),
                GuestSubmission.pet_vaccination_url.contains(TEST_FILE_PREFIX, autoescape=True),
                GuestSubmission.pet_image_url.contains(TEST_FILE_PREFIX, autoescape=True),
            )
        )
        result = await self.session.execute(stmt)
        return [booking for booking in result.scalars().all() if is_test_booking(booking)]

    async def delete(self, booking: GuestSubmission) -> None:
        await self.session.execute(
            delete(GuestSubmission).where(GuestSubmission.id == booking.id)
        )
        await self.session.commit()

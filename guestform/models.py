import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String, Integer, Boolean, DateTime, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from guestform.database import Base


class BookingStatus(str, Enum):
    BOOKED = "booked"
    CANCELED = "canceled"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GuestSubmission(Base):
    __tablename__ = "guest_submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # Primary guest
    guest_facebook_name: Mapped[str] = mapped_column(String)
    primary_guest_name: Mapped[str] = mapped_column(String)
    guest_email: Mapped[str] = mapped_column(String)
    guest_phone_number: Mapped[str] = mapped_column(String)
    guest_address: Mapped[str] = mapped_column(String)
    nationality: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Stay. Dates are text: MM-DD-YYYY for new rows, YYYY-MM-DD in older ones
    check_in_date: Mapped[str] = mapped_column(String(10), index=True)
    check_out_date: Mapped[str] = mapped_column(String(10))
    check_in_time: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    check_out_time: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    number_of_adults: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    number_of_children: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    number_of_nights: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Additional guests
    guest2_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    guest3_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    guest4_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    guest5_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    guest_special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    find_us: Mapped[str] = mapped_column(String, default="Facebook")
    find_us_details: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Parking
    need_parking: Mapped[bool] = mapped_column(Boolean, default=False)
    car_plate_number: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    car_brand_model: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    car_color: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Pets
    has_pets: Mapped[bool] = mapped_column(Boolean, default=False)
    pet_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    pet_breed: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    pet_age: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    pet_vaccination_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # Uploaded files
    payment_receipt_url: Mapped[str] = mapped_column(String)
    valid_id_url: Mapped[str] = mapped_column(String)
    pet_vaccination_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    pet_image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Unit and owner
    unit_owner: Mapped[str] = mapped_column(String)
    tower_and_unit_number: Mapped[str] = mapped_column(String)
    owner_onsite_contact_person: Mapped[str] = mapped_column(String)
    owner_contact_number: Mapped[str] = mapped_column(String)

    # NULL is treated as booked, rows written before cancellation existed have it
    status: Mapped[Optional[BookingStatus]] = mapped_column(
        SQLEnum(BookingStatus), default=BookingStatus.BOOKED, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow
    )

    @property
    def file_urls(self) -> dict[str, Optional[str]]:
        return {
            "payment_receipt_url": self.payment_receipt_url,
            "valid_id_url": self.valid_id_url,
            "pet_vaccination_url": self.pet_vaccination_url,
            "pet_image_url": self.pet_image_url,
        }

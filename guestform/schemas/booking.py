from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from guestform.domain.dates import parse_date


class CamelModel(BaseModel):
    """Form payloads use the browser's camelCase field names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GuestFormSubmission(CamelModel):
    # Required
    primary_guest_name: str = Field(min_length=1)
    check_in_date: str
    check_out_date: str
    guest_facebook_name: str = ""
    guest_email: str = ""
    guest_phone_number: str = ""
    guest_address: str = ""
    find_us: str = "Facebook"

    # Required with defaults
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    nationality: str = ""
    number_of_adults: Optional[int] = Field(default=1, ge=1)
    number_of_children: Optional[int] = Field(default=0, ge=0)

    # Optional
    guest2_name: Optional[str] = None
    guest3_name: Optional[str] = None
    guest4_name: Optional[str] = None
    guest5_name: Optional[str] = None
    guest_special_requests: Optional[str] = None
    find_us_details: Optional[str] = None
    number_of_nights: Optional[int] = None

    # Parking
    need_parking: bool = False
    car_plate_number: Optional[str] = None
    car_brand_model: Optional[str] = None
    car_color: Optional[str] = None

    # Pets
    has_pets: bool = False
    pet_name: Optional[str] = None
    pet_breed: Optional[str] = None
    pet_age: Optional[str] = None
    pet_vaccination_date: Optional[str] = None

    # Unit and owner (blank means "use the configured default")
    unit_owner: Optional[str] = None
    tower_and_unit_number: Optional[str] = None
    owner_onsite_contact_person: Optional[str] = None
    owner_contact_number: Optional[str] = None

    @field_validator(
        "number_of_adults", "number_of_children", "number_of_nights", mode="before"
    )
    @classmethod
    def blank_number_is_missing(cls, v: Any):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("number_of_adults", mode="after")
    @classmethod
    def default_adults(cls, v: Optional[int]):
        return 1 if v is None else v

    @field_validator("number_of_children", mode="after")
    @classmethod
    def default_children(cls, v: Optional[int]):
        return 0 if v is None else v

    @field_validator("guest2_name", "guest3_name", "guest4_name", "guest5_name")
    @classmethod
    def drop_short_names(cls, v: Optional[str]):
        # One-letter leftovers from the form are not guest names
        if not v:
            return None
        v = v.strip()
        return v if len(v) >= 2 else None

    @field_validator("check_in_date", "check_out_date")
    @classmethod
    def date_must_parse(cls, v: str):
        if parse_date(v) is None:
            raise ValueError("Invalid check-in or check-out date format")
        return v.strip()

    @model_validator(mode="after")
    def check_out_after_check_in(self):
        if parse_date(self.check_out_date) <= parse_date(self.check_in_date):
            raise ValueError("Check-out date must be after check-in date")
        return self


class BookingOut(BaseModel):
    id: str
    primary_guest_name: str
    guest_facebook_name: str
    guest_email: str
    check_in_date: str
    check_out_date: str
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    number_of_nights: Optional[int] = None
    status: Optional[str] = None
    payment_receipt_url: str
    valid_id_url: str
    pet_vaccination_url: Optional[str] = None
    pet_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v: Any):
        if v is None:
            return "booked"
        return getattr(v, "value", v)


class GuestFormOut(CamelModel):
    """A stored booking turned back into form data, for editing"""

    guest_facebook_name: str = ""
    primary_guest_name: str = ""
    guest_email: str = ""
    guest_phone_number: str = ""
    guest_address: str = ""
    check_in_date: str = ""
    check_in_time: str = ""
    check_out_date: str = ""
    check_out_time: str = ""
    nationality: str = ""
    number_of_adults: int = 1
    number_of_children: int = 0
    number_of_nights: Optional[int] = None
    guest2_name: str = ""
    guest3_name: str = ""
    guest4_name: str = ""
    guest5_name: str = ""
    guest_special_requests: str = ""
    find_us: str = "Facebook"
    find_us_details: str = ""
    need_parking: bool = False
    car_plate_number: str = ""
    car_brand_model: str = ""
    car_color: str = ""
    has_pets: bool = False
    pet_name: str = ""
    pet_breed: str = ""
    pet_age: str = ""
    pet_vaccination_date: str = ""
    payment_receipt_url: str = ""
    valid_id_url: str = ""
    pet_vaccination_url: str = ""
    pet_image_url: str = ""
    unit_owner: str = ""
    tower_and_unit_number: str = ""
    owner_onsite_contact_person: str = ""
    owner_contact_number: str = ""
    status: str = "booked"


class BookedDateRangeOut(CamelModel):
    id: str
    check_in_date: str
    check_out_date: str

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class ConflictOut(CamelModel):
    id: str
    primary_guest_name: Optional[str] = None
    check_in_date: str
    check_out_date: str

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class CancelBookingRequest(CamelModel):
    booking_id: Optional[str] = None
    confirm: Any = None


class CleanupRequest(BaseModel):
    confirm: Any = None

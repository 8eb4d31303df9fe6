from datetime import datetime
from typing import Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from common.models.bookings import Booking
from common.models.rooms import Room
from common.models.users import User
from common.schemas.rooms import room_to_dict
from common.schemas.users import user_to_dict
from common.schemas.validation import format_validation_error
from common.utils.custom_exceptions import ValidationException
from common.utils.datetime_normaliser import assume_utc


class BookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    room_id: str = Field(alias="roomId", min_length=1)
    checkin: datetime = Field(alias="checkIn")
    checkout: datetime = Field(alias="checkOut")
    guests: int = Field(ge=1)
    customer_name: str = Field(alias="customerName", min_length=1)
    customer_email: str = Field(alias="customerEmail", min_length=1)
    customer_phone: str = Field(alias="customerPhone", min_length=1)
    payment_screenshot: Optional[str] = Field(default=None, alias="paymentScreenshot")

    @field_validator("checkin", "checkout")
    @classmethod
    def as_utc(cls, v: datetime):
        return assume_utc(v)

    @field_validator("guests", mode="before")
    @classmethod
    def whole_number_of_guests(cls, v):
        # 2.0 is a whole number; "2", True and 1.5 are not
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("guests must be an integer")
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError("guests must be an integer")
            return int(v)
        return v

    @field_validator("payment_screenshot")
    @classmethod
    def blank_screenshot_is_none(cls, v: Optional[str]):
        return v or None

    @model_validator(mode="after")
    def validate_stay(self):
        if self.checkout <= self.checkin:
            raise ValueError("checkOut must be after checkIn")
        return self


def parse_booking_request(body: Union[str, dict]) -> BookingRequest:
    try:
        if isinstance(body, str):
            return BookingRequest.model_validate_json(body)
        return BookingRequest.model_validate(body)
    except ValidationError as e:
        raise ValidationException(format_validation_error(e)) from e


def booking_to_dict(
    booking: Booking, room: Optional[Room] = None, user: Optional[User] = None
) -> dict:
    return {
        "id": booking.booking_id,
        "room": room_to_dict(room) if room else booking.room_id,
        "user": user_to_dict(user) if user else booking.user_id,
        "customerName": booking.customer_name,
        "customerEmail": booking.customer_email,
        "customerPhone": booking.customer_phone,
        "checkIn": booking.checkin.isoformat(),
        "checkOut": booking.checkout.isoformat(),
        "guests": booking.guests,
        "totalPrice": booking.total_price,
        "paymentStatus": booking.payment_status.value,
        "paymentScreenshot": booking.payment_screenshot,
        "assignedRoom": booking.assigned_room,
        "status": booking.status.value,
        "createdAt": booking.created_at.isoformat(),
        "updatedAt": booking.updated_at.isoformat(),
    }

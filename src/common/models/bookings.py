from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked-in"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}

# Bookings in these states hold their assigned room name.
ACTIVE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass
class Booking:
    booking_id: str
    room_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    checkin: datetime
    checkout: datetime
    guests: int
    total_price: float
    user_id: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_screenshot: Optional[str] = None

    # physical room name, set at check-in; unrelated to room_id
    assigned_room: Optional[str] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return self.user_id is not None and self.user_id == user_id

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import uuid4

from common.models.bookings import (
    Booking,
    BookingStatus,
    PaymentStatus,
    can_transition,
)
from common.models.rooms import Room
from common.models.users import Actor, User
from common.repository.booking_repo import BookingRepository
from common.repository.room_repo import RoomRepository
from common.repository.user_repo import UserRepository
from common.schemas.bookings import BookingRequest
from common.services import access_policy
from common.services.pricing_service import compute_total_price
from common.utils.custom_exceptions import (
    AuthorizationException,
    ConflictException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


@dataclass
class ExpandedBooking:
    booking: Booking
    room: Optional[Room] = None
    user: Optional[User] = None


class BookingService:
    def __init__(
        self,
        booking_repo: BookingRepository,
        room_repo: RoomRepository,
        user_repo: Optional[UserRepository] = None,
    ):
        self.booking_repo = booking_repo
        self.room_repo = room_repo
        self.user_repo = user_repo

    def create_booking(self, req: BookingRequest, actor: Optional[Actor] = None) -> Booking:
        room = self.room_repo.get_room_by_id(req.room_id)
        if room is None:
            raise NotFoundException("room", req.room_id, 404)

        total_price = compute_total_price(req.checkin, req.checkout, room.price)

        if req.payment_screenshot:
            payment_status = PaymentStatus.PAID
            screenshot = req.payment_screenshot
        else:
            payment_status = PaymentStatus.PENDING
            screenshot = None

        booking = Booking(
            booking_id=str(uuid4()),
            room_id=room.room_id,
            user_id=actor.user_id if actor else None,
            customer_name=req.customer_name,
            customer_email=req.customer_email,
            customer_phone=req.customer_phone,
            checkin=req.checkin,
            checkout=req.checkout,
            guests=req.guests,
            total_price=total_price,
            payment_status=payment_status,
            payment_screenshot=screenshot,
        )
        self.booking_repo.add_booking(booking)
        logger.info(
            f"Created booking {booking.booking_id} for room {room.room_id} "
            f"({total_price} total, payment {payment_status.value})"
        )
        return booking

    def confirm_booking(self, booking_id: str, actor: Optional[Actor]) -> Booking:
        access_policy.require_admin(actor, "confirm bookings")
        booking = self._get_booking(booking_id)

        if not can_transition(booking.status, BookingStatus.CONFIRMED):
            raise InvalidStateException(
                f"Only pending bookings can be confirmed (current status: {booking.status.value})"
            )

        self.booking_repo.update_booking_status(
            booking_id=booking_id,
            status=BookingStatus.CONFIRMED,
            expected_status=booking.status,
        )
        logger.info(f"Booking {booking_id} confirmed by {actor.user_id}")
        return replace(
            booking, status=BookingStatus.CONFIRMED, updated_at=self._now()
        )

    def cancel_booking(self, booking_id: str, actor: Optional[Actor]) -> Booking:
        actor = access_policy.require_authenticated(actor)
        booking = self._get_booking(booking_id)

        if not access_policy.can_cancel(actor, booking):
            raise AuthorizationException("Not authorized to cancel this booking")

        if not can_transition(booking.status, BookingStatus.CANCELLED):
            raise InvalidStateException("Booking is already cancelled")

        if not actor.is_admin and booking.checkin < self._now():
            raise InvalidStateException("Cannot cancel past bookings")

        released_room = None
        if booking.assigned_room:
            room = self.room_repo.get_room_by_name(booking.assigned_room)
            if room is None:
                logger.warning(
                    f"Assigned room {booking.assigned_room} of booking {booking_id} "
                    "no longer exists, nothing to release"
                )
            else:
                released_room = room

        self.booking_repo.cancel_booking(
            booking=booking,
            expected_status=booking.status,
            released_room=released_room,
        )
        if released_room is not None:
            released_room.release()
            logger.info(f"Room {released_room.name} released by booking {booking_id}")
        logger.info(f"Booking {booking_id} cancelled by {actor.user_id}")
        return replace(booking, status=BookingStatus.CANCELLED, updated_at=self._now())

    def assign_room(
        self, booking_id: str, room_name: Optional[str], actor: Optional[Actor]
    ) -> Tuple[Booking, Room]:
        access_policy.require_admin(actor, "assign rooms")
        room_name = (room_name or "").strip()
        if not room_name:
            raise ValidationException("assignedRoom is required")

        booking = self._get_booking(booking_id)
        if not can_transition(booking.status, BookingStatus.CHECKED_IN):
            raise InvalidStateException(
                "Only confirmed bookings can be assigned a room "
                f"(current status: {booking.status.value})"
            )

        room = self.room_repo.get_room_by_name(room_name)
        if room is None:
            raise NotFoundException("room", room_name, 404)
        if not room.is_available:
            raise ConflictException(f"Room {room_name} is not available")

        self._ensure_room_name_free(room_name, booking_id)

        updated_room = replace(room)
        updated_room.occupy(booking.customer_name, booking.checkout)
        updated_booking = replace(
            booking,
            assigned_room=room_name,
            status=BookingStatus.CHECKED_IN,
            updated_at=self._now(),
        )
        self.booking_repo.assign_room(updated_booking, updated_room)
        logger.info(f"Booking {booking_id} checked in to room {room_name}")
        return updated_booking, updated_room

    def get_user_bookings(self, actor: Optional[Actor]) -> List[ExpandedBooking]:
        actor = access_policy.require_authenticated(actor)
        bookings = self.booking_repo.get_user_bookings(actor.user_id)
        rooms = {}
        return [
            ExpandedBooking(booking=b, room=self._lookup(rooms, b.room_id, self.room_repo.get_room_by_id))
            for b in bookings
        ]

    def get_all_bookings(self, actor: Optional[Actor]) -> List[ExpandedBooking]:
        access_policy.require_admin(actor, "list all bookings")
        bookings = self.booking_repo.get_all_bookings()
        rooms = {}
        users = {}
        result = []
        for b in bookings:
            user = None
            if b.user_id and self.user_repo is not None:
                user = self._lookup(users, b.user_id, self.user_repo.get_by_id)
            result.append(
                ExpandedBooking(
                    booking=b,
                    room=self._lookup(rooms, b.room_id, self.room_repo.get_room_by_id),
                    user=user,
                )
            )
        return result

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("booking", booking_id, 404)
        return booking

    def _ensure_room_name_free(self, room_name: str, booking_id: str):
        holder_id = self.booking_repo.get_assignment_holder(room_name)
        if holder_id is None or holder_id == booking_id:
            return
        holder = self.booking_repo.get_booking_by_id(holder_id)
        if holder is not None and holder.is_active:
            raise ConflictException(
                f"Room {room_name} is already assigned to booking {holder_id}"
            )

    @staticmethod
    def _lookup(cache: dict, key: str, loader):
        if key not in cache:
            cache[key] = loader(key)
        return cache[key]

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

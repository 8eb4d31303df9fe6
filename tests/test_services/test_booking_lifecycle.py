"""End-to-end lifecycle runs against in-memory repositories.

The fakes enforce the same conditions the DynamoDB transactions do, so the
service can be exercised through whole booking journeys.
"""
import threading
import unittest
from dataclasses import replace

from common.models.bookings import BookingStatus
from common.models.rooms import Room, RoomStatus
from common.models.users import Actor, UserRole
from common.schemas.bookings import parse_booking_request
from common.services.booking_service import BookingService
from common.utils.custom_exceptions import (
    ConflictException,
    InvalidStateException,
    ValidationException,
)


class InMemoryRoomRepository:
    def __init__(self, lock):
        self.lock = lock
        self.rooms = {}

    def put(self, room):
        self.rooms[room.room_id] = room

    def get_room_by_id(self, room_id):
        room = self.rooms.get(room_id)
        return replace(room) if room else None

    def get_room_by_name(self, name):
        for room in self.rooms.values():
            if room.name == name:
                return replace(room)
        return None


class InMemoryBookingRepository:
    def __init__(self, lock, rooms):
        self.lock = lock
        self.rooms = rooms
        self.bookings = {}
        self.assignments = {}

    def add_booking(self, booking):
        self.bookings[booking.booking_id] = replace(booking)

    def get_booking_by_id(self, booking_id):
        booking = self.bookings.get(booking_id)
        return replace(booking) if booking else None

    def get_assignment_holder(self, room_name):
        return self.assignments.get(room_name)

    def update_booking_status(self, booking_id, status, expected_status):
        with self.lock:
            stored = self.bookings[booking_id]
            if stored.status != expected_status:
                raise ConflictException("changed")
            stored.status = status

    def assign_room(self, booking, room):
        with self.lock:
            stored_booking = self.bookings[booking.booking_id]
            stored_room = self.rooms.rooms[room.room_id]
            if (
                stored_booking.status != BookingStatus.CONFIRMED
                or stored_room.status != RoomStatus.AVAILABLE
                or room.name in self.assignments
            ):
                raise ConflictException("transaction cancelled")
            self.bookings[booking.booking_id] = replace(booking)
            self.rooms.rooms[room.room_id] = replace(room)
            self.assignments[room.name] = booking.booking_id

    def cancel_booking(self, booking, expected_status, released_room=None):
        with self.lock:
            stored = self.bookings[booking.booking_id]
            if stored.status != expected_status:
                raise ConflictException("transaction cancelled")
            stored.status = BookingStatus.CANCELLED
            if booking.assigned_room and self.assignments.get(booking.assigned_room) == booking.booking_id:
                del self.assignments[booking.assigned_room]
            if released_room is not None:
                self.rooms.rooms[released_room.room_id].release()


class TestBookingLifecycle(unittest.TestCase):

    def setUp(self):
        lock = threading.Lock()
        self.room_repo = InMemoryRoomRepository(lock)
        self.booking_repo = InMemoryBookingRepository(lock, self.room_repo)
        self.service = BookingService(
            booking_repo=self.booking_repo, room_repo=self.room_repo
        )
        self.admin = Actor("admin", UserRole.ADMIN)
        self.room_repo.put(
            Room(room_id="deluxe-1", name="R1", room_type="Deluxe", price=100.0)
        )

    def _create(self, name="Ada"):
        req = parse_booking_request(
            {
                "roomId": "deluxe-1",
                "checkIn": "2025-01-01",
                "checkOut": "2025-01-03",
                "guests": 2,
                "customerName": name,
                "customerEmail": "guest@example.com",
                "customerPhone": "5550100",
            }
        )
        return self.service.create_booking(req, None)

    def test_full_journey(self):
        booking = self._create()
        self.assertEqual(booking.total_price, 200.0)
        self.assertEqual(booking.status, BookingStatus.PENDING)

        booking = self.service.confirm_booking(booking.booking_id, self.admin)
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)

        booking, room = self.service.assign_room(booking.booking_id, "R1", self.admin)
        self.assertEqual(booking.status, BookingStatus.CHECKED_IN)
        stored_room = self.room_repo.get_room_by_name("R1")
        self.assertEqual(stored_room.status, RoomStatus.OCCUPIED)
        self.assertEqual(stored_room.guest, "Ada")
        self.assertEqual(stored_room.check_out_date, "2025-01-03")

        booking = self.service.cancel_booking(booking.booking_id, self.admin)
        self.assertEqual(booking.status, BookingStatus.CANCELLED)
        stored_room = self.room_repo.get_room_by_name("R1")
        self.assertEqual(stored_room.status, RoomStatus.AVAILABLE)
        self.assertIsNone(stored_room.guest)
        self.assertIsNone(stored_room.check_out_date)

    def test_confirm_twice(self):
        booking = self._create()
        self.service.confirm_booking(booking.booking_id, self.admin)

        with self.assertRaises(InvalidStateException):
            self.service.confirm_booking(booking.booking_id, self.admin)

    def test_invalid_request_never_persists(self):
        with self.assertRaises(ValidationException):
            parse_booking_request(
                {
                    "roomId": "deluxe-1",
                    "checkIn": "2025-01-03",
                    "checkOut": "2025-01-03",
                    "guests": 2,
                    "customerName": "Ada",
                    "customerEmail": "guest@example.com",
                    "customerPhone": "5550100",
                }
            )
        self.assertEqual(self.booking_repo.bookings, {})

    def test_room_reusable_only_after_release(self):
        first = self._create("Ada")
        second = self._create("Bob")
        self.service.confirm_booking(first.booking_id, self.admin)
        self.service.confirm_booking(second.booking_id, self.admin)

        self.service.assign_room(first.booking_id, "R1", self.admin)
        with self.assertRaises(ConflictException):
            self.service.assign_room(second.booking_id, "R1", self.admin)

        self.service.cancel_booking(first.booking_id, self.admin)
        booking, room = self.service.assign_room(second.booking_id, "R1", self.admin)
        self.assertEqual(room.guest, "Bob")
        self.assertEqual(self.room_repo.get_room_by_name("R1").guest, "Bob")

    def test_concurrent_assignment_has_one_winner(self):
        bookings = [self._create(f"Guest {i}") for i in range(2)]
        for b in bookings:
            self.service.confirm_booking(b.booking_id, self.admin)

        barrier = threading.Barrier(len(bookings))
        outcomes = {}

        def attempt(booking_id):
            barrier.wait()
            try:
                self.service.assign_room(booking_id, "R1", self.admin)
                outcomes[booking_id] = "ok"
            except ConflictException:
                outcomes[booking_id] = "conflict"

        threads = [threading.Thread(target=attempt, args=(b.booking_id,)) for b in bookings]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        self.assertEqual(sorted(outcomes.values()), ["conflict", "ok"])
        winner = next(bid for bid, outcome in outcomes.items() if outcome == "ok")
        room = self.room_repo.get_room_by_name("R1")
        self.assertEqual(room.status, RoomStatus.OCCUPIED)
        self.assertEqual(room.guest, self.booking_repo.bookings[winner].customer_name)
        self.assertEqual(self.booking_repo.assignments["R1"], winner)


if __name__ == "__main__":
    unittest.main()

import unittest

from common.utils.custom_exceptions import (
    AuthorizationException,
    ConflictException,
    DomainException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)


class TestCustomExceptions(unittest.TestCase):

    def test_status_codes_share_one_base(self):
        cases = [
            (ValidationException("bad input"), 400),
            (NotFoundException("Booking", "b1"), 404),
            (AuthorizationException("Only admins can confirm bookings"), 403),
            (InvalidStateException("Booking is already cancelled"), 400),
            (ConflictException("Room R1 is not available"), 409),
        ]
        for err, status in cases:
            with self.subTest(err=type(err).__name__):
                self.assertIsInstance(err, DomainException)
                self.assertEqual(err.status_code, status)

    def test_not_found_message_and_custom_status(self):
        err = NotFoundException("room", "R9", 410)

        self.assertEqual(str(err), "room 'R9' not found")
        self.assertEqual(err.status_code, 410)


if __name__ == "__main__":
    unittest.main()

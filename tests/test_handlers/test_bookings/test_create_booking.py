import importlib
import json
import os
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError
from common.models.bookings import Booking
from common.utils.custom_exceptions import NotFoundException


def _booking(user_id=None):
    return Booking(
        booking_id="b1",
        room_id="deluxe-1",
        user_id=user_id,
        customer_name="Ada",
        customer_email="ada@example.com",
        customer_phone="5550100",
        checkin=datetime(2025, 1, 1, tzinfo=timezone.utc),
        checkout=datetime(2025, 1, 3, tzinfo=timezone.utc),
        guests=2,
        total_price=200.0,
    )


VALID_BODY = json.dumps(
    {
        "roomId": "deluxe-1",
        "checkIn": "2025-01-01",
        "checkOut": "2025-01-03",
        "guests": 2,
        "customerName": "Ada",
        "customerEmail": "ada@example.com",
        "customerPhone": "5550100",
    }
)


class CreateBookingTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("handlers.bookings.create_booking.resource")
        mock_res = cls.resource.start()
        mock_res.return_value.Table.return_value = MagicMock()
        import handlers.bookings.create_booking as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_send = patch(
            "handlers.bookings.create_booking.send_custom_response",
            side_effect=lambda status_code, message=None, data=None: {
                "statusCode": status_code,
                "body": json.dumps({"message": message, "data": data}),
            },
        )
        self.p_create = patch.object(self.mod.booking_service, "create_booking")
        self.mock_send = self.p_send.start()
        self.mock_create = self.p_create.start()

    def tearDown(self):
        self.p_send.stop()
        self.p_create.stop()

    def _event(self, body=VALID_BODY, user_id=None):
        return {
            "body": body,
            "requestContext": {"authorizer": {"user_id": user_id} if user_id else {}},
        }

    def test_missing_body_returns_400(self):
        resp = self.mod.create_booking({}, None)
        self.assertEqual(400, resp["statusCode"])
        self.mock_create.assert_not_called()

    def test_invalid_body_returns_400(self):
        resp = self.mod.create_booking(self._event(body="{}"), None)
        self.assertEqual(400, resp["statusCode"])
        self.mock_create.assert_not_called()

    def test_checkout_before_checkin_returns_400(self):
        body = json.loads(VALID_BODY)
        body["checkOut"] = "2024-12-31"
        resp = self.mod.create_booking(self._event(body=json.dumps(body)), None)
        self.assertEqual(400, resp["statusCode"])
        self.assertIn("checkOut must be after checkIn", json.loads(resp["body"])["message"])

    def test_anonymous_booking_returns_201(self):
        self.mock_create.return_value = _booking()
        resp = self.mod.create_booking(self._event(), None)

        self.assertEqual(201, resp["statusCode"])
        req, actor = self.mock_create.call_args[0]
        self.assertEqual("deluxe-1", req.room_id)
        self.assertIsNone(actor)
        data = json.loads(resp["body"])["data"]
        self.assertEqual("pending", data["status"])
        self.assertEqual(200.0, data["totalPrice"])
        self.assertIsNone(data["user"])

    def test_authenticated_booking_is_owned(self):
        self.mock_create.return_value = _booking(user_id="u1")
        resp = self.mod.create_booking(self._event(user_id="u1"), None)

        self.assertEqual(201, resp["statusCode"])
        _, actor = self.mock_create.call_args[0]
        self.assertEqual("u1", actor.user_id)

    def test_unknown_room_returns_404(self):
        self.mock_create.side_effect = NotFoundException("Room", "deluxe-1")
        resp = self.mod.create_booking(self._event(), None)
        self.assertEqual(404, resp["statusCode"])

    def test_client_error_returns_500(self):
        self.mock_create.side_effect = ClientError(
            {"Error": {"Code": "500", "Message": "fail"}}, "TransactWriteItems"
        )
        resp = self.mod.create_booking(self._event(), None)
        self.assertEqual(500, resp["statusCode"])

    def test_generic_error_returns_500(self):
        self.mock_create.side_effect = RuntimeError("boom")
        resp = self.mod.create_booking(self._event(), None)
        self.assertEqual(500, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()

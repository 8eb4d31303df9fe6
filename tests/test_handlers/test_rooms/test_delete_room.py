import importlib
import json
import os
import unittest
from unittest.mock import MagicMock, patch

from common.models.rooms import Room
from common.utils.custom_exceptions import (
    AuthorizationException,
    ConflictException,
    NotFoundException,
)


class DeleteRoomTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("handlers.rooms.delete_room.resource")
        mock_res = cls.resource.start()
        mock_res.return_value.Table.return_value = MagicMock()
        import handlers.rooms.delete_room as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_send = patch(
            "handlers.rooms.delete_room.send_custom_response",
            side_effect=lambda status_code, message=None, data=None: {
                "statusCode": status_code,
                "body": json.dumps({"message": message, "data": data}),
            },
        )
        self.p_delete = patch.object(self.mod.room_service, "delete_room")
        self.mock_send = self.p_send.start()
        self.mock_delete = self.p_delete.start()

    def tearDown(self):
        self.p_send.stop()
        self.p_delete.stop()

    def _event(self, room_id="r1"):
        return {
            "requestContext": {"authorizer": {"user_id": "admin", "role": "ADMIN"}},
            "pathParameters": {"room_id": room_id} if room_id else None,
        }

    def test_anonymous_returns_401(self):
        resp = self.mod.delete_room({"pathParameters": {"room_id": "r1"}}, None)
        self.assertEqual(401, resp["statusCode"])

    def test_missing_room_id_returns_400(self):
        resp = self.mod.delete_room(self._event(room_id=None), None)
        self.assertEqual(400, resp["statusCode"])

    def test_success_returns_200(self):
        self.mock_delete.return_value = Room(room_id="r1", name="R1", room_type="Deluxe", price=1.0)
        resp = self.mod.delete_room(self._event(), None)
        self.assertEqual(200, resp["statusCode"])
        self.assertEqual({"room_id": "r1"}, json.loads(resp["body"])["data"])

    def test_error_mapping(self):
        cases = [
            (AuthorizationException("Only admins can delete rooms"), 403),
            (NotFoundException("Room", "r1"), 404),
            (ConflictException("Room R1 is occupied"), 409),
            (RuntimeError("boom"), 500),
        ]
        for exc, status in cases:
            with self.subTest(exc=type(exc).__name__):
                self.mock_delete.side_effect = exc
                resp = self.mod.delete_room(self._event(), None)
                self.assertEqual(status, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()

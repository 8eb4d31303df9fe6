from botocore.exceptions import ClientError
import logging
from typing import Optional, List
from boto3.dynamodb.conditions import Key, Attr
from common.models.bookings import Booking, BookingStatus, PaymentStatus
from common.models.rooms import Room, RoomStatus
from common.utils.constants import (
    ASSIGNMENT_PREFIX,
    BOOKING_PREFIX,
    DETAILS_SK,
    ROOM_PREFIX,
    USER_PREFIX,
)
from common.utils.custom_exceptions import ConflictException
from common.utils.datetime_normaliser import from_iso_string, to_iso_string
from decimal import Decimal
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
    from types_boto3_dynamodb import DynamoDBClient
else:
    Table = object
    DynamoDBClient = object


logger = logging.getLogger(__name__)


def _error_code(err: ClientError) -> str:
    return err.response.get("Error", {}).get("Code", "")


class BookingRepository:
    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    def _booking_key(self, booking_id: str) -> dict:
        return {"pk": f"{BOOKING_PREFIX}{booking_id}", "sk": DETAILS_SK}

    def add_booking(self, booking: Booking):
        booking_item = {
            **self._booking_key(booking.booking_id),
            "room_id": booking.room_id,
            "user_id": booking.user_id,
            "customer_name": booking.customer_name,
            "customer_email": booking.customer_email,
            "customer_phone": booking.customer_phone,
            "check_in": to_iso_string(booking.checkin),
            "check_out": to_iso_string(booking.checkout),
            "guests": booking.guests,
            "total_price": Decimal(str(booking.total_price)),
            "payment_status": booking.payment_status.value,
            "payment_screenshot": booking.payment_screenshot,
            "assigned_room": booking.assigned_room,
            "booking_status": booking.status.value,
            "created_at": to_iso_string(booking.created_at),
            "updated_at": to_iso_string(booking.updated_at),
        }
        transact_items = [
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": booking_item,
                    "ConditionExpression": "attribute_not_exists(pk)",
                }
            }
        ]
        if booking.user_id:
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.table.name,
                        "Item": {
                            "pk": f"{USER_PREFIX}{booking.user_id}",
                            "sk": f"{BOOKING_PREFIX}{booking.booking_id}",
                            "booking_id": booking.booking_id,
                            "created_at": booking_item["created_at"],
                        },
                    }
                }
            )

        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            logger.error(f"Error creating booking {booking.booking_id}: {err}")
            raise

    def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        try:
            response = self.table.get_item(Key=self._booking_key(booking_id))
        except ClientError as err:
            logger.error(f"Error retrieving booking {booking_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        key_condition = Key("pk").eq(f"{USER_PREFIX}{user_id}") & Key("sk").begins_with(
            BOOKING_PREFIX
        )
        try:
            response = self.table.query(KeyConditionExpression=key_condition)
            items = response.get("Items", [])
            while "LastEvaluatedKey" in response:
                response = self.table.query(
                    KeyConditionExpression=key_condition,
                    ExclusiveStartKey=response["LastEvaluatedKey"],
                )
                items.extend(response.get("Items", []))
        except ClientError as err:
            logger.error(f"Error retrieving user {user_id} bookings: {err}")
            raise

        bookings = []
        for item in items:
            booking = self.get_booking_by_id(item["sk"].removeprefix(BOOKING_PREFIX))
            if booking is not None:
                bookings.append(booking)
        return bookings

    def get_all_bookings(self) -> List[Booking]:
        scan_kwargs = {
            "FilterExpression": Attr("pk").begins_with(BOOKING_PREFIX)
            & Attr("sk").eq(DETAILS_SK)
        }
        try:
            response = self.table.scan(**scan_kwargs)
            items = response.get("Items", [])
            while "LastEvaluatedKey" in response:
                response = self.table.scan(
                    **scan_kwargs, ExclusiveStartKey=response["LastEvaluatedKey"]
                )
                items.extend(response.get("Items", []))
        except ClientError as err:
            logger.error(f"Error listing bookings: {err}")
            raise
        return [self._to_domain(item) for item in items]

    def get_assignment_holder(self, room_name: str) -> Optional[str]:
        """Returns the id of the booking currently holding ``room_name``."""
        try:
            response = self.table.get_item(
                Key={"pk": f"{ASSIGNMENT_PREFIX}{room_name}", "sk": DETAILS_SK}
            )
        except ClientError as err:
            logger.error(f"Error retrieving assignment for room {room_name}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return item["booking_id"]

    def update_booking_status(
        self, booking_id: str, status: BookingStatus, expected_status: BookingStatus
    ):
        try:
            self.table.update_item(
                Key=self._booking_key(booking_id),
                UpdateExpression="SET #booking_status = :new_value, #updated_at = :now",
                ExpressionAttributeNames={
                    "#booking_status": "booking_status",
                    "#updated_at": "updated_at",
                },
                ExpressionAttributeValues={
                    ":new_value": status.value,
                    ":expected": expected_status.value,
                    ":now": self._now_iso(),
                },
                ConditionExpression="#booking_status = :expected",
            )
        except ClientError as err:
            if _error_code(err) == "ConditionalCheckFailedException":
                raise ConflictException(
                    f"Booking {booking_id} is no longer {expected_status.value}"
                )
            logger.error(f"Error updating booking {booking_id} status: {err}")
            raise

    def assign_room(self, booking: Booking, room: Room):
        """Checks a confirmed booking into an available room in one transaction.

        ``booking`` and ``room`` carry the new values. The write only goes
        through while the booking is still confirmed, the room is still
        available and no other booking holds the room name.
        """
        now = self._now_iso()
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Update": {
                            "Key": self._booking_key(booking.booking_id),
                            "TableName": self.table.name,
                            "UpdateExpression": (
                                "SET #booking_status = :new_value, "
                                "#assigned_room = :room_name, #updated_at = :now"
                            ),
                            "ExpressionAttributeNames": {
                                "#booking_status": "booking_status",
                                "#assigned_room": "assigned_room",
                                "#updated_at": "updated_at",
                            },
                            "ExpressionAttributeValues": {
                                ":new_value": BookingStatus.CHECKED_IN.value,
                                ":expected": BookingStatus.CONFIRMED.value,
                                ":room_name": room.name,
                                ":now": now,
                            },
                            "ConditionExpression": "#booking_status = :expected",
                        }
                    },
                    {
                        "Update": {
                            "Key": {
                                "pk": f"{ROOM_PREFIX}{room.room_id}",
                                "sk": DETAILS_SK,
                            },
                            "TableName": self.table.name,
                            "UpdateExpression": (
                                "SET #room_status = :new_value, #guest = :guest, "
                                "#check_out_date = :check_out_date"
                            ),
                            "ExpressionAttributeNames": {
                                "#room_status": "room_status",
                                "#guest": "guest",
                                "#check_out_date": "check_out_date",
                            },
                            "ExpressionAttributeValues": {
                                ":new_value": RoomStatus.OCCUPIED.value,
                                ":expected": RoomStatus.AVAILABLE.value,
                                ":guest": room.guest,
                                ":check_out_date": room.check_out_date,
                            },
                            "ConditionExpression": "#room_status = :expected",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": {
                                "pk": f"{ASSIGNMENT_PREFIX}{room.name}",
                                "sk": DETAILS_SK,
                                "booking_id": booking.booking_id,
                                "room_id": room.room_id,
                                "assigned_at": now,
                            },
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                ]
            )
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise ConflictException(
                    f"Room {room.name} was taken or booking {booking.booking_id} "
                    "changed while assigning"
                )
            logger.error(
                f"Error assigning room {room.name} to booking {booking.booking_id}: {err}"
            )
            raise

    def cancel_booking(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        released_room: Optional[Room] = None,
    ):
        """Cancels ``booking`` and gives back its assigned room, if any.

        The assignment lock is removed whenever the booking had a room name,
        even if the room record itself is gone.
        """
        transact_items = [
            {
                "Update": {
                    "Key": self._booking_key(booking.booking_id),
                    "TableName": self.table.name,
                    "UpdateExpression": "SET #booking_status = :new_value, #updated_at = :now",
                    "ExpressionAttributeNames": {
                        "#booking_status": "booking_status",
                        "#updated_at": "updated_at",
                    },
                    "ExpressionAttributeValues": {
                        ":new_value": BookingStatus.CANCELLED.value,
                        ":expected": expected_status.value,
                        ":now": self._now_iso(),
                    },
                    "ConditionExpression": "#booking_status = :expected",
                }
            }
        ]
        if booking.assigned_room:
            transact_items.append(
                {
                    "Delete": {
                        "TableName": self.table.name,
                        "Key": {
                            "pk": f"{ASSIGNMENT_PREFIX}{booking.assigned_room}",
                            "sk": DETAILS_SK,
                        },
                        "ConditionExpression": (
                            "attribute_not_exists(pk) OR #booking_id = :booking_id"
                        ),
                        "ExpressionAttributeNames": {"#booking_id": "booking_id"},
                        "ExpressionAttributeValues": {
                            ":booking_id": booking.booking_id
                        },
                    }
                }
            )
        if released_room is not None:
            transact_items.append(
                {
                    "Update": {
                        "Key": {
                            "pk": f"{ROOM_PREFIX}{released_room.room_id}",
                            "sk": DETAILS_SK,
                        },
                        "TableName": self.table.name,
                        "UpdateExpression": (
                            "SET #room_status = :new_value, #guest = :none, "
                            "#check_out_date = :none"
                        ),
                        "ExpressionAttributeNames": {
                            "#room_status": "room_status",
                            "#guest": "guest",
                            "#check_out_date": "check_out_date",
                        },
                        "ExpressionAttributeValues": {
                            ":new_value": RoomStatus.AVAILABLE.value,
                            ":none": None,
                        },
                        "ConditionExpression": "attribute_exists(pk)",
                    }
                }
            )

        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise ConflictException(
                    f"Booking {booking.booking_id} changed while cancelling"
                )
            logger.error(f"Error cancelling booking {booking.booking_id}: {err}")
            raise

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _to_domain(item: dict) -> Booking:
        return Booking(
            booking_id=item["pk"].removeprefix(BOOKING_PREFIX),
            room_id=item["room_id"],
            user_id=item.get("user_id"),
            customer_name=item["customer_name"],
            customer_email=item["customer_email"],
            customer_phone=item["customer_phone"],
            checkin=from_iso_string(item["check_in"]),
            checkout=from_iso_string(item["check_out"]),
            guests=int(item["guests"]),
            total_price=float(item["total_price"]),
            payment_status=PaymentStatus(item.get("payment_status", "pending")),
            payment_screenshot=item.get("payment_screenshot"),
            assigned_room=item.get("assigned_room"),
            status=BookingStatus(item["booking_status"]),
            created_at=from_iso_string(item["created_at"]),
            updated_at=from_iso_string(item.get("updated_at", item["created_at"])),
        )

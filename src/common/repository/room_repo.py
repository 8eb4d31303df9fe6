from botocore.exceptions import ClientError
import logging
from decimal import Decimal
from typing import Optional, List
from boto3.dynamodb.conditions import Key, Attr
from common.models.rooms import Room, RoomStatus
from common.utils.constants import (
    DETAILS_SK,
    ROOM_NAME_PREFIX,
    ROOM_PREFIX,
    DEFAULT_POLICIES,
)
from common.utils.custom_exceptions import ConflictException
from common.utils.datetime_normaliser import from_iso_string, to_iso_string

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


def _to_number(value):
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class RoomRepository:
    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    def add_room(self, room: Room):
        name_item = {
            "pk": f"{ROOM_NAME_PREFIX}{room.name}",
            "sk": f"{ROOM_PREFIX}{room.room_id}",
        }
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": self._to_item(room),
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": name_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                ]
            )
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise ConflictException(f"Room with name {room.name} already exists")
            logger.error(f"Error creating room {room.room_id}: {err}")
            raise

    def get_room_by_id(self, room_id: str) -> Optional[Room]:
        try:
            response = self.table.get_item(
                Key={"pk": f"{ROOM_PREFIX}{room_id}", "sk": DETAILS_SK}
            )
        except ClientError as err:
            logger.error(f"Error retrieving room by id {room_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_room_by_name(self, name: str) -> Optional[Room]:
        try:
            response = self.table.query(
                KeyConditionExpression=(
                    Key("pk").eq(f"{ROOM_NAME_PREFIX}{name}")
                    & Key("sk").begins_with(ROOM_PREFIX)
                )
            )
        except ClientError as err:
            logger.error(f"Error retrieving room by name {name}: {err}")
            raise

        items = response.get("Items", [])
        if not items:
            return None
        room_id = items[0]["sk"].removeprefix(ROOM_PREFIX)
        return self.get_room_by_id(room_id)

    def list_rooms(self) -> List[Room]:
        scan_kwargs = {
            "FilterExpression": Attr("pk").begins_with(ROOM_PREFIX)
            & Attr("sk").eq(DETAILS_SK)
        }
        rooms = []
        try:
            resp = self.table.scan(**scan_kwargs)
            rooms.extend(self._to_domain(item) for item in resp.get("Items", []))
            while "LastEvaluatedKey" in resp:
                resp = self.table.scan(
                    **scan_kwargs, ExclusiveStartKey=resp["LastEvaluatedKey"]
                )
                rooms.extend(self._to_domain(item) for item in resp.get("Items", []))
        except ClientError as err:
            logger.error(f"Error listing rooms: {err}")
            raise
        return rooms

    def update_room(self, room: Room, previous_name: str):
        """Writes the catalog attributes of ``room``.

        Occupancy attributes are left untouched. A rename moves the name
        index item in the same transaction.
        """
        names = {}
        values = {}
        assignments = []
        for i, (attr, value) in enumerate(self._catalog_attributes(room).items()):
            names[f"#a{i}"] = attr
            values[f":v{i}"] = value
            assignments.append(f"#a{i} = :v{i}")

        condition = "attribute_exists(pk)"
        renamed = room.name != previous_name
        if renamed:
            # check-in holds rooms by name, so only a free room may change it
            condition += " AND #room_status = :available"
            names["#room_status"] = "room_status"
            values[":available"] = RoomStatus.AVAILABLE.value

        transact_items = [
            {
                "Update": {
                    "Key": {"pk": f"{ROOM_PREFIX}{room.room_id}", "sk": DETAILS_SK},
                    "TableName": self.table.name,
                    "UpdateExpression": "SET " + ", ".join(assignments),
                    "ExpressionAttributeNames": names,
                    "ExpressionAttributeValues": values,
                    "ConditionExpression": condition,
                }
            }
        ]
        if renamed:
            transact_items.append(
                {
                    "Delete": {
                        "TableName": self.table.name,
                        "Key": {
                            "pk": f"{ROOM_NAME_PREFIX}{previous_name}",
                            "sk": f"{ROOM_PREFIX}{room.room_id}",
                        },
                    }
                }
            )
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.table.name,
                        "Item": {
                            "pk": f"{ROOM_NAME_PREFIX}{room.name}",
                            "sk": f"{ROOM_PREFIX}{room.room_id}",
                        },
                        "ConditionExpression": "attribute_not_exists(pk)",
                    }
                }
            )

        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise ConflictException(
                    f"Room {room.room_id} could not be updated: name {room.name} "
                    "is taken, or the room was occupied or removed"
                )
            logger.error(f"Error updating room {room.room_id}: {err}")
            raise

    def delete_room(self, room: Room):
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {
                                "pk": f"{ROOM_PREFIX}{room.room_id}",
                                "sk": DETAILS_SK,
                            },
                            "ConditionExpression": "#room_status = :available",
                            "ExpressionAttributeNames": {
                                "#room_status": "room_status"
                            },
                            "ExpressionAttributeValues": {
                                ":available": RoomStatus.AVAILABLE.value
                            },
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {
                                "pk": f"{ROOM_NAME_PREFIX}{room.name}",
                                "sk": f"{ROOM_PREFIX}{room.room_id}",
                            },
                        }
                    },
                ]
            )
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise ConflictException(f"Room {room.name} is occupied or already removed")
            logger.error(f"Error deleting room {room.room_id}: {err}")
            raise

    @staticmethod
    def _catalog_attributes(room: Room) -> dict:
        return {
            "name": room.name,
            "room_type": room.room_type,
            "price": _to_number(room.price),
            "capacity": room.capacity,
            "image": room.image,
            "images": room.images,
            "rating": _to_number(room.rating),
            "reviews": room.reviews,
            "size": room.size,
            "beds": room.beds,
            "amenities": room.amenities,
            "features": room.features,
            "description": room.description,
            "policies": room.policies,
        }

    def _to_item(self, room: Room) -> dict:
        item = {
            "pk": f"{ROOM_PREFIX}{room.room_id}",
            "sk": DETAILS_SK,
            "room_status": room.status.value,
            "guest": room.guest,
            "check_out_date": room.check_out_date,
            "created_at": to_iso_string(room.created_at),
        }
        item.update(self._catalog_attributes(room))
        return item

    @staticmethod
    def _to_domain(item: dict) -> Room:
        capacity = item.get("capacity")
        return Room(
            room_id=item["pk"].removeprefix(ROOM_PREFIX),
            name=item["name"],
            room_type=item["room_type"],
            price=float(item["price"]),
            capacity=int(capacity) if capacity is not None else None,
            image=item.get("image"),
            images=list(item.get("images") or []),
            rating=float(item.get("rating") or 0),
            reviews=int(item.get("reviews") or 0),
            size=item.get("size"),
            beds=item.get("beds"),
            amenities=list(item.get("amenities") or []),
            features=list(item.get("features") or []),
            description=item.get("description"),
            policies=dict(item.get("policies") or DEFAULT_POLICIES),
            status=RoomStatus(item.get("room_status", RoomStatus.AVAILABLE.value)),
            guest=item.get("guest"),
            check_out_date=item.get("check_out_date"),
            created_at=from_iso_string(item["created_at"]),
        )

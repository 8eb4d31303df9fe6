import json
import logging
import os
from boto3 import resource
from botocore.exceptions import ClientError

from common.repository.booking_repo import BookingRepository
from common.repository.room_repo import RoomRepository
from common.services.booking_service import BookingService
from common.schemas.bookings import booking_to_dict
from common.schemas.rooms import room_to_dict
from common.utils.constants import REGION
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import DomainException
from common.utils.identity import resolve_actor

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
room_repo = RoomRepository(table)
booking_service = BookingService(booking_repo=booking_repo, room_repo=room_repo)


def assign_room(event, context):
    actor = resolve_actor(event)
    if actor is None:
        return send_custom_response(401, "Unauthorized")

    booking_id = (event.get("pathParameters") or {}).get("booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    body = {}
    if event.get("body"):
        try:
            body = json.loads(event["body"])
        except json.JSONDecodeError:
            return send_custom_response(400, "Invalid JSON body")
        if not isinstance(body, dict):
            return send_custom_response(400, "Request body must be a JSON object")

    room_name = body.get("assignedRoom")
    if room_name is not None and not isinstance(room_name, str):
        return send_custom_response(400, "assignedRoom must be a string")

    try:
        booking, room = booking_service.assign_room(booking_id, room_name, actor)
        return send_custom_response(
            200,
            "Room assigned and guest checked in",
            {"booking": booking_to_dict(booking), "room": room_to_dict(room)},
        )

    except DomainException as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError:
        logger.exception(f"DynamoDB error while assigning a room to booking {booking_id}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception(f"Unhandled error while assigning a room to booking {booking_id}")
        return send_custom_response(500, "Internal server error")

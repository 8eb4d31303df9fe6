import logging
import os
from boto3 import resource

from common.repository.room_repo import RoomRepository
from common.services.room_service import RoomService
from common.schemas.rooms import room_to_dict
from common.utils.constants import REGION
from common.utils.custom_exceptions import DomainException
from common.utils.custom_response import send_custom_response

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
room_service = RoomService(room_repo=room_repo)


def get_rooms(event, context):
    try:
        rooms = room_service.list_rooms()
        result = [room_to_dict(r) for r in rooms]
        return send_custom_response(
            200, "successfully retrieved", {"count": len(result), "rooms": result}
        )
    except Exception:
        logger.exception("Unhandled error while listing rooms")
        return send_custom_response(500, "Internal server error")


def get_room(event, context):
    room_id = (event.get("pathParameters") or {}).get("room_id")
    if not room_id:
        return send_custom_response(400, "room_id is required in the path")

    try:
        room = room_service.get_room(room_id)
        return send_custom_response(200, "successfully retrieved", room_to_dict(room))
    except DomainException as err:
        return send_custom_response(err.status_code, str(err))
    except Exception:
        logger.exception(f"Unhandled error while retrieving room {room_id}")
        return send_custom_response(500, "Internal server error")

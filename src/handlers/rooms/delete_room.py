import logging
import os
from boto3 import resource
from botocore.exceptions import ClientError

from common.repository.room_repo import RoomRepository
from common.services.room_service import RoomService
from common.utils.constants import REGION
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import DomainException
from common.utils.identity import resolve_actor

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
room_service = RoomService(room_repo=room_repo)


def delete_room(event, context):
    actor = resolve_actor(event)
    if actor is None:
        return send_custom_response(401, "Unauthorized")

    room_id = (event.get("pathParameters") or {}).get("room_id")
    if not room_id:
        return send_custom_response(400, "room_id is required in the path")

    try:
        room = room_service.delete_room(room_id, actor)
        return send_custom_response(200, f"Room {room.name} removed", {"room_id": room_id})
    except DomainException as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError:
        logger.exception(f"AWS client error while deleting room {room_id}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception(f"Unhandled error while deleting room {room_id}")
        return send_custom_response(500, "Internal server error")

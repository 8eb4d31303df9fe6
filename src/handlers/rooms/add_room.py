import logging
import os
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from common.repository.room_repo import RoomRepository
from common.services.room_service import RoomService
from common.schemas.validation import format_validation_error
from common.schemas.rooms import RoomCreateRequest, room_to_dict
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


def add_room(event, context):
    actor = resolve_actor(event)
    if actor is None:
        return send_custom_response(401, "Unauthorized")

    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = RoomCreateRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        room = room_service.add_room(request_body, actor)
    except DomainException as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError:
        logger.exception("DynamoDB error while adding room")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while adding room")
        return send_custom_response(500, "Internal server error")

    return send_custom_response(201, f"Room {room.name} added successfully", room_to_dict(room))

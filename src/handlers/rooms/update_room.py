import logging
import os
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from common.repository.room_repo import RoomRepository
from common.services.room_service import RoomService
from common.schemas.validation import format_validation_error
from common.schemas.rooms import RoomUpdateRequest, room_to_dict
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


def update_room(event, context):
    try:
        actor = resolve_actor(event)
        if actor is None:
            return send_custom_response(401, "Unauthorized")

        path_params = event.get("pathParameters") or {}
        room_id = path_params.get("room_id")

        if not room_id:
            return send_custom_response(400, "room_id is required in the path")

        if not event.get("body"):
            return send_custom_response(400, "Request body is required")

        try:
            request_body = RoomUpdateRequest.model_validate_json(event["body"])
        except ValidationError as e:
            return send_custom_response(400, format_validation_error(e))

        room = room_service.update_room(room_id, request_body, actor)

        return send_custom_response(200, "Room updated successfully", room_to_dict(room))

    except DomainException as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError:
        logger.exception("AWS client error while updating room")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while updating room")
        return send_custom_response(500, "Internal server error")

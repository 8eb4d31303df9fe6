import logging
import os
from boto3 import resource
from botocore.exceptions import ClientError

from common.repository.booking_repo import BookingRepository
from common.repository.room_repo import RoomRepository
from common.services.booking_service import BookingService
from common.schemas.bookings import booking_to_dict, parse_booking_request
from common.utils.constants import REGION
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import DomainException, ValidationException
from common.utils.identity import resolve_actor

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
room_repo = RoomRepository(table)

booking_service = BookingService(
    booking_repo=booking_repo,
    room_repo=room_repo,
)


def create_booking(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = parse_booking_request(event["body"])
    except ValidationException as err:
        return send_custom_response(400, str(err))

    # authentication is optional here; anonymous bookings have no owner
    actor = resolve_actor(event)

    try:
        booking = booking_service.create_booking(request_body, actor)
        return send_custom_response(
            201, "Booking created successfully", booking_to_dict(booking)
        )

    except DomainException as err:
        return send_custom_response(err.status_code, str(err))

    except ClientError:
        logger.exception("DynamoDB error while creating booking")
        return send_custom_response(500, "Internal server error")

    except Exception:
        logger.exception("Unhandled error while creating booking")
        return send_custom_response(500, "Internal server error")

import logging
import os
from boto3 import resource
from botocore.exceptions import ClientError

from common.repository.booking_repo import BookingRepository
from common.repository.room_repo import RoomRepository
from common.services.booking_service import BookingService
from common.schemas.bookings import booking_to_dict
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


def cancel_booking(event, context):
    actor = resolve_actor(event)
    if actor is None:
        return send_custom_response(401, "Unauthorized")

    booking_id = (event.get("pathParameters") or {}).get("booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        booking = booking_service.cancel_booking(booking_id, actor)
        return send_custom_response(200, "Booking cancelled", booking_to_dict(booking))

    except DomainException as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError:
        logger.exception(f"DynamoDB error while cancelling booking {booking_id}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception(f"Unhandled error while cancelling booking {booking_id}")
        return send_custom_response(500, "Internal server error")

import logging
import os
from boto3 import resource

from common.repository.booking_repo import BookingRepository
from common.repository.user_repo import UserRepository
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
user_repo = UserRepository(table)
room_repo = RoomRepository(table)

booking_service = BookingService(
    booking_repo=booking_repo,
    room_repo=room_repo,
    user_repo=user_repo,
)


def get_my_bookings(event, context):
    actor = resolve_actor(event)
    if actor is None:
        return send_custom_response(401, "Unauthorized")

    try:
        bookings = booking_service.get_user_bookings(actor)
        result = [booking_to_dict(b.booking, room=b.room) for b in bookings]
        return send_custom_response(
            200,
            "Bookings retrieved successfully",
            {"count": len(result), "bookings": result},
        )

    except Exception:
        logger.exception("Unhandled error while listing user bookings")
        return send_custom_response(500, "Internal server error")


def get_all_bookings(event, context):
    actor = resolve_actor(event)
    if actor is None:
        return send_custom_response(401, "Unauthorized")

    try:
        bookings = booking_service.get_all_bookings(actor)
        result = [booking_to_dict(b.booking, room=b.room, user=b.user) for b in bookings]
        return send_custom_response(
            200,
            "Bookings retrieved successfully",
            {"count": len(result), "bookings": result},
        )

    except DomainException as err:
        return send_custom_response(err.status_code, str(err))

    except Exception:
        logger.exception("Unhandled error while listing all bookings")
        return send_custom_response(500, "Internal server error")

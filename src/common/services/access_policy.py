from typing import Optional

from common.models.bookings import Booking
from common.models.users import Actor
from common.utils.custom_exceptions import AuthorizationException


def require_authenticated(actor: Optional[Actor]) -> Actor:
    if actor is None:
        raise AuthorizationException("Authentication required")
    return actor


def require_admin(actor: Optional[Actor], action: str) -> Actor:
    actor = require_authenticated(actor)
    if not actor.is_admin:
        raise AuthorizationException(f"Only admins can {action}")
    return actor


def can_cancel(actor: Optional[Actor], booking: Booking) -> bool:
    if actor is None:
        return False
    return actor.is_admin or booking.is_owned_by(actor.user_id)

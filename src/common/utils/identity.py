import logging
from typing import Optional

from jose import JWTError

from common.models.users import Actor, UserRole
from common.utils import jwt_service

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def parse_role(role_raw) -> UserRole:
    try:
        return UserRole(str(role_raw).upper())
    except ValueError:
        return UserRole.CUSTOMER


def bearer_token(event: dict) -> Optional[str]:
    """Token from the Authorization header, or from a TOKEN authorizer event."""
    headers = event.get("headers") or {}
    auth = (
        headers.get("Authorization")
        or headers.get("authorization")
        or event.get("authorizationToken")
    )
    if not auth or not auth.startswith(BEARER_PREFIX):
        return None
    return auth[len(BEARER_PREFIX):].strip() or None


def actor_from_claims(claims: dict) -> Optional[Actor]:
    user_id = claims.get("user_id")
    if not user_id:
        return None
    return Actor(user_id=str(user_id), role=parse_role(claims.get("role")))


def resolve_actor(event: dict) -> Optional[Actor]:
    """Returns the caller behind an API Gateway event, or None when anonymous.

    The authorizer context wins when present. Routes without an authorizer
    (optional auth) fall back to decoding the bearer token; a bad token is
    treated as anonymous.
    """
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    if authorizer.get("user_id"):
        return actor_from_claims(authorizer)

    token = bearer_token(event)
    if not token:
        return None
    try:
        claims = jwt_service.decode_access_token(token)
    except (JWTError, RuntimeError) as err:
        logger.info(f"Ignoring unusable bearer token: {err}")
        return None

    return actor_from_claims(claims)

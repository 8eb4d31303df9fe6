import logging
import os
from typing import Optional

import jwt

from common.models.users import Actor
from common.utils.identity import actor_from_claims, bearer_token

logger = logging.getLogger(__name__)

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable is not set")

ANONYMOUS_PRINCIPAL = "unauthorized"


def _stage_resource(method_arn: str) -> str:
    # API Gateway caches the policy per token, so it has to cover every route
    api_and_stage = method_arn.split("/")[:2]
    return "/".join(api_and_stage) + "/*/*"


def _policy(method_arn: str, actor: Optional[Actor] = None, email: str = "") -> dict:
    """Allow for a resolved ``actor``, Deny otherwise.

    The context is what ``common.utils.identity.resolve_actor`` reads back in
    the booking and room handlers, so the role is always a ``UserRole`` value.
    """
    statement = {
        "Action": "execute-api:Invoke",
        "Effect": "Allow" if actor else "Deny",
        "Resource": _stage_resource(method_arn),
    }
    policy = {
        "principalId": actor.user_id if actor else ANONYMOUS_PRINCIPAL,
        "policyDocument": {"Version": "2012-10-17", "Statement": [statement]},
    }
    if actor:
        policy["context"] = {
            "user_id": actor.user_id,
            "role": actor.role.value,
            "email": email,
        }
    return policy


def lambda_handler(event, context):
    method_arn = event["methodArn"]

    token = bearer_token(event)
    if token is None:
        logger.info("Authorization failed: no bearer token")
        return _policy(method_arn)

    try:
        claims = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Authorization failed: token expired")
        return _policy(method_arn)
    except jwt.InvalidTokenError as err:
        logger.info(f"Authorization failed: invalid token ({err})")
        return _policy(method_arn)
    except Exception as err:
        logger.warning(f"Authorization failed: {err}")
        return _policy(method_arn)

    actor = actor_from_claims(claims)
    if actor is None:
        logger.info("Authorization failed: token has no user_id")
        return _policy(method_arn)

    return _policy(method_arn, actor, email=str(claims.get("email") or ""))

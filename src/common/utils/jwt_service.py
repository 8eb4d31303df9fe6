import os
from jose import jwt

SECRET_KEY = os.environ.get("JWT_SECRET")
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")


def decode_access_token(token: str) -> dict:
    if not SECRET_KEY:
        raise RuntimeError("JWT_SECRET environment variable is not set")
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])

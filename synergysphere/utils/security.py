from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from synergysphere.config import settings


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Raises JWTError when the token is invalid or expired."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def user_id_from_token(token: str) -> int | None:
    """
    Resolve the user id carried by a bearer token without touching the database.
    Used by the WebSocket handshake, where no request session exists.
    """
    try:
        payload = decode_access_token(token)
    except JWTError:
        return None
    uid = payload.get("uid")
    if uid is None:
        return None
    try:
        return int(uid)
    except (TypeError, ValueError):
        return None

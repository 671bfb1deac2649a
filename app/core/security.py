from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import UnauthenticatedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate a session token using SECRET_KEY.

    Args:
        token: Session token from the Authorization header

    Returns:
        Decoded token payload with 'sub' (user id) and/or 'email', 'exp', etc.

    Raises:
        UnauthenticatedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthenticatedException(f"Invalid token: {str(e)}")

    # jose validates 'exp' when present but does not require it
    if payload.get("exp") is None:
        raise UnauthenticatedException("Token missing expiration")

    # Older sessions carry only the email claim
    if payload.get("sub") is None and payload.get("email") is None:
        raise UnauthenticatedException("Token missing user identifier")

    return payload


def create_session_token(
    user_id: int,
    role: str,
    parent_admin_id: int | None,
    name: str | None,
    email: str,
    expires_minutes: int | None = None,
) -> str:
    """
    Issue a signed session token.

    Role and parent admin id are embedded so the client can render the
    right home without a round-trip; the server still re-reads both from
    the database on every request.
    """
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "role": role,
        "parent_admin_id": str(parent_admin_id) if parent_admin_id is not None else None,
        "name": name,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Constant-time password check; False for accounts without a password."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or password over bcrypt's 72 byte limit
        return False

import re
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from rentify.core.config import settings

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# (pattern, message) pairs checked in order; the first failure is reported
_PASSWORD_RULES: list[tuple[str, str]] = [
    (r".{8,}", "Password must be at least 8 characters long"),
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"\d", "Password must contain at least one number"),
    (r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?~`]", "Password must contain at least one symbol"),
]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def validate_password(password: str) -> tuple[bool, str | None]:
    """
    Check a password against the account password rules.

    Returns: (is_valid, error_message)
    """
    for pattern, message in _PASSWORD_RULES:
        if not re.search(pattern, password, flags=re.DOTALL):
            return False, message
    return True, None


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Issue a bearer token for a user. The subject is the user ID as a string."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and verify a JWT. Expired or malformed tokens give None."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.InvalidTokenError:
        return None


def user_id_from_token(token: str) -> int | None:
    """The user ID carried by a valid access token, or None."""
    payload = decode_token(token)
    if payload is None or payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

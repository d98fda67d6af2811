"""Auth service: login."""

import logging

from sqlalchemy.orm import Session

from rentify.core.security import create_access_token, verify_password
from rentify.errors import UnauthorizedError
from rentify.repositories.user import get_user_by_email
from rentify.schemas.user import Token, User

logger = logging.getLogger(__name__)


def login(db: Session, email: str, password: str) -> Token:
    """
    Authenticate user by email and password, return JWT access token.

    Raises:
        UnauthorizedError: If email not found or password incorrect.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for %s", email)
        raise UnauthorizedError("Incorrect email or password")

    access_token = create_access_token(user.id)
    return Token(
        access_token=access_token,
        token_type="bearer",
        user=User.model_validate(user),
    )

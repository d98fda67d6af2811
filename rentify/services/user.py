from sqlalchemy.orm import Session

import rentify.repositories.role as role_repo
import rentify.repositories.user as user_repo
from rentify.core.security import get_password_hash, validate_password
from rentify.db.models.user import User as UserModel
from rentify.domain.caller import ADMIN, OWNER, RENTER, CallerContext
from rentify.errors import (
    DomainValidationError,
    DuplicateResourceError,
    ForbiddenError,
    NotFoundError,
)
from rentify.schemas.user import UserCreate

SELF_SERVICE_ROLES = (OWNER, RENTER)


def create_user(
    db: Session, user_data: UserCreate, caller: CallerContext | None = None
) -> UserModel:
    """
    Register a new user with business logic validation.

    - Validates email uniqueness
    - Validates password requirements
    - Anyone may register as owner or renter; only admins may create admins
    """
    if user_repo.get_user_by_email(db, user_data.email):
        raise DuplicateResourceError("Email already registered")

    is_valid, error_message = validate_password(user_data.password)
    if not is_valid:
        raise DomainValidationError(error_message)

    if user_data.role not in SELF_SERVICE_ROLES:
        if user_data.role != ADMIN:
            raise DomainValidationError(f"Unknown role '{user_data.role}'")
        if caller is None or not caller.is_admin:
            raise ForbiddenError("Only admins can create admin users")

    role = role_repo.get_role_by_name(db, user_data.role)
    if not role:
        raise NotFoundError(f"Role '{user_data.role}' not found")

    return user_repo.create_user(
        db,
        email=user_data.email,
        name=user_data.name,
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
        role_id=role.id,
    )


def get_user(db: Session, user_id: int, caller: CallerContext) -> UserModel:
    """
    Get a user by ID. Admins can get anyone; other users only themselves.

    Raises:
        NotFoundError: If user doesn't exist
        ForbiddenError: If a non-admin asks for someone else
    """
    if not caller.is_admin and caller.id != user_id:
        raise ForbiddenError("You can only access your own user information")

    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user

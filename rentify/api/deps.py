from functools import lru_cache
from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

import rentify.repositories.user as user_repo
from rentify.core.config import settings
from rentify.core.security import user_id_from_token
from rentify.db import SessionLocal
from rentify.db.models.user import User
from rentify.domain.caller import CallerContext, RequestOrigin
from rentify.errors import ForbiddenError
from rentify.services.storage import BlobStorage, S3BlobStorage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request (background tasks)."""
    return SessionLocal


@lru_cache
def _default_blob_storage() -> BlobStorage:
    return S3BlobStorage(settings)


def get_blob_storage_factory() -> Callable[[], BlobStorage]:
    """
    Return a callable that builds the blob store lazily.

    Background tasks receive the factory rather than a client so that a
    misconfigured store surfaces inside the task, not in the request.
    """
    return _default_blob_storage


def get_blob_storage(
    storage_factory: Callable[[], BlobStorage] = Depends(get_blob_storage_factory),
) -> BlobStorage:
    return storage_factory()


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token."""
    user_id = user_id_from_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = user_repo.get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_caller(current_user: User = Depends(get_current_user)) -> CallerContext:
    """The authenticated identity, as passed explicitly to services."""
    return CallerContext(id=current_user.id, role=current_user.role.name)


def get_optional_caller(
    token: str | None = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db),
) -> CallerContext | None:
    """The caller if a valid bearer token was sent, otherwise None."""
    user_id = user_id_from_token(token) if token else None
    user = user_repo.get_user_by_id(db, user_id) if user_id is not None else None
    if user is None:
        return None
    return CallerContext(id=user.id, role=user.role.name)


def get_request_origin(request: Request) -> RequestOrigin:
    return RequestOrigin(
        ip=request.client.host if request.client else "",
        user_agent=request.headers.get("user-agent", ""),
    )


def require_roles(*role_names: str):
    """
    Create a dependency that requires the caller to have one of the specified roles.

    Example:
        Depends(require_roles("admin"))
        Depends(require_roles("admin", "owner"))
    """

    def role_checker(caller: CallerContext = Depends(get_caller)) -> CallerContext:
        if caller.role not in role_names:
            raise ForbiddenError("Not enough permissions")
        return caller

    return role_checker

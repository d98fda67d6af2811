from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentify.api.deps import get_db, get_caller, get_optional_caller
from rentify.domain.caller import CallerContext
from rentify.schemas.user import User, UserCreate
from rentify.services.user import create_user, get_user

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def register_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    caller: CallerContext | None = Depends(get_optional_caller),
):
    """
    Register a user as owner or renter.
    Registration is open; an admin token is required to create admins.
    """
    user = create_user(db, user_data, caller)
    return User.model_validate(user)


@router.get("/{user_id}", response_model=User)
def get_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """
    Get a user by ID.
    - Admin: can see any user
    - Owner / Renter: can only see themselves
    """
    return User.model_validate(get_user(db, user_id, caller))

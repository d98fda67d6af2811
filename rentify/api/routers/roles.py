from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentify.api.deps import get_db
import rentify.repositories.role as role_repo
from rentify.schemas.role import Role

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[Role])
def list_roles(db: Session = Depends(get_db)):
    """The account roles seeded by migrations. Public, used by sign-up forms."""
    return [Role.model_validate(role) for role in role_repo.get_all_roles(db)]

from sqlalchemy.orm import Session

import rentify.repositories.property as property_repo
import rentify.repositories.user as user_repo
from rentify.db.models.property import Property as PropertyModel
from rentify.domain.caller import OWNER, CallerContext
from rentify.errors import ForbiddenError, NotFoundError
from rentify.schemas.property import PropertyCreate


def create_property(
    db: Session, property_data: PropertyCreate, caller: CallerContext
) -> PropertyModel:
    """
    Create a listing.

    - Owners list their own properties; owner_id in the payload is ignored
    - Admins may list on behalf of an existing user, or leave the owner unset
    """
    if caller.is_admin:
        owner_id = property_data.owner_id
        if owner_id is not None and not user_repo.get_user_by_id(db, owner_id):
            raise NotFoundError(f"User with id {owner_id} not found")
    elif caller.role == OWNER:
        owner_id = caller.id
    else:
        raise ForbiddenError("Only owners and admins can create properties")

    return property_repo.create_property(
        db,
        name=property_data.name,
        address=property_data.address,
        owner_id=owner_id,
        created_by_id=caller.id,
        description=property_data.description,
        city=property_data.city,
        property_type=property_data.property_type,
        price=property_data.price,
    )


def get_property(db: Session, property_id: int) -> PropertyModel:
    """Property directory lookup. Raises NotFoundError when absent."""
    prop = property_repo.get_property_by_id(db, property_id)
    if not prop:
        raise NotFoundError(f"Property with id {property_id} not found")
    return prop

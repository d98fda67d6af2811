from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rentify.api.deps import get_db, get_caller, require_roles
from rentify.domain.caller import CallerContext
import rentify.repositories.property as property_repo
from rentify.schemas.pagination import PageParams, PaginatedResponse
from rentify.schemas.property import Property, PropertyCreate
from rentify.services.property import create_property, get_property

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post("", response_model=Property, status_code=status.HTTP_201_CREATED)
def create_new_property(
    property_data: PropertyCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_roles("admin", "owner")),
):
    """
    Create a listing. Owners list their own properties; admins may list for any owner.
    """
    prop = create_property(db, property_data, caller)
    return Property.model_validate(prop)


@router.get("", response_model=PaginatedResponse[Property])
def get_all_properties(
    paging: PageParams = Depends(),
    owner: int | None = Query(None, description="Filter by listing owner ID"),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """List properties, newest first."""
    properties, total = property_repo.get_all_properties_paginated(
        db, page=paging.page, page_size=paging.page_size, owner_id=owner
    )
    return PaginatedResponse(
        items=[Property.model_validate(p) for p in properties],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get("/{property_id}", response_model=Property)
def get_property_by_id(
    property_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Get a property by ID."""
    return Property.model_validate(get_property(db, property_id))

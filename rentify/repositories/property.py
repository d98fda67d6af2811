from sqlalchemy.orm import Session

from rentify.db.models.property import Property as PropertyModel


def get_property_by_id(db: Session, property_id: int) -> PropertyModel | None:
    """Get a property by ID."""
    return db.query(PropertyModel).filter(PropertyModel.id == property_id).first()


def get_all_properties_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 50,
    owner_id: int | None = None,
) -> tuple[list[PropertyModel], int]:
    """
    Get properties with pagination, newest first.

    Args:
        page: Page number (1-indexed)
        page_size: Number of items per page
        owner_id: Optional filter by listing owner

    Returns:
        Tuple of (list of properties, total count)
    """
    query = db.query(PropertyModel)
    if owner_id is not None:
        query = query.filter(PropertyModel.owner_id == owner_id)

    total = query.count()
    skip = (page - 1) * page_size
    properties = (
        query.order_by(PropertyModel.created_at.desc(), PropertyModel.id.desc())
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return properties, total


def create_property(
    db: Session,
    name: str,
    address: str,
    owner_id: int | None,
    created_by_id: int | None,
    description: str | None = None,
    city: str | None = None,
    property_type: str | None = None,
    price: float | None = None,
) -> PropertyModel:
    """Create a new property in the database. Pure data access - no business logic."""
    db_property = PropertyModel(
        name=name,
        address=address,
        owner_id=owner_id,
        created_by_id=created_by_id,
        description=description,
        city=city,
        property_type=property_type,
        price=price,
    )
    db.add(db_property)
    db.commit()
    db.refresh(db_property)
    return db_property

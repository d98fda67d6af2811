from sqlalchemy.orm import Session, selectinload

from rentify.db.models.booking import Booking as BookingModel


def get_booking_by_id(db: Session, booking_id: int) -> BookingModel | None:
    return (
        db.query(BookingModel)
        .options(selectinload(BookingModel.property))
        .filter(BookingModel.id == booking_id)
        .first()
    )


def get_bookings_by_user_id_paginated(
    db: Session, user_id: int, page: int = 1, page_size: int = 50
) -> tuple[list[BookingModel], int]:
    """
    Get a user's bookings with pagination, newest first.

    Returns:
        Tuple of (list of bookings, total count)
    """
    query = db.query(BookingModel).filter(BookingModel.user_id == user_id)
    total = query.count()
    skip = (page - 1) * page_size
    bookings = (
        query.options(selectinload(BookingModel.property))
        .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return bookings, total


def create_booking(db: Session, **fields) -> BookingModel:
    """Insert a booking row. Pure data access - no business logic."""
    booking = BookingModel(**fields)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def save_booking(db: Session, booking: BookingModel) -> BookingModel:
    db.commit()
    db.refresh(booking)
    return booking


def delete_booking(db: Session, booking: BookingModel) -> None:
    db.delete(booking)
    db.commit()

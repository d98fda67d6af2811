"""Bookings: stay requests from users for listings."""

import logging

from sqlalchemy.orm import Session

import rentify.repositories.booking as booking_repo
from rentify.db.models.booking import Booking as BookingModel
from rentify.domain import booking as booking_rules
from rentify.domain.booking import BookingAccessPolicy
from rentify.domain.caller import CallerContext
from rentify.errors import DomainValidationError, ForbiddenError, NotFoundError
from rentify.schemas.booking import BookingCreate
from rentify.services.property import get_property

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "check_in", "check_out", "total_price")


def _listing_owner_id(booking: BookingModel) -> int | None:
    prop = booking.property
    return prop.owner_id if prop.owner_id is not None else prop.created_by_id


def _get_booking_or_404(db: Session, booking_id: int) -> BookingModel:
    booking = booking_repo.get_booking_by_id(db, booking_id)
    if not booking:
        raise NotFoundError(f"Booking with id {booking_id} not found")
    return booking


def create_booking(db: Session, booking_data: BookingCreate, caller: CallerContext) -> BookingModel:
    """
    Book a listing for the caller.

    Raises:
        NotFoundError: If the property doesn't exist
    """
    prop = get_property(db, booking_data.property_id)
    booking = booking_repo.create_booking(
        db,
        user_id=caller.id,
        property_id=prop.id,
        name=booking_data.name,
        description=booking_data.description,
        address=booking_data.address or prop.address,
        check_in=booking_data.check_in,
        check_out=booking_data.check_out,
        total_price=booking_data.total_price,
        status=booking_rules.PENDING,
    )
    logger.info("Booking %s created for property %s", booking.id, prop.id)
    return booking


def list_my_bookings(
    db: Session, caller: CallerContext, page: int = 1, page_size: int = 50
) -> tuple[list[BookingModel], int]:
    return booking_repo.get_bookings_by_user_id_paginated(
        db, caller.id, page=page, page_size=page_size
    )


def get_booking(db: Session, booking_id: int, caller: CallerContext) -> BookingModel:
    """Visible to the booker, the listing owner and admins."""
    booking = _get_booking_or_404(db, booking_id)
    policy = BookingAccessPolicy(caller)
    if not policy.can_view(booker_id=booking.user_id, listing_owner_id=_listing_owner_id(booking)):
        raise ForbiddenError("Not enough permissions")
    return booking


def update_booking(
    db: Session, booking_id: int, caller: CallerContext, **update_fields
) -> BookingModel:
    """
    Change a pending booking. Booker or admin only.

    Only fields explicitly provided in update_fields will be updated.
    """
    if not update_fields:
        raise DomainValidationError("No fields to update")
    cleared = [f for f in REQUIRED_FIELDS if f in update_fields and update_fields[f] is None]
    if cleared:
        raise DomainValidationError(f"Cannot clear required fields: {', '.join(cleared)}")

    booking = _get_booking_or_404(db, booking_id)
    if not BookingAccessPolicy(caller).can_modify(booker_id=booking.user_id):
        raise ForbiddenError("Only the booker or an admin can change this booking")
    if booking.status != booking_rules.PENDING:
        raise DomainValidationError(f"Booking is {booking.status} and can no longer be changed")

    check_in = update_fields.get("check_in", booking.check_in)
    check_out = update_fields.get("check_out", booking.check_out)
    if check_out <= check_in:
        raise DomainValidationError(
            f"Check-out ({check_out}) must be after check-in ({check_in})"
        )

    for field, value in update_fields.items():
        setattr(booking, field, value)
    return booking_repo.save_booking(db, booking)


def confirm_booking(db: Session, booking_id: int, caller: CallerContext) -> BookingModel:
    """The listing owner (or an admin) accepts a pending booking."""
    booking = _get_booking_or_404(db, booking_id)
    if not BookingAccessPolicy(caller).can_confirm(listing_owner_id=_listing_owner_id(booking)):
        raise ForbiddenError("Only the listing owner or an admin can confirm this booking")
    if booking.status != booking_rules.PENDING:
        raise DomainValidationError(f"Booking is {booking.status} and cannot be confirmed")

    booking.status = booking_rules.CONFIRMED
    return booking_repo.save_booking(db, booking)


def cancel_booking(db: Session, booking_id: int, caller: CallerContext) -> BookingModel:
    """Cancel a booking. Cancelling a cancelled booking leaves it as is."""
    booking = _get_booking_or_404(db, booking_id)
    policy = BookingAccessPolicy(caller)
    if not policy.can_cancel(booker_id=booking.user_id, listing_owner_id=_listing_owner_id(booking)):
        raise ForbiddenError("Not enough permissions")

    booking.status = booking_rules.CANCELLED
    return booking_repo.save_booking(db, booking)


def delete_booking(db: Session, booking_id: int, caller: CallerContext) -> None:
    booking = _get_booking_or_404(db, booking_id)
    if not BookingAccessPolicy(caller).can_modify(booker_id=booking.user_id):
        raise ForbiddenError("Only the booker or an admin can delete this booking")
    booking_repo.delete_booking(db, booking)
    logger.info("Booking %s deleted by user %s", booking_id, caller.id)

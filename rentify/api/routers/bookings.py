from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from rentify.api.deps import get_caller, get_db
from rentify.domain.caller import CallerContext
from rentify.schemas.booking import Booking, BookingCreate, BookingEnvelope, BookingUpdate
from rentify.schemas.pagination import PageParams, PaginatedResponse
from rentify.services import booking as booking_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _envelope(booking, message: str) -> BookingEnvelope:
    return BookingEnvelope(message=message, booking=Booking.model_validate(booking))


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def create_new_booking(
    booking_data: BookingCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    booking = booking_service.create_booking(db, booking_data, caller)
    return _envelope(booking, "Booking created successfully")


@router.get("", response_model=PaginatedResponse[Booking])
def get_my_bookings(
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """The caller's own bookings, newest first."""
    bookings, total = booking_service.list_my_bookings(
        db, caller, page=paging.page, page_size=paging.page_size
    )
    return PaginatedResponse(
        items=[Booking.model_validate(b) for b in bookings],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get("/{booking_id}", response_model=Booking)
def get_booking_by_id(
    booking_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return Booking.model_validate(booking_service.get_booking(db, booking_id, caller))


@router.put("/{booking_id}", response_model=BookingEnvelope)
def update_existing_booking(
    booking_id: int,
    booking_data: BookingUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Change a pending booking. Booker or admin only."""
    booking = booking_service.update_booking(
        db, booking_id, caller, **booking_data.model_dump(exclude_unset=True)
    )
    return _envelope(booking, "Booking updated successfully")


@router.post("/{booking_id}/confirm", response_model=BookingEnvelope)
def confirm_existing_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    booking = booking_service.confirm_booking(db, booking_id, caller)
    return _envelope(booking, "Booking confirmed")


@router.patch("/{booking_id}/cancel", response_model=BookingEnvelope)
def cancel_existing_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    booking = booking_service.cancel_booking(db, booking_id, caller)
    return _envelope(booking, "Booking cancelled successfully")


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    booking_service.delete_booking(db, booking_id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

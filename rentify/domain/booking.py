"""Booking rules: statuses and who may act on a booking.

A booking is a stay request from a user for a listing::

    pending ──(listing owner confirms)──> confirmed
       │                                     │
       └───────────> cancelled <─────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass

from rentify.domain.caller import CallerContext

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

STATUSES = (PENDING, CONFIRMED, CANCELLED)


@dataclass(frozen=True, slots=True)
class BookingAccessPolicy:
    """
    - The booker owns the request: they edit, cancel or delete it.
    - The listing owner sees bookings for their listing, confirms or declines them.
    - Admins may do everything.
    """

    caller: CallerContext

    def is_booker(self, *, booker_id: int) -> bool:
        return self.caller.id == booker_id

    def is_listing_owner(self, *, listing_owner_id: int | None) -> bool:
        return listing_owner_id is not None and self.caller.id == listing_owner_id

    def can_view(self, *, booker_id: int, listing_owner_id: int | None) -> bool:
        return (
            self.caller.is_admin
            or self.is_booker(booker_id=booker_id)
            or self.is_listing_owner(listing_owner_id=listing_owner_id)
        )

    def can_modify(self, *, booker_id: int) -> bool:
        return self.caller.is_admin or self.is_booker(booker_id=booker_id)

    def can_cancel(self, *, booker_id: int, listing_owner_id: int | None) -> bool:
        return self.can_view(booker_id=booker_id, listing_owner_id=listing_owner_id)

    def can_confirm(self, *, listing_owner_id: int | None) -> bool:
        return self.caller.is_admin or self.is_listing_owner(listing_owner_id=listing_owner_id)

"""Contract lifecycle rules: statuses, history tags and who may do what.

Status flow::

    draft ──┐
            ├─> pending ──(owner + renter accepted)──> active
            │                                            │
            └──────────────> cancelled <─────────────────┘

``completed`` exists in the data model but no operation produces it yet; it
is treated as terminal alongside ``cancelled``.
"""

from __future__ import annotations

from dataclasses import dataclass

from rentify.domain.caller import CallerContext

DRAFT = "draft"
PENDING = "pending"
ACTIVE = "active"
CANCELLED = "cancelled"
COMPLETED = "completed"

STATUSES = (DRAFT, PENDING, ACTIVE, CANCELLED, COMPLETED)
INITIAL_STATUS = PENDING
EDITABLE_STATUSES = frozenset({DRAFT, PENDING})
TERMINAL_STATUSES = frozenset({CANCELLED, COMPLETED})

INSTALLMENT_STATUSES = ("due", "paid", "overdue")

# History action tags
CREATED = "created"
UPDATED = "updated"
OWNER_ACCEPTED = "owner_accepted"
RENTER_ACCEPTED = "renter_accepted"
ACCEPTED_BY_ADMIN = "accepted_by_admin"
ACTIVATED = "activated"
PDF_GENERATED = "pdf_generated"
PDF_GENERATION_FAILED = "pdf_generation_failed"
DOCUMENTS_UPLOADED = "documents_uploaded"
CANCELLED_ACTION = "cancelled"
EDIT_PROPOSED = "edit_proposed"

PARTY_OWNER = "owner"
PARTY_RENTER = "renter"


def should_activate(
    *, status: str, has_renter: bool, owner_accepted: bool, renter_accepted: bool
) -> bool:
    """A contract activates exactly once, when it has a renter and both parties have accepted."""
    return has_renter and owner_accepted and renter_accepted and status != ACTIVE


def accepts_acceptance(status: str) -> bool:
    return status not in TERMINAL_STATUSES


@dataclass(frozen=True, slots=True)
class ContractAccessPolicy:
    """Who may read or act on a contract.

    Semantics (intentionally centralized):
    - The owner and the renter are the contract's parties.
    - Admins may do anything a party may do, except accept on a party's behalf.
    - Terms can only be changed by the owner or an admin.
    """

    caller: CallerContext

    def party(self, *, owner_id: int, renter_id: int | None) -> str | None:
        if self.caller.id == owner_id:
            return PARTY_OWNER
        if renter_id is not None and self.caller.id == renter_id:
            return PARTY_RENTER
        return None

    def is_party_or_admin(self, *, owner_id: int, renter_id: int | None) -> bool:
        return self.caller.is_admin or self.party(owner_id=owner_id, renter_id=renter_id) is not None

    def can_view(self, *, owner_id: int, renter_id: int | None) -> bool:
        return self.is_party_or_admin(owner_id=owner_id, renter_id=renter_id)

    def can_update_terms(self, *, owner_id: int) -> bool:
        return self.caller.is_admin or self.caller.id == owner_id

    def can_cancel(self, *, owner_id: int, renter_id: int | None) -> bool:
        return self.is_party_or_admin(owner_id=owner_id, renter_id=renter_id)

    def can_list_for_user(self, user_id: int) -> bool:
        return self.caller.is_admin or self.caller.id == user_id

    def can_list_for_property(self, *, property_owner_id: int | None) -> bool:
        return self.caller.is_admin or (
            property_owner_id is not None and self.caller.id == property_owner_id
        )

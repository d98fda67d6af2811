from __future__ import annotations


def resolve_listing_owner_id(
    *, owner_id: int | None, created_by_id: int | None, fallback_id: int
) -> int:
    """Pick the user who owns a listing.

    The explicit owner wins; listings created before owners were tracked only
    carry ``created_by_id``; as a last resort the caller creating the contract
    is taken as the owner.
    """
    if owner_id is not None:
        return owner_id
    if created_by_id is not None:
        return created_by_id
    return fallback_id

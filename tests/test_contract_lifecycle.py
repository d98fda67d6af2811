import pytest

from rentify.domain import contract_lifecycle as lifecycle
from rentify.domain.caller import CallerContext
from rentify.domain.contract_lifecycle import ContractAccessPolicy
from rentify.domain.listing import resolve_listing_owner_id

OWNER_ID = 1
RENTER_ID = 2
STRANGER_ID = 3
ADMIN_ID = 4


def _policy(user_id: int, role: str) -> ContractAccessPolicy:
    return ContractAccessPolicy(CallerContext(id=user_id, role=role))


@pytest.mark.parametrize(
    "status, has_renter, owner_accepted, renter_accepted, expected",
    [
        ("pending", True, True, True, True),
        ("draft", True, True, True, True),
        ("pending", True, True, False, False),
        ("pending", True, False, True, False),
        ("active", True, True, True, False),
        ("pending", False, True, True, False),
    ],
)
def test_should_activate(status, has_renter, owner_accepted, renter_accepted, expected):
    assert (
        lifecycle.should_activate(
            status=status,
            has_renter=has_renter,
            owner_accepted=owner_accepted,
            renter_accepted=renter_accepted,
        )
        is expected
    )


def test_terminal_statuses_refuse_acceptance():
    assert lifecycle.accepts_acceptance("pending")
    assert lifecycle.accepts_acceptance("active")
    assert not lifecycle.accepts_acceptance("cancelled")
    assert not lifecycle.accepts_acceptance("completed")


def test_party_resolution():
    assert _policy(OWNER_ID, "owner").party(owner_id=OWNER_ID, renter_id=RENTER_ID) == "owner"
    assert _policy(RENTER_ID, "renter").party(owner_id=OWNER_ID, renter_id=RENTER_ID) == "renter"
    assert _policy(STRANGER_ID, "renter").party(owner_id=OWNER_ID, renter_id=RENTER_ID) is None
    assert _policy(ADMIN_ID, "admin").party(owner_id=OWNER_ID, renter_id=RENTER_ID) is None
    assert _policy(RENTER_ID, "renter").party(owner_id=OWNER_ID, renter_id=None) is None


def test_view_and_cancel_rights():
    for user_id, role, allowed in [
        (OWNER_ID, "owner", True),
        (RENTER_ID, "renter", True),
        (ADMIN_ID, "admin", True),
        (STRANGER_ID, "owner", False),
    ]:
        policy = _policy(user_id, role)
        assert policy.can_view(owner_id=OWNER_ID, renter_id=RENTER_ID) is allowed
        assert policy.can_cancel(owner_id=OWNER_ID, renter_id=RENTER_ID) is allowed


def test_only_owner_or_admin_updates_terms():
    assert _policy(OWNER_ID, "owner").can_update_terms(owner_id=OWNER_ID)
    assert _policy(ADMIN_ID, "admin").can_update_terms(owner_id=OWNER_ID)
    assert not _policy(RENTER_ID, "renter").can_update_terms(owner_id=OWNER_ID)


def test_listing_rights():
    assert _policy(RENTER_ID, "renter").can_list_for_user(RENTER_ID)
    assert not _policy(RENTER_ID, "renter").can_list_for_user(OWNER_ID)
    assert _policy(ADMIN_ID, "admin").can_list_for_user(OWNER_ID)

    assert _policy(OWNER_ID, "owner").can_list_for_property(property_owner_id=OWNER_ID)
    assert not _policy(RENTER_ID, "renter").can_list_for_property(property_owner_id=OWNER_ID)
    assert not _policy(OWNER_ID, "owner").can_list_for_property(property_owner_id=None)
    assert _policy(ADMIN_ID, "admin").can_list_for_property(property_owner_id=None)


def test_resolve_listing_owner_id():
    assert resolve_listing_owner_id(owner_id=5, created_by_id=6, fallback_id=7) == 5
    assert resolve_listing_owner_id(owner_id=None, created_by_id=6, fallback_id=7) == 6
    assert resolve_listing_owner_id(owner_id=None, created_by_id=None, fallback_id=7) == 7

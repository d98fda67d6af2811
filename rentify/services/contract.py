import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

import rentify.repositories.contract as contract_repo
import rentify.repositories.user as user_repo
from rentify.core.config import settings
from rentify.db.models.contract import Contract as ContractModel
from rentify.domain import contract_lifecycle as lifecycle
from rentify.domain.caller import CallerContext, RequestOrigin
from rentify.domain.contract_lifecycle import ContractAccessPolicy
from rentify.domain.listing import resolve_listing_owner_id
from rentify.errors import (
    ConcurrentUpdateError,
    DomainValidationError,
    ForbiddenError,
    NotFoundError,
    StorageError,
)
from rentify.schemas.contract import ContractCreate
from rentify.services.contract_pdf import build_contract_view, render_contract_pdf
from rentify.services.property import get_property
from rentify.services.storage import BlobStorage, StoredObject

logger = logging.getLogger(__name__)

T = TypeVar("T")

AMOUNT_FIELDS = ("rent_amount", "security_deposit", "total_amount")


@dataclass(frozen=True, slots=True)
class DocumentUpload:
    filename: str
    content: bytes
    content_type: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_contract_or_404(db: Session, contract_id: int) -> ContractModel:
    contract = contract_repo.get_contract_by_id(db, contract_id)
    if not contract:
        raise NotFoundError("Contract not found")
    return contract


def _validate_amounts(values: dict) -> None:
    for field in AMOUNT_FIELDS:
        value = values.get(field)
        if value is not None and value < 0:
            raise DomainValidationError(f"{field} cannot be negative")


def _validate_term(start_date, end_date) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise DomainValidationError(
            f"End date ({end_date}) cannot precede start date ({start_date})"
        )


def _validate_renter(db: Session, renter_id: int, owner_id: int) -> None:
    if not user_repo.get_user_by_id(db, renter_id):
        raise NotFoundError(f"User with id {renter_id} not found")
    if renter_id == owner_id:
        raise DomainValidationError("The property owner cannot be the renter")


def _reset_renter_acceptance(contract: ContractModel) -> None:
    """A new (or no) renter has not accepted anything yet."""
    contract.renter_accepted = False
    contract.renter_accepted_at = None
    contract.renter_signature_name = None
    contract.renter_signature_ip = None
    contract.renter_signature_user_agent = None


def apply_contract_change(
    db: Session, contract_id: int, change: Callable[[ContractModel], T]
) -> tuple[ContractModel, T]:
    """
    Load a contract, apply ``change`` and commit, guarded by the version column.

    If another writer committed in between, the flush raises StaleDataError;
    the session is rolled back and the change is re-applied to a fresh copy.
    ``change`` must validate before it mutates, since it may run several times.

    Raises:
        ConcurrentUpdateError: If the contract is still contended after the
            configured number of retries
    """
    attempts = settings.contract_update_max_retries + 1
    for attempt in range(1, attempts + 1):
        contract = _get_contract_or_404(db, contract_id)
        result = change(contract)
        try:
            return contract_repo.save_contract(db, contract), result
        except StaleDataError:
            db.rollback()
            logger.warning(
                "Contract %s changed concurrently (attempt %d/%d), retrying",
                contract_id,
                attempt,
                attempts,
            )
    raise ConcurrentUpdateError(
        f"Contract {contract_id} is being modified concurrently, please retry"
    )


def create_contract(
    db: Session, contract_data: ContractCreate, caller: CallerContext
) -> ContractModel:
    """
    Create a new contract with business logic validation.

    - Requires an existing property; the owner is the property's listing owner
    - Validates the renter exists and is not the owner
    - Validates the term and amounts
    - Starts in ``pending`` with a single ``created`` history entry
    """
    if contract_data.property_id is None:
        raise DomainValidationError("property_id is required")

    prop = get_property(db, contract_data.property_id)
    owner_id = resolve_listing_owner_id(
        owner_id=prop.owner_id, created_by_id=prop.created_by_id, fallback_id=caller.id
    )

    if contract_data.renter_id is not None:
        _validate_renter(db, contract_data.renter_id, owner_id)
    _validate_term(contract_data.start_date, contract_data.end_date)
    _validate_amounts(contract_data.model_dump())

    contract = contract_repo.create_contract(
        db,
        property_id=prop.id,
        owner_id=owner_id,
        renter_id=contract_data.renter_id,
        status=lifecycle.INITIAL_STATUS,
        currency=(contract_data.currency or settings.default_currency).upper(),
        created_by_id=caller.id,
        start_date=contract_data.start_date,
        end_date=contract_data.end_date,
        rent_amount=contract_data.rent_amount,
        security_deposit=contract_data.security_deposit,
        total_amount=contract_data.total_amount,
        notes=contract_data.notes,
    )
    logger.info(
        "Contract %s created for property %s by user %s", contract.id, prop.id, caller.id
    )
    return contract


def get_contract(db: Session, contract_id: int, caller: CallerContext) -> ContractModel:
    """
    Get a contract by ID. Parties and admins only.

    Raises:
        NotFoundError: If the contract doesn't exist
        ForbiddenError: If the caller is neither a party nor an admin
    """
    contract = _get_contract_or_404(db, contract_id)
    policy = ContractAccessPolicy(caller)
    if not policy.can_view(owner_id=contract.owner_id, renter_id=contract.renter_id):
        raise ForbiddenError("Not enough permissions")
    return contract


def list_contracts_for_user(
    db: Session, user_id: int, caller: CallerContext, page: int = 1, page_size: int = 50
) -> tuple[list[ContractModel], int]:
    """Contracts where the user is owner or renter. Users see their own; admins anyone's."""
    if not ContractAccessPolicy(caller).can_list_for_user(user_id):
        raise ForbiddenError("Not enough permissions")
    if not user_repo.get_user_by_id(db, user_id):
        raise NotFoundError(f"User with id {user_id} not found")
    return contract_repo.get_contracts_by_user_id_paginated(
        db, user_id, page=page, page_size=page_size
    )


def list_contracts_for_property(
    db: Session, property_id: int, caller: CallerContext, page: int = 1, page_size: int = 50
) -> tuple[list[ContractModel], int]:
    """Contracts for a property. Visible to the listing owner and admins."""
    prop = get_property(db, property_id)
    listing_owner_id = prop.owner_id if prop.owner_id is not None else prop.created_by_id
    if not ContractAccessPolicy(caller).can_list_for_property(property_owner_id=listing_owner_id):
        raise ForbiddenError("Not enough permissions")
    return contract_repo.get_contracts_by_property_id_paginated(
        db, property_id, page=page, page_size=page_size
    )


def update_contract(
    db: Session,
    contract_id: int,
    caller: CallerContext,
    **update_fields,
) -> ContractModel:
    """
    Update contract terms with business logic validation.

    - Only the owner or an admin may change terms
    - Only while the contract is draft or pending
    - Validates renter, term and amounts against the resulting contract
    - payment_schedule, when given, replaces the whole schedule

    Only fields explicitly provided in update_fields will be updated.
    To clear a field (set to None), explicitly include it with None value.
    """
    if not update_fields:
        raise DomainValidationError("No fields to update")
    _validate_amounts(update_fields)

    def change(contract: ContractModel) -> None:
        if not ContractAccessPolicy(caller).can_update_terms(owner_id=contract.owner_id):
            raise ForbiddenError("Only the owner or an admin can update contract terms")
        if contract.status not in lifecycle.EDITABLE_STATUSES:
            raise DomainValidationError(
                f"Contract terms cannot be changed once the contract is {contract.status}"
            )

        if update_fields.get("renter_id") is not None:
            _validate_renter(db, update_fields["renter_id"], contract.owner_id)
        _validate_term(
            update_fields.get("start_date", contract.start_date),
            update_fields.get("end_date", contract.end_date),
        )

        changed = []
        notes = []
        for field, value in update_fields.items():
            if field == "renter_id":
                if value != contract.renter_id:
                    _reset_renter_acceptance(contract)
                    notes.append("renter changed, renter acceptance reset")
                contract.renter_id = value
            elif field == "payment_schedule":
                contract_repo.replace_payment_schedule(contract, value or [])
            elif field == "currency":
                contract.currency = (value or settings.default_currency).upper()
            else:
                setattr(contract, field, value)
            changed.append(field)

        contract_repo.append_history(
            contract,
            lifecycle.UPDATED,
            caller.id,
            "; ".join([f"Updated: {', '.join(sorted(changed))}", *notes]),
        )

    contract, _ = apply_contract_change(db, contract_id, change)
    return contract


def accept_contract(
    db: Session,
    contract_id: int,
    caller: CallerContext,
    origin: RequestOrigin,
    signature_name: str | None = None,
    notes: str | None = None,
) -> tuple[ContractModel, bool]:
    """
    Record the caller's acceptance of a contract.

    - Owner: sets owner acceptance with signature metadata
    - Renter: sets renter acceptance with signature metadata
    - Admin (not a party): logs ``accepted_by_admin`` without touching either flag
    - Once both parties have accepted, the contract becomes active

    Accepting twice re-records the same acceptance and appends another history
    entry. Cancelled and completed contracts can no longer be accepted.

    Returns:
        Tuple of (contract, whether this call activated it)
    """

    def change(contract: ContractModel) -> bool:
        if not lifecycle.accepts_acceptance(contract.status):
            raise DomainValidationError(
                f"Contract is {contract.status} and can no longer be accepted"
            )

        policy = ContractAccessPolicy(caller)
        party = policy.party(owner_id=contract.owner_id, renter_id=contract.renter_id)
        if party is None and not caller.is_admin:
            raise ForbiddenError("Only the contract parties can accept this contract")

        now = _utcnow()
        if party is not None:
            setattr(contract, f"{party}_accepted", True)
            setattr(contract, f"{party}_accepted_at", now)
            setattr(contract, f"{party}_signature_name", signature_name or "")
            setattr(contract, f"{party}_signature_ip", origin.ip)
            setattr(contract, f"{party}_signature_user_agent", origin.user_agent)
            action = (
                lifecycle.OWNER_ACCEPTED if party == lifecycle.PARTY_OWNER else lifecycle.RENTER_ACCEPTED
            )
            contract_repo.append_history(contract, action, caller.id)
        else:
            contract_repo.append_history(
                contract, lifecycle.ACCEPTED_BY_ADMIN, caller.id, notes or ""
            )

        if lifecycle.should_activate(
            status=contract.status,
            has_renter=contract.renter_id is not None,
            owner_accepted=contract.owner_accepted,
            renter_accepted=contract.renter_accepted,
        ):
            contract.status = lifecycle.ACTIVE
            contract_repo.append_history(
                contract, lifecycle.ACTIVATED, caller.id, "Both parties accepted"
            )
            return True
        return False

    contract, activated = apply_contract_change(db, contract_id, change)
    if activated:
        logger.info("Contract %s activated", contract_id)
    return contract, activated


def cancel_contract(
    db: Session, contract_id: int, caller: CallerContext, reason: str | None = None
) -> ContractModel:
    """
    Cancel a contract. Owner, renter or admin only.

    Any status except completed can be cancelled; cancelling again keeps the
    status and appends another history entry.
    """

    def change(contract: ContractModel) -> None:
        policy = ContractAccessPolicy(caller)
        if not policy.can_cancel(owner_id=contract.owner_id, renter_id=contract.renter_id):
            raise ForbiddenError("Only the contract parties or an admin can cancel this contract")
        if contract.status == lifecycle.COMPLETED:
            raise DomainValidationError("A completed contract cannot be cancelled")

        contract.status = lifecycle.CANCELLED
        contract_repo.append_history(contract, lifecycle.CANCELLED_ACTION, caller.id, reason or "")

    contract, _ = apply_contract_change(db, contract_id, change)
    logger.info("Contract %s cancelled by user %s", contract_id, caller.id)
    return contract


def propose_edit(
    db: Session, contract_id: int, caller: CallerContext, notes: str
) -> ContractModel:
    """Log a free-text change request in the contract history. No approval workflow."""
    if not notes or not notes.strip():
        raise DomainValidationError("notes are required to propose an edit")

    def change(contract: ContractModel) -> None:
        policy = ContractAccessPolicy(caller)
        if not policy.is_party_or_admin(owner_id=contract.owner_id, renter_id=contract.renter_id):
            raise ForbiddenError("Not enough permissions")
        contract_repo.append_history(contract, lifecycle.EDIT_PROPOSED, caller.id, notes.strip())

    contract, _ = apply_contract_change(db, contract_id, change)
    return contract


def _discard_blobs(storage: BlobStorage, stored: list[StoredObject]) -> None:
    for obj in stored:
        try:
            storage.delete(obj.storage_key)
        except StorageError:
            logger.exception("Could not remove orphaned blob %s", obj.storage_key)


def upload_documents(
    db: Session,
    contract_id: int,
    caller: CallerContext,
    files: list[DocumentUpload],
    storage: BlobStorage,
) -> tuple[ContractModel, list]:
    """
    Store files in blob storage and attach them to the contract.

    One document entry is appended per file and a single
    ``documents_uploaded`` history entry per call. If anything fails, blobs
    stored by this call are removed again and the contract is left unchanged.

    Returns:
        Tuple of (contract, list of the added document rows)
    """
    contract = get_contract(db, contract_id, caller)
    if not files:
        raise DomainValidationError("At least one document is required")
    if len(files) > settings.max_contract_documents:
        raise DomainValidationError(
            f"At most {settings.max_contract_documents} documents can be uploaded at once"
        )
    for f in files:
        if len(f.content) > settings.max_document_size_bytes:
            raise DomainValidationError(
                f"{f.filename} exceeds the {settings.max_document_size_mb} MB limit"
            )

    folder = f"{settings.storage_contracts_folder}/{contract.id}/documents"
    stored: list[StoredObject] = []
    try:
        for f in files:
            stored.append(storage.upload(f.content, folder, f.filename, f.content_type))
    except StorageError:
        _discard_blobs(storage, stored)
        raise

    def change(contract: ContractModel) -> list:
        added = [
            contract_repo.append_document(contract, f.filename, obj.url, obj.storage_key)
            for f, obj in zip(files, stored)
        ]
        contract_repo.append_history(
            contract, lifecycle.DOCUMENTS_UPLOADED, caller.id, f"{len(added)} document(s) uploaded"
        )
        return added

    try:
        contract, added = apply_contract_change(db, contract_id, change)
    except ConcurrentUpdateError:
        _discard_blobs(storage, stored)
        raise
    return contract, added


def export_contract_pdf(db: Session, contract_id: int, caller: CallerContext) -> bytes:
    """Render the contract PDF for download. Nothing is stored."""
    contract = get_contract(db, contract_id, caller)
    return render_contract_pdf(build_contract_view(contract, settings.pdf_app_name))


def request_pdf_regeneration(
    db: Session, contract_id: int, caller: CallerContext
) -> ContractModel:
    """Check that the contract PDF may be regenerated; the caller schedules the work."""
    contract = get_contract(db, contract_id, caller)
    if contract.status != lifecycle.ACTIVE:
        raise DomainValidationError("Only active contracts have a generated contract document")
    return contract

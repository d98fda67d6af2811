from datetime import date, datetime, timezone
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from rentify.db.models.contract import (
    Contract as ContractModel,
    ContractDocument as ContractDocumentModel,
    ContractHistoryEntry as ContractHistoryEntryModel,
    ContractInstallment as ContractInstallmentModel,
)

_DISPLAY_OPTIONS = (
    selectinload(ContractModel.property),
    selectinload(ContractModel.owner),
    selectinload(ContractModel.renter),
    selectinload(ContractModel.documents),
    selectinload(ContractModel.history),
    selectinload(ContractModel.payment_schedule),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_contract_by_id(db: Session, contract_id: int) -> ContractModel | None:
    """Get a contract by ID."""
    return db.query(ContractModel).filter(ContractModel.id == contract_id).first()


def _paginate(query, page: int, page_size: int) -> tuple[list[ContractModel], int]:
    total = query.count()
    skip = (page - 1) * page_size
    contracts = (
        query.options(*_DISPLAY_OPTIONS)
        .order_by(ContractModel.created_at.desc(), ContractModel.id.desc())
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return contracts, total


def get_contracts_by_user_id_paginated(
    db: Session, user_id: int, page: int = 1, page_size: int = 50
) -> tuple[list[ContractModel], int]:
    """
    Get contracts where the user is the owner or the renter, newest first.

    Returns:
        Tuple of (list of contracts, total count)
    """
    query = db.query(ContractModel).filter(
        or_(ContractModel.owner_id == user_id, ContractModel.renter_id == user_id)
    )
    return _paginate(query, page, page_size)


def get_contracts_by_property_id_paginated(
    db: Session, property_id: int, page: int = 1, page_size: int = 50
) -> tuple[list[ContractModel], int]:
    """Get contracts for a property, newest first."""
    query = db.query(ContractModel).filter(ContractModel.property_id == property_id)
    return _paginate(query, page, page_size)


def create_contract(
    db: Session,
    property_id: int,
    owner_id: int,
    status: str,
    currency: str,
    created_by_id: int | None,
    renter_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    rent_amount: float | None = None,
    security_deposit: float | None = None,
    total_amount: float | None = None,
    notes: str | None = None,
) -> ContractModel:
    """Insert a contract together with its ``created`` history entry."""
    now = _utcnow()
    db_contract = ContractModel(
        property_id=property_id,
        owner_id=owner_id,
        renter_id=renter_id,
        start_date=start_date,
        end_date=end_date,
        rent_amount=rent_amount,
        currency=currency,
        security_deposit=security_deposit,
        total_amount=total_amount,
        notes=notes,
        status=status,
        owner_accepted=False,
        renter_accepted=False,
        created_at=now,
        updated_at=now,
    )
    db_contract.history.append(
        ContractHistoryEntryModel(action="created", by_id=created_by_id, at=now, notes="Created")
    )
    db.add(db_contract)
    db.commit()
    db.refresh(db_contract)
    return db_contract


def append_history(
    contract: ContractModel, action: str, by_id: int | None, notes: str = ""
) -> ContractHistoryEntryModel:
    """
    Append a history entry and touch the contract row.

    Touching updated_at makes the flush UPDATE the contract row, so every
    audited mutation goes through the version check.
    """
    now = _utcnow()
    entry = ContractHistoryEntryModel(action=action, by_id=by_id, at=now, notes=notes)
    contract.history.append(entry)
    contract.updated_at = now
    return entry


def append_document(
    contract: ContractModel, filename: str, url: str, storage_key: str
) -> ContractDocumentModel:
    document = ContractDocumentModel(
        filename=filename,
        url=url,
        storage_key=storage_key,
        uploaded_at=_utcnow(),
    )
    contract.documents.append(document)
    return document


def replace_payment_schedule(
    contract: ContractModel, installments: list[dict]
) -> None:
    """Replace the schedule, keeping installments in due-date order."""
    contract.payment_schedule.clear()
    for item in sorted(installments, key=lambda i: i["due_date"]):
        contract.payment_schedule.append(
            ContractInstallmentModel(
                due_date=item["due_date"],
                amount=item["amount"],
                status=item.get("status") or "due",
                payment_ref=item.get("payment_ref"),
            )
        )


def save_contract(db: Session, contract: ContractModel) -> ContractModel:
    """Commit pending changes on a contract. Raises StaleDataError on a version mismatch."""
    db.commit()
    db.refresh(contract)
    return contract

from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, File, Response, UploadFile, status
from sqlalchemy.orm import Session

from rentify.api.deps import (
    get_blob_storage,
    get_blob_storage_factory,
    get_caller,
    get_db,
    get_request_origin,
    get_session_factory,
)
from rentify.domain.caller import CallerContext, RequestOrigin
from rentify.schemas.contract import (
    AcceptRequest,
    CancelRequest,
    Contract,
    ContractCreate,
    ContractDocument,
    ContractEnvelope,
    ContractListEnvelope,
    ContractUpdate,
    DocumentUploadEnvelope,
    ProposeEditRequest,
)
from rentify.schemas.pagination import PageParams
from rentify.services import contract as contract_service
from rentify.services.contract_document import contract_pdf_filename, generate_contract_pdf
from rentify.services.storage import BlobStorage

router = APIRouter(prefix="/contracts", tags=["contracts"])


def _envelope(contract) -> ContractEnvelope:
    return ContractEnvelope(contract=Contract.model_validate(contract))


def _list_envelope(contracts, total: int, paging: PageParams) -> ContractListEnvelope:
    return ContractListEnvelope(
        contracts=[Contract.model_validate(c) for c in contracts],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.post("", response_model=ContractEnvelope, status_code=status.HTTP_201_CREATED)
def create_new_contract(
    contract_data: ContractCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """
    Create a contract for a property. The owner is taken from the listing.
    """
    contract = contract_service.create_contract(db, contract_data, caller)
    return _envelope(contract)


@router.get("/me", response_model=ContractListEnvelope)
def get_my_contracts(
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Contracts where the caller is the owner or the renter, newest first."""
    contracts, total = contract_service.list_contracts_for_user(
        db, caller.id, caller, page=paging.page, page_size=paging.page_size
    )
    return _list_envelope(contracts, total, paging)


@router.get("/user/{user_id}", response_model=ContractListEnvelope)
def get_contracts_by_user(
    user_id: int,
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """
    Contracts where the user is the owner or the renter, newest first.
    - Admin: any user
    - Owner / Renter: only themselves
    """
    contracts, total = contract_service.list_contracts_for_user(
        db, user_id, caller, page=paging.page, page_size=paging.page_size
    )
    return _list_envelope(contracts, total, paging)


@router.get("/property/{property_id}", response_model=ContractListEnvelope)
def get_contracts_by_property(
    property_id: int,
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Contracts for a property, newest first. Listing owner and admins only."""
    contracts, total = contract_service.list_contracts_for_property(
        db, property_id, caller, page=paging.page, page_size=paging.page_size
    )
    return _list_envelope(contracts, total, paging)


@router.get("/{contract_id}", response_model=ContractEnvelope)
def get_contract_by_id(
    contract_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Get a contract by ID. Parties and admins only."""
    return _envelope(contract_service.get_contract(db, contract_id, caller))


@router.put("/{contract_id}", response_model=ContractEnvelope)
def update_contract_by_id(
    contract_id: int,
    contract_data: ContractUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """
    Update contract terms. Owner or admin only, before the contract is active.

    Fields not included in the request are not updated.
    To clear a field (set to null), explicitly include it with null value.
    """
    update_data = contract_data.model_dump(exclude_unset=True)
    contract = contract_service.update_contract(db, contract_id, caller, **update_data)
    return _envelope(contract)


@router.post("/{contract_id}/docs", response_model=DocumentUploadEnvelope)
def upload_contract_documents(
    contract_id: int,
    docs: list[UploadFile] = File(..., description="Documents to attach"),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
    storage: BlobStorage = Depends(get_blob_storage),
):
    """Attach documents to a contract. Parties and admins only."""
    uploads = [
        contract_service.DocumentUpload(
            filename=f.filename or "document",
            content=f.file.read(),
            content_type=f.content_type,
        )
        for f in docs
    ]
    contract, added = contract_service.upload_documents(db, contract_id, caller, uploads, storage)
    return DocumentUploadEnvelope(
        added=[ContractDocument.model_validate(d) for d in added],
        contract=Contract.model_validate(contract),
    )


@router.post("/{contract_id}/accept", response_model=ContractEnvelope)
def accept_contract_by_id(
    contract_id: int,
    background_tasks: BackgroundTasks,
    accept_data: AcceptRequest | None = None,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
    origin: RequestOrigin = Depends(get_request_origin),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    storage_factory: Callable[[], BlobStorage] = Depends(get_blob_storage_factory),
):
    """
    Accept a contract as its owner or renter (admins log an acceptance note).

    When this acceptance activates the contract, the contract PDF is
    generated and attached after the response is sent.
    """
    accept_data = accept_data or AcceptRequest()
    contract, activated = contract_service.accept_contract(
        db,
        contract_id,
        caller,
        origin,
        signature_name=accept_data.signature.name if accept_data.signature else None,
        notes=accept_data.notes,
    )
    if activated:
        background_tasks.add_task(
            generate_contract_pdf, session_factory, storage_factory, contract.id
        )
    return _envelope(contract)


@router.post("/{contract_id}/cancel", response_model=ContractEnvelope)
def cancel_contract_by_id(
    contract_id: int,
    cancel_data: CancelRequest | None = None,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Cancel a contract. Owner, renter or admin."""
    reason = cancel_data.reason if cancel_data else None
    return _envelope(contract_service.cancel_contract(db, contract_id, caller, reason))


@router.post("/{contract_id}/propose-edit", response_model=ContractEnvelope)
def propose_contract_edit(
    contract_id: int,
    edit_data: ProposeEditRequest,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Record a free-text change request in the contract history."""
    return _envelope(contract_service.propose_edit(db, contract_id, caller, edit_data.notes))


@router.get(
    "/{contract_id}/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
def export_contract_pdf(
    contract_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    """Download the contract as a PDF. Nothing is stored."""
    pdf = contract_service.export_contract_pdf(db, contract_id, caller)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={contract_pdf_filename(contract_id)}"
        },
    )


@router.post(
    "/{contract_id}/pdf/regenerate",
    response_model=ContractEnvelope,
    status_code=status.HTTP_202_ACCEPTED,
)
def regenerate_contract_pdf(
    contract_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    storage_factory: Callable[[], BlobStorage] = Depends(get_blob_storage_factory),
):
    """Re-run PDF generation for an active contract, e.g. after a storage outage."""
    contract = contract_service.request_pdf_regeneration(db, contract_id, caller)
    background_tasks.add_task(generate_contract_pdf, session_factory, storage_factory, contract.id)
    return _envelope(contract)

"""Generate and attach the signed contract PDF once a contract is active.

Runs detached from the request that activated the contract, with its own
database session. Failures never undo the activation; they are logged and
recorded as a ``pdf_generation_failed`` history entry so they can be seen
and retried.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

import rentify.repositories.contract as contract_repo
from rentify.core.config import settings
from rentify.db.models.contract import Contract as ContractModel
from rentify.domain import contract_lifecycle as lifecycle
from rentify.services.contract import apply_contract_change
from rentify.services.contract_pdf import build_contract_view, render_contract_pdf
from rentify.services.storage import BlobStorage

logger = logging.getLogger(__name__)


def contract_pdf_filename(contract_id: int) -> str:
    return f"contract-{contract_id}.pdf"


def contract_pdf_key(contract_id: int) -> str:
    """Deterministic key, so regenerating overwrites the previous document."""
    return f"{settings.storage_contracts_folder}/{contract_id}/{contract_pdf_filename(contract_id)}"


def _attach(db: Session, contract_id: int, url: str, storage_key: str) -> None:
    def change(contract: ContractModel) -> None:
        if not any(d.storage_key == storage_key for d in contract.documents):
            contract_repo.append_document(
                contract, contract_pdf_filename(contract_id), url, storage_key
            )
        contract_repo.append_history(
            contract, lifecycle.PDF_GENERATED, None, "Contract PDF generated"
        )

    apply_contract_change(db, contract_id, change)


def _record_failure(db: Session, contract_id: int, error: Exception) -> None:
    def change(contract: ContractModel) -> None:
        contract_repo.append_history(
            contract, lifecycle.PDF_GENERATION_FAILED, None, str(error)[:500]
        )

    try:
        db.rollback()
        apply_contract_change(db, contract_id, change)
    except Exception:
        logger.exception("Could not record PDF failure for contract %s", contract_id)


def generate_contract_pdf(
    session_factory: Callable[[], Session],
    storage_factory: Callable[[], BlobStorage],
    contract_id: int,
    target_status: str = lifecycle.ACTIVE,
) -> bool:
    """
    Render the contract, store it and attach it to the contract.

    Keyed by (contract_id, target_status): if the contract has left the
    target status by the time this runs, nothing is generated.

    Returns:
        True if a document was generated and attached
    """
    with session_factory() as db:
        contract = contract_repo.get_contract_by_id(db, contract_id)
        if contract is None or contract.status != target_status:
            logger.info(
                "Skipping PDF for contract %s: status is no longer %s", contract_id, target_status
            )
            return False

        try:
            pdf = render_contract_pdf(build_contract_view(contract, settings.pdf_app_name))
            stored = storage_factory().upload(
                pdf,
                folder=f"{settings.storage_contracts_folder}/{contract_id}",
                filename=contract_pdf_filename(contract_id),
                content_type="application/pdf",
                key=contract_pdf_key(contract_id),
            )
            _attach(db, contract_id, stored.url, stored.storage_key)
        except Exception as e:
            # Task boundary: nothing above this call can handle the error
            logger.exception("PDF generation failed for contract %s", contract_id)
            _record_failure(db, contract_id, e)
            return False

    logger.info("Contract %s PDF stored at %s", contract_id, stored.storage_key)
    return True

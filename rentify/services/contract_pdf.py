"""Render a rental contract as a PDF.

Layout is split in two steps: ``build_contract_lines`` turns a contract
snapshot into styled text lines, ``render_contract_pdf`` lays those lines
out on pages. Both are deterministic for a given snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from rentify.db.models.contract import Contract as ContractModel
from rentify.errors import DocumentRenderError

logger = logging.getLogger(__name__)

TITLE = "title"
HEADING = "heading"
BODY = "body"

FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
BODY_SIZE = 11
HEADING_SIZE = 13
TITLE_SIZE = 18
LINE_GAP = 6
TITLE_ADVANCE = 28
MARGIN = 50
WRAP_WIDTH = 90
# A wrap only breaks at a space found past this column.
MIN_BREAK_COLUMN = 20

NO_NAME = "No name provided"
NO_EMAIL = "No email provided"
NO_PHONE = "No phone provided"
NO_ADDRESS = "No address provided"
NO_DESCRIPTION = "No description provided"
NOT_SPECIFIED = "Not specified"
TBD = "TBD"
NOT_SIGNED = "(not signed)"


@dataclass(frozen=True, slots=True)
class PartyView:
    name: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True, slots=True)
class SignatureView:
    accepted: bool = False
    name: str | None = None
    at: datetime | None = None


@dataclass(frozen=True, slots=True)
class InstallmentView:
    due_date: date
    amount: float
    status: str


@dataclass(frozen=True, slots=True)
class ContractDocumentView:
    """Everything the document needs, detached from the database session."""

    contract_id: int
    effective_date: date | None
    owner: PartyView
    renter: PartyView
    property_address: str | None
    property_type: str | None
    property_description: str | None
    start_date: date | None
    end_date: date | None
    rent_amount: float | None
    security_deposit: float | None
    total_amount: float | None
    currency: str
    installments: tuple[InstallmentView, ...]
    owner_signature: SignatureView
    renter_signature: SignatureView
    app_name: str = "Rentify"


@dataclass(frozen=True, slots=True)
class ContractLine:
    text: str
    style: str = BODY


def _party(user) -> PartyView:
    if user is None:
        return PartyView()
    return PartyView(name=user.name, email=user.email, phone=user.phone)


def build_contract_view(contract: ContractModel, app_name: str = "Rentify") -> ContractDocumentView:
    """Snapshot a loaded contract (with property, owner and renter) for rendering."""
    prop = contract.property
    created_at = contract.created_at
    return ContractDocumentView(
        contract_id=contract.id,
        effective_date=created_at.date() if created_at else None,
        owner=_party(contract.owner),
        renter=_party(contract.renter),
        property_address=(prop.address or prop.name) if prop else None,
        property_type=prop.property_type if prop else None,
        property_description=(prop.description or prop.name) if prop else None,
        start_date=contract.start_date,
        end_date=contract.end_date,
        rent_amount=contract.rent_amount,
        security_deposit=contract.security_deposit,
        total_amount=contract.total_amount,
        currency=contract.currency,
        installments=tuple(
            InstallmentView(due_date=i.due_date, amount=i.amount, status=i.status)
            for i in contract.payment_schedule
        ),
        owner_signature=SignatureView(
            accepted=bool(contract.owner_accepted),
            name=contract.owner_signature_name,
            at=contract.owner_accepted_at,
        ),
        renter_signature=SignatureView(
            accepted=bool(contract.renter_accepted),
            name=contract.renter_signature_name,
            at=contract.renter_accepted_at,
        ),
        app_name=app_name,
    )


def _fmt_date(value: date | datetime | None) -> str:
    if value is None:
        return NOT_SPECIFIED
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _fmt_amount(value: float | None, currency: str) -> str:
    if value is None:
        return TBD
    return f"{value:,.2f} {currency}"


def _or(value: str | None, placeholder: str) -> str:
    return value if value else placeholder


def _signature_lines(label: str, signature: SignatureView, party: PartyView) -> list[ContractLine]:
    if not signature.accepted:
        return [ContractLine(f"  {label}: {NOT_SIGNED}")]
    lines = [ContractLine(f"  {label}: {signature.name or _or(party.name, NO_NAME)}")]
    if signature.at is not None:
        lines.append(ContractLine(f"    Signed at: {_fmt_date(signature.at)}"))
    return lines


def build_contract_lines(view: ContractDocumentView) -> list[ContractLine]:
    """Lay out the agreement text, section by section.

    Missing values are rendered as placeholders so every contract produces the
    same set of lines regardless of how complete its data is.
    """
    lines: list[ContractLine] = [
        ContractLine("RENTAL AGREEMENT", TITLE),
        ContractLine(f"Contract ID: {view.contract_id}"),
        ContractLine(f"Effective Date: {_fmt_date(view.effective_date)}"),
        ContractLine(""),
        ContractLine("PARTIES:", HEADING),
        ContractLine(f"  Owner / Landlord: {_or(view.owner.name, NO_NAME)}"),
        ContractLine(f"    Email: {_or(view.owner.email, NO_EMAIL)}"),
        ContractLine(f"    Phone: {_or(view.owner.phone, NO_PHONE)}"),
        ContractLine(""),
        ContractLine(f"  Tenant / Renter: {_or(view.renter.name, NO_NAME)}"),
        ContractLine(f"    Email: {_or(view.renter.email, NO_EMAIL)}"),
        ContractLine(f"    Phone: {_or(view.renter.phone, NO_PHONE)}"),
        ContractLine(""),
        ContractLine("PROPERTY:", HEADING),
        ContractLine(f"  Address: {_or(view.property_address, NO_ADDRESS)}"),
        ContractLine(f"  Type: {_or(view.property_type, NOT_SPECIFIED)}"),
        ContractLine(f"  Description: {_or(view.property_description, NO_DESCRIPTION)}"),
        ContractLine(""),
        ContractLine("TERM:", HEADING),
        ContractLine(f"  Commencement: {_fmt_date(view.start_date)}"),
        ContractLine(f"  Termination: {_fmt_date(view.end_date)}"),
        ContractLine(""),
        ContractLine("RENT AND PAYMENT:", HEADING),
        ContractLine(f"  Monthly Rent: {_fmt_amount(view.rent_amount, view.currency)}"),
        ContractLine(f"  Security Deposit: {_fmt_amount(view.security_deposit, view.currency)}"),
        ContractLine(f"  Total Amount: {_fmt_amount(view.total_amount, view.currency)}"),
    ]
    if view.installments:
        lines.append(ContractLine("  Payment Schedule:"))
        for n, item in enumerate(view.installments, start=1):
            lines.append(
                ContractLine(
                    f"    {n}. {_fmt_date(item.due_date)}  "
                    f"{_fmt_amount(item.amount, view.currency)}  ({item.status})"
                )
            )
    lines += [
        ContractLine(""),
        ContractLine("USE AND MAINTENANCE:", HEADING),
        ContractLine(
            "  Tenant shall use the Property as a residential dwelling and maintain it in good condition."
        ),
        ContractLine(""),
        ContractLine("TERMINATION:", HEADING),
        ContractLine(
            "  Termination and notice provisions are governed by applicable law and this Agreement."
        ),
        ContractLine(""),
        ContractLine("DIGITAL ACCEPTANCE:", HEADING),
        ContractLine(
            "  Electronic acceptance via the web application (checkbox with recorded signature "
            "name and timestamp) constitutes a valid signature."
        ),
        ContractLine(""),
        ContractLine("SIGNATURES:", HEADING),
    ]
    lines += _signature_lines("Owner", view.owner_signature, view.owner)
    lines += _signature_lines("Renter", view.renter_signature, view.renter)
    lines += [
        ContractLine(""),
        ContractLine(
            f"This document was generated by the {view.app_name} web application "
            "and is a summary of the agreement between the parties."
        ),
    ]
    return lines


def wrap_line(text: str, width: int = WRAP_WIDTH) -> list[str]:
    """Split a line into chunks of at most ``width`` characters.

    Breaks at the last space of a chunk when it lies past MIN_BREAK_COLUMN,
    otherwise cuts hard at ``width``.
    """
    if not text:
        return [""]
    parts = []
    remaining = text
    while len(remaining) > width:
        chunk = remaining[:width]
        last_space = chunk.rfind(" ")
        if last_space > MIN_BREAK_COLUMN:
            chunk = remaining[:last_space]
        parts.append(chunk.strip())
        remaining = remaining[len(chunk):].strip()
    if remaining:
        parts.append(remaining)
    return parts


def render_contract_pdf(view: ContractDocumentView) -> bytes:
    """Render the contract to PDF bytes.

    Raises:
        DocumentRenderError: If reportlab fails to produce the document
    """
    try:
        buffer = BytesIO()
        # invariant=1 pins the creation date and document id, so the output
        # only depends on the snapshot.
        c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
        c.setTitle(f"Rental Agreement {view.contract_id}")
        c.setAuthor(view.app_name)
        _, height = A4
        y = height - MARGIN

        for line in build_contract_lines(view):
            if line.style == TITLE:
                c.setFont(BOLD_FONT, TITLE_SIZE)
                c.drawString(MARGIN, y, line.text)
                y -= TITLE_ADVANCE
                continue

            font, size = (BOLD_FONT, HEADING_SIZE) if line.style == HEADING else (FONT, BODY_SIZE)
            for chunk in wrap_line(line.text):
                if y < MARGIN + 30:
                    c.showPage()
                    y = height - MARGIN
                c.setFont(font, size)
                c.drawString(MARGIN, y, chunk)
                y -= size + LINE_GAP

        c.showPage()
        c.save()
    except Exception as e:
        logger.exception("Failed to render contract %s", view.contract_id)
        raise DocumentRenderError(f"Failed to render contract {view.contract_id}: {e}") from e

    return buffer.getvalue()

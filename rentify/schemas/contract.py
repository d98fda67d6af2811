from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rentify.schemas.property import PropertySummary
from rentify.schemas.user import UserSummary


class Signature(BaseModel):
    name: str = ""
    ip: str = ""
    user_agent: str = ""


class Acceptance(BaseModel):
    accepted: bool = False
    at: datetime | None = None
    signature: Signature = Field(default_factory=Signature)


class ContractDocument(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    url: str
    storage_key: str
    uploaded_at: datetime


class ContractHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action: str
    by: int | None = Field(None, validation_alias="by_id")
    at: datetime
    notes: str = ""


class Installment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    due_date: date
    amount: float
    status: Literal["due", "paid", "overdue"] = "due"
    payment_ref: str | None = None


def _acceptance(contract: Any, party: str) -> Acceptance:
    return Acceptance(
        accepted=bool(getattr(contract, f"{party}_accepted")),
        at=getattr(contract, f"{party}_accepted_at"),
        signature=Signature(
            name=getattr(contract, f"{party}_signature_name") or "",
            ip=getattr(contract, f"{party}_signature_ip") or "",
            user_agent=getattr(contract, f"{party}_signature_user_agent") or "",
        ),
    )


class Contract(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    property_id: int
    owner_id: int
    renter_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    rent_amount: float | None = None
    currency: str
    security_deposit: float | None = None
    total_amount: float | None = None
    notes: str | None = None
    status: str
    owner_accepted: Acceptance
    renter_accepted: Acceptance
    documents: list[ContractDocument] = []
    history: list[ContractHistoryEntry] = []
    payment_schedule: list[Installment] = []
    version: int
    created_at: datetime
    updated_at: datetime
    property: PropertySummary | None = None
    owner: UserSummary | None = None
    renter: UserSummary | None = None

    @model_validator(mode="before")
    @classmethod
    def from_contract_row(cls, data: Any) -> Any:
        """Fold the flattened acceptance columns of a contract row into nested records."""
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "property_id": data.property_id,
            "owner_id": data.owner_id,
            "renter_id": data.renter_id,
            "start_date": data.start_date,
            "end_date": data.end_date,
            "rent_amount": data.rent_amount,
            "currency": data.currency,
            "security_deposit": data.security_deposit,
            "total_amount": data.total_amount,
            "notes": data.notes,
            "status": data.status,
            "owner_accepted": _acceptance(data, "owner"),
            "renter_accepted": _acceptance(data, "renter"),
            "documents": [ContractDocument.model_validate(d) for d in data.documents],
            "history": [ContractHistoryEntry.model_validate(h) for h in data.history],
            "payment_schedule": [Installment.model_validate(i) for i in data.payment_schedule],
            "version": data.version,
            "created_at": data.created_at,
            "updated_at": data.updated_at,
            "property": PropertySummary.model_validate(data.property) if data.property else None,
            "owner": UserSummary.model_validate(data.owner) if data.owner else None,
            "renter": UserSummary.model_validate(data.renter) if data.renter else None,
        }


class ContractEnvelope(BaseModel):
    success: bool = True
    contract: Contract


class ContractListEnvelope(BaseModel):
    success: bool = True
    contracts: list[Contract]
    total: int
    page: int
    page_size: int


class DocumentUploadEnvelope(BaseModel):
    success: bool = True
    added: list[ContractDocument]
    contract: Contract


class InstallmentIn(BaseModel):
    due_date: date
    amount: float = Field(..., ge=0)
    status: Literal["due", "paid", "overdue"] = "due"
    payment_ref: str | None = Field(None, max_length=255)


class ContractCreate(BaseModel):
    # Optional at the schema level so a missing property is reported as a
    # domain validation error (400) rather than a request-shape error.
    property_id: int | None = None
    renter_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    rent_amount: float | None = None
    currency: str | None = Field(None, pattern=r"^[A-Za-z]{3}$", description="ISO 4217 code")
    security_deposit: float | None = None
    total_amount: float | None = None
    notes: str | None = None


class ContractUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    renter_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    rent_amount: float | None = None
    currency: str | None = Field(None, pattern=r"^[A-Za-z]{3}$", description="ISO 4217 code")
    security_deposit: float | None = None
    total_amount: float | None = None
    notes: str | None = None
    payment_schedule: list[InstallmentIn] | None = None

    @model_validator(mode="after")
    def validate_end_date_after_start_date(self):
        """Ensure end_date doesn't precede start_date when both are sent."""
        if self.start_date is not None and self.end_date is not None:
            if self.end_date < self.start_date:
                raise ValueError(
                    f"end_date ({self.end_date}) cannot precede start_date ({self.start_date})"
                )
        return self


class SignatureIn(BaseModel):
    name: str | None = Field(None, max_length=255)


class AcceptRequest(BaseModel):
    signature: SignatureIn | None = None
    notes: str | None = None


class CancelRequest(BaseModel):
    reason: str | None = None


class ProposeEditRequest(BaseModel):
    notes: str

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str) -> str:
        return v.strip()

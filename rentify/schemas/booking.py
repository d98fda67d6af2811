from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rentify.schemas.property import PropertySummary


class Booking(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    property_id: int
    name: str
    description: str | None = None
    address: str | None = None
    check_in: date
    check_out: date
    total_price: float
    status: Literal["pending", "confirmed", "cancelled"]
    created_at: datetime
    updated_at: datetime
    property: PropertySummary | None = None


class BookingEnvelope(BaseModel):
    success: bool = True
    message: str
    booking: Booking


def _check_stay(check_in: date | None, check_out: date | None) -> None:
    if check_in is not None and check_out is not None and check_out <= check_in:
        raise ValueError(f"check_out ({check_out}) must be after check_in ({check_in})")


class BookingCreate(BaseModel):
    property_id: int
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=500, description="Defaults to the listing address")
    check_in: date
    check_out: date
    total_price: float = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_stay(self):
        _check_stay(self.check_in, self.check_out)
        return self


class BookingUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=500)
    check_in: date | None = None
    check_out: date | None = None
    total_price: float | None = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_stay(self):
        _check_stay(self.check_in, self.check_out)
        return self

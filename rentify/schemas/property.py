from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class Property(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int | None = None
    created_by_id: int | None = None
    name: str
    description: str | None = None
    address: str
    city: str | None = None
    property_type: str | None = None
    price: float | None = None
    created_at: datetime | None = None


class PropertySummary(BaseModel):
    """Listing details embedded in contract responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int | None = None
    name: str
    address: str
    city: str | None = None
    property_type: str | None = None
    description: str | None = None


class PropertyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    city: str | None = Field(None, max_length=255)
    property_type: str | None = Field(None, max_length=64)
    price: float | None = Field(None, ge=0)
    owner_id: int | None = Field(None, description="Listing owner (admin only)")

from pydantic import BaseModel, EmailStr, ConfigDict, Field

from rentify.schemas.role import Role


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    phone: str | None = None
    role: Role


class UserSummary(BaseModel):
    """Party details embedded in contract responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    phone: str | None = None


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)
    password: str = Field(..., min_length=8)
    role: str = Field("renter", description="owner or renter; admins may also create admins")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User

from typing import Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for every domain error."""

    success: Literal[False] = False
    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code, e.g. NOT_FOUND or CONFLICT")

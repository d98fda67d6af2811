from __future__ import annotations

from dataclasses import dataclass

ADMIN = "admin"
OWNER = "owner"
RENTER = "renter"


@dataclass(frozen=True, slots=True)
class CallerContext:
    """The authenticated identity an operation runs on behalf of."""

    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


@dataclass(frozen=True, slots=True)
class RequestOrigin:
    """Where a request came from; recorded with e-signatures."""

    ip: str = ""
    user_agent: str = ""

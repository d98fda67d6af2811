from rentify.db.models.role import Role
from rentify.db.models.user import User
from rentify.db.models.property import Property
from rentify.db.models.booking import Booking
from rentify.db.models.contract import (
    Contract,
    ContractDocument,
    ContractHistoryEntry,
    ContractInstallment,
)

__all__ = [
    "Role",
    "User",
    "Property",
    "Booking",
    "Contract",
    "ContractDocument",
    "ContractHistoryEntry",
    "ContractInstallment",
]

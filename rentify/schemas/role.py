from typing import Literal

from pydantic import BaseModel, ConfigDict

RoleName = Literal["admin", "owner", "renter"]


class Role(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: RoleName

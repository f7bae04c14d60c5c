"""
Authentication schemas for request/response models
"""

from typing import List, Optional

from pydantic import Field, field_validator

from app.core.roles import Role, is_privileged, is_staff
from app.schemas.common import CamelModel, OkResponse


def _as_stripped_text(value):
    # Clients sometimes send the code or PIN as a JSON number
    if value is None or isinstance(value, bool):
        return value
    return str(value).strip()


class LoginRequest(CamelModel):
    """Schema for PIN login"""
    code: str = Field(..., min_length=1, description="Account code")
    pin: str = Field(..., min_length=1, description="4-digit PIN")

    @field_validator("code", "pin", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _as_stripped_text(value)


class SwitchAssociationRequest(CamelModel):
    """Schema for re-scoping a privileged token to another association"""
    ld_id: str = Field(..., min_length=1)

    @field_validator("ld_id", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _as_stripped_text(value)


class Identity(CamelModel):
    """Decoded token claims attached to an authenticated request"""
    role: Role
    ld_id: str = Field(..., min_length=1)
    name: str = ""
    code: Optional[str] = None

    @property
    def privileged(self) -> bool:
        return is_privileged(self.role, self.code)

    @property
    def staff(self) -> bool:
        return is_staff(self.role, self.code)

    def claims(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class UserInfo(CamelModel):
    code: Optional[str] = None
    name: str
    ld_id: str
    role: Role
    enabled: Optional[bool] = None


class LoginResponse(OkResponse):
    token: str
    user: UserInfo


class MeResponse(OkResponse):
    user: UserInfo


class AssociationItem(CamelModel):
    id: str
    name: str


class AssociationListResponse(OkResponse):
    lds: List[AssociationItem]


class PingResponse(OkResponse):
    route: str

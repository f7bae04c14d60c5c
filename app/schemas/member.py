"""
Member administration schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from app.core.roles import Role
from app.schemas.auth import UserInfo
from app.schemas.common import CamelModel, OkResponse


class MemberItem(CamelModel):
    code: str
    name: str
    role: Role
    enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_pin_reset_at: Optional[datetime] = None


class MemberListResponse(OkResponse):
    users: List[MemberItem]


class MemberCreate(CamelModel):
    """Schema for creating a member in the caller's association"""
    code: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1)
    role: Role = Role.MEMBER

    @field_validator("code", "name", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class MemberUpdate(CamelModel):
    """Partial update; omitted fields are left as they are"""
    enabled: Optional[bool] = None
    name: Optional[str] = None
    role: Optional[Role] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if value is not None else value


class MemberCreateResponse(OkResponse):
    user: UserInfo
    pin: str = Field(..., description="One-time plaintext PIN, never retrievable again")


class MemberUpdateResponse(OkResponse):
    code: str
    patch: Dict[str, Any]


class MemberDeleteResponse(OkResponse):
    deleted: str
    mode: str


class PinResetResponse(OkResponse):
    code: str
    pin: str

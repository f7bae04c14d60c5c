"""
Member account (collection "hunters", document id = account code)
"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.core.roles import Role
from app.models.base import StoredModel


class Account(StoredModel):
    COLLECTION = "hunters"

    name: str = ""
    ld_id: str
    role: Role = Role.MEMBER
    enabled: bool = False

    # Credential: bcrypt hash; `pin` only exists on legacy plaintext accounts
    pin_hash: Optional[str] = None
    pin: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_pin_reset_at: Optional[datetime] = None

    @field_validator("ld_id")
    @classmethod
    def ld_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ldId is empty")
        return value

    @field_validator("enabled", mode="before")
    @classmethod
    def enabled_only_if_true(cls, value) -> bool:
        # "true", 1 or "yes" written by hand do not enable an account
        return value is True

    @field_validator("pin", "pin_hash", mode="before")
    @classmethod
    def credential_as_text(cls, value):
        if value is None or isinstance(value, bool):
            return None
        value = str(value).strip()
        return value or None

    @property
    def code(self) -> str:
        return self.id

    @property
    def display_name(self) -> str:
        return self.name.strip() or "Lovec"

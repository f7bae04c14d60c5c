"""
Role model and the authorization predicates every handler goes through
"""

import enum
from typing import Optional

from app.core.config import settings


class Role(str, enum.Enum):
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMIN = "admin"
    SUPER = "super"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Role.MEMBER: 0,
    Role.MODERATOR: 1,
    Role.ADMIN: 2,
    Role.SUPER: 3,
}

STAFF_ROLES = frozenset({Role.MODERATOR, Role.ADMIN, Role.SUPER})

# Roles only an admin or super caller may hand out or manage
ELEVATED_ROLES = frozenset({Role.ADMIN, Role.SUPER})


def is_privileged(role: Role, code: Optional[str] = None) -> bool:
    """Top privilege: may cross associations and re-scope tokens"""
    if role == Role.SUPER:
        return True
    return bool(settings.SUPER_ACCOUNT_CODE) and code == settings.SUPER_ACCOUNT_CODE


def is_staff(role: Role, code: Optional[str] = None) -> bool:
    return role in STAFF_ROLES or is_privileged(role, code)


def can_assign(caller_role: Role, target_role: Role, caller_code: Optional[str] = None) -> bool:
    """Whether a caller may create an account with, or promote one to, target_role"""
    if target_role in ELEVATED_ROLES:
        return caller_role in ELEVATED_ROLES or is_privileged(caller_role, caller_code)
    return is_staff(caller_role, caller_code)


def can_manage(caller_role: Role, target_role: Role, caller_code: Optional[str] = None) -> bool:
    """Whether a caller may modify, reset or delete an account currently holding target_role"""
    return can_assign(caller_role, target_role, caller_code)

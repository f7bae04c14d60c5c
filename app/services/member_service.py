"""
Member Service - staff administration of accounts within an association
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog

from app.core.config import settings
from app.core.exceptions import AccountNotFoundError, ConflictError, ForbiddenError
from app.core.roles import can_assign, can_manage
from app.core.security import generate_pin, hash_pin
from app.db.document_store import DocumentStore
from app.models.account import Account
from app.schemas.auth import Identity
from app.schemas.member import MemberCreate, MemberItem, MemberUpdate
from app.services.hunt_service import clamp_limit
from app.utils.date_utils import utcnow

logger = structlog.get_logger()


class MemberService:
    """Service for staff-only member administration"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_members(self, identity: Identity, limit: Optional[int] = None) -> List[MemberItem]:
        """Accounts of the caller's association, ordered by name, at most `limit` (defaulted and capped)"""
        snapshots = await self.store.query(
            Account.COLLECTION,
            filters=[("ldId", "==", identity.ld_id)],
            order_by="name",
            limit=clamp_limit(limit),
        )
        accounts = [Account.from_snapshot(snapshot) for snapshot in snapshots]
        accounts.sort(key=lambda account: account.name.casefold())
        return [self._to_item(account) for account in accounts]

    async def create_member(self, identity: Identity, data: MemberCreate) -> Tuple[Account, str]:
        """
        Create an enabled account in the caller's association

        Returns:
            The stored account and its one-time plaintext PIN
        """
        if not can_assign(identity.role, data.role, identity.code):
            self._forbidden(identity, "create", data.code, f"Forbidden (cannot create {data.role.value})")

        pin = generate_pin()
        now = utcnow()
        account = Account(
            id=data.code,
            name=data.name,
            ld_id=identity.ld_id,
            role=data.role,
            enabled=True,
            pin_hash=hash_pin(pin),
            created_at=now,
            updated_at=now,
        )

        try:
            await self.store.create(Account.COLLECTION, account.code, account.to_document())
        except ConflictError:
            logger.warning("Member code already exists", code=data.code, ld_id=identity.ld_id)
            raise ConflictError("User code already exists", detail=data.code)

        logger.info("Member created", code=account.code, ld_id=account.ld_id, role=account.role.value,
                    by=identity.code)
        return account, pin

    async def update_member(self, identity: Identity, code: str, data: MemberUpdate) -> Dict[str, Any]:
        """Merge enabled/name/role into the account; returns the applied patch"""
        await self._load_managed(identity, code)

        patch: Dict[str, Any] = {}
        if data.enabled is not None:
            if data.enabled is False and code == identity.code:
                self._forbidden(identity, "disable", code, "Forbidden (cannot disable own account)")
            patch["enabled"] = data.enabled
        if data.name is not None:
            patch["name"] = data.name
        if data.role is not None:
            if not can_assign(identity.role, data.role, identity.code):
                self._forbidden(identity, "promote", code, f"Forbidden (cannot set {data.role.value})")
            patch["role"] = data.role.value

        patch["updatedAt"] = utcnow()
        await self.store.set(Account.COLLECTION, code, patch, merge=True)
        logger.info("Member updated", code=code, fields=sorted(patch), by=identity.code)
        return patch

    async def delete_member(self, identity: Identity, code: str) -> str:
        """Hard delete or disable, depending on ACCOUNT_DELETE_MODE; returns the mode applied"""
        await self._load_managed(identity, code)
        if code == identity.code:
            self._forbidden(identity, "delete", code, "Forbidden (cannot delete own account)")

        mode = settings.ACCOUNT_DELETE_MODE
        if mode == "disable":
            await self.store.set(
                Account.COLLECTION,
                code,
                {"enabled": False, "updatedAt": utcnow()},
                merge=True,
            )
        else:
            await self.store.delete(Account.COLLECTION, code)

        logger.info("Member removed", code=code, mode=mode, by=identity.code)
        return mode

    async def reset_pin(self, identity: Identity, code: str) -> str:
        """Store a fresh PIN hash and return the plaintext PIN once"""
        await self._load_managed(identity, code)

        pin = generate_pin()
        now = utcnow()
        await self.store.set(
            Account.COLLECTION,
            code,
            {"pinHash": hash_pin(pin), "updatedAt": now, "lastPinResetAt": now},
            merge=True,
        )
        logger.info("Member PIN reset", code=code, by=identity.code)
        return pin

    async def _load_managed(self, identity: Identity, code: str) -> Account:
        """Load an account the caller may administer, or raise"""
        snapshot = await self.store.get(Account.COLLECTION, code)
        if snapshot is None:
            raise AccountNotFoundError(code)

        account = Account.from_snapshot(snapshot)

        if account.ld_id != identity.ld_id and not identity.privileged:
            logger.warning("Forbidden cross-association access", code=code, ld_id=account.ld_id,
                           caller=identity.code, caller_ld_id=identity.ld_id)
            raise ForbiddenError("Forbidden (other LD)")

        if not can_manage(identity.role, account.role, identity.code):
            self._forbidden(identity, "manage", code, f"Forbidden (cannot manage {account.role.value})")

        return account

    @staticmethod
    def _forbidden(identity: Identity, action: str, code: str, message: str) -> None:
        logger.warning("Forbidden member administration", action=action, code=code,
                       caller=identity.code, caller_role=identity.role.value)
        raise ForbiddenError(message)

    @staticmethod
    def _to_item(account: Account) -> MemberItem:
        return MemberItem(
            code=account.code,
            name=account.name,
            role=account.role,
            enabled=account.enabled,
            created_at=account.created_at,
            updated_at=account.updated_at,
            last_pin_reset_at=account.last_pin_reset_at,
        )

"""
Auth Service - PIN login, token issuing and association switching
"""

import secrets
from typing import List, Tuple

import structlog

from app.core.config import settings
from app.core.exceptions import (
    AccountDisabledError,
    AccountNotFoundError,
    ForbiddenError,
    InvalidCredentialError,
    MissingCredentialError,
)
from app.core.security import create_access_token, hash_pin, is_pin_hash, verify_pin
from app.db.document_store import DELETE_FIELD, DocumentStore
from app.models.account import Account
from app.models.association import Association
from app.schemas.auth import AssociationItem, Identity
from app.utils.date_utils import utcnow

logger = structlog.get_logger()


class AuthService:
    """Issues signed claims tokens for member accounts"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def login(self, code: str, pin: str) -> Tuple[str, Account]:
        """
        Verify a code + PIN pair and mint a token

        Raises:
            AccountNotFoundError: no account with that code
            AccountDisabledError: account exists but is not enabled
            MissingCredentialError: account has no usable credential
            InvalidCredentialError: PIN does not match
        """
        snapshot = await self.store.get(Account.COLLECTION, code)
        if snapshot is None:
            logger.warning("Login failed: unknown account code", code=code)
            raise AccountNotFoundError(code)

        account = Account.from_snapshot(snapshot)

        if not account.enabled:
            logger.warning("Login failed: account disabled", code=code)
            raise AccountDisabledError(code)

        if account.pin_hash and is_pin_hash(account.pin_hash):
            if not verify_pin(pin, account.pin_hash):
                logger.warning("Login failed: invalid PIN", code=code)
                raise InvalidCredentialError()
        elif settings.LEGACY_PLAINTEXT_PINS and (account.pin or account.pin_hash):
            # Older accounts carry the PIN in clear text (in `pin` or, worse, in `pinHash`)
            stored = account.pin or account.pin_hash
            if not secrets.compare_digest(pin.encode("utf-8"), stored.encode("utf-8")):
                logger.warning("Login failed: invalid PIN", code=code, legacy=True)
                raise InvalidCredentialError()
            await self._upgrade_legacy_pin(account, pin)
        else:
            logger.error("Account has no usable PIN hash", code=code)
            raise MissingCredentialError(code)

        identity = Identity(
            role=account.role,
            ld_id=account.ld_id,
            name=account.display_name,
            code=account.code,
        )
        token = self.issue_token(identity)
        logger.info("Login succeeded", code=code, ld_id=account.ld_id, role=account.role.value)
        return token, account

    async def _upgrade_legacy_pin(self, account: Account, pin: str) -> None:
        """Replace a plaintext PIN with its hash; a failed write never fails the login"""
        try:
            await self.store.set(
                Account.COLLECTION,
                account.code,
                {"pinHash": hash_pin(pin), "pin": DELETE_FIELD, "updatedAt": utcnow()},
                merge=True,
            )
            logger.info("Upgraded legacy plaintext PIN", code=account.code)
        except Exception as e:
            logger.warning("Legacy PIN upgrade failed", code=account.code, error=str(e))

    @staticmethod
    def issue_token(identity: Identity) -> str:
        return create_access_token(identity.claims())

    async def list_associations(self, identity: Identity) -> List[AssociationItem]:
        """All associations; falls back to the ldIds found on accounts when none are loaded"""
        if not identity.privileged:
            logger.warning("Forbidden association listing", code=identity.code, role=identity.role.value)
            raise ForbiddenError()

        snapshots = await self.store.list_all(Association.COLLECTION)
        items = []
        for snapshot in snapshots:
            association = Association.from_snapshot(snapshot)
            items.append(AssociationItem(id=association.id, name=association.display_name))

        if not items:
            accounts = [Account.from_snapshot(s) for s in await self.store.list_all(Account.COLLECTION)]
            ld_ids = {account.ld_id for account in accounts}
            items = [AssociationItem(id=ld_id, name=ld_id) for ld_id in ld_ids]

        items.sort(key=lambda item: item.name.casefold())
        return items

    async def switch_association(self, identity: Identity, ld_id: str) -> Tuple[str, Identity]:
        """Re-issue a privileged caller's token scoped to another association"""
        if not identity.privileged:
            logger.warning("Forbidden association switch", code=identity.code, role=identity.role.value)
            raise ForbiddenError()

        switched = identity.model_copy(update={"ld_id": ld_id})
        logger.warning(
            "Privileged caller switched association",
            code=identity.code,
            from_ld_id=identity.ld_id,
            to_ld_id=ld_id,
        )
        return self.issue_token(switched), switched

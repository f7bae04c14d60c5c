"""
Test configuration and fixtures
"""

import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-the-test-suite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from typing import AsyncGenerator, Awaitable, Callable, Dict  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from app.main import app  # noqa: E402
from app.api.deps import get_store  # noqa: E402
from app.core.roles import Role  # noqa: E402
from app.core.security import hash_pin  # noqa: E402
from app.db.document_store import DocumentStore  # noqa: E402
from app.models.account import Account  # noqa: E402
from app.schemas.auth import Identity  # noqa: E402
from app.services.auth_service import AuthService  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

LD_ID = "brezovica"
OTHER_LD_ID = "vrhnika"
PIN = "1234"


@pytest.fixture
async def store() -> AsyncGenerator[DocumentStore, None]:
    """Fresh in-memory document store"""
    test_store = DocumentStore.from_url(TEST_DATABASE_URL)
    await test_store.create_schema()
    yield test_store
    await test_store.close()


@pytest.fixture
async def client(store: DocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with document store dependency override"""
    app.dependency_overrides[get_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://localhost") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_account(store: DocumentStore) -> Callable[..., Awaitable[Account]]:
    """Factory storing an account with a hashed PIN"""

    async def _make(
        code: str,
        role: Role = Role.MEMBER,
        ld_id: str = LD_ID,
        name: str = None,
        enabled: bool = True,
        pin: str = PIN,
    ) -> Account:
        account = Account(
            id=code,
            name=name if name is not None else f"Lovec {code}",
            ld_id=ld_id,
            role=role,
            enabled=enabled,
            pin_hash=hash_pin(pin),
        )
        await store.set(Account.COLLECTION, code, account.to_document())
        return account

    return _make


@pytest.fixture
async def member_account(make_account) -> Account:
    return await make_account("1001", Role.MEMBER, name="Janez Novak")


@pytest.fixture
async def moderator_account(make_account) -> Account:
    return await make_account("2001", Role.MODERATOR, name="Marko Moderator")


@pytest.fixture
async def super_account(make_account) -> Account:
    return await make_account("9001", Role.SUPER, name="Super Admin")


def token_for(account: Account) -> str:
    """Create access token for an account"""
    return AuthService.issue_token(
        Identity(role=account.role, ld_id=account.ld_id, name=account.display_name, code=account.code)
    )


def bearer(account: Account) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_for(account)}"}


@pytest.fixture
def member_headers(member_account: Account) -> Dict[str, str]:
    """Authorization headers for a plain member"""
    return bearer(member_account)


@pytest.fixture
def moderator_headers(moderator_account: Account) -> Dict[str, str]:
    """Authorization headers for a moderator"""
    return bearer(moderator_account)


@pytest.fixture
def super_headers(super_account: Account) -> Dict[str, str]:
    """Authorization headers for a super account"""
    return bearer(super_account)


@pytest.fixture
def headers_for() -> Callable[[Account], Dict[str, str]]:
    """Authorization headers for an arbitrary account"""
    return bearer

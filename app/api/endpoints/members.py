"""
Member administration endpoints (staff only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from app.api.deps import get_store, require_staff
from app.db.document_store import DocumentStore
from app.schemas.auth import Identity, UserInfo
from app.schemas.member import (
    MemberCreate, MemberCreateResponse, MemberDeleteResponse, MemberListResponse,
    MemberUpdate, MemberUpdateResponse, PinResetResponse
)
from app.services.member_service import MemberService

router = APIRouter()


@router.get("/users", response_model=MemberListResponse)
async def list_members(
    limit: Optional[int] = Query(None, ge=1, description="Page size (capped at MAX_LIST_LIMIT)"),
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    """Accounts of the caller's association, ordered by name"""
    users = await MemberService(store).list_members(identity, limit=limit)
    return MemberListResponse(users=users)


@router.post("/users", response_model=MemberCreateResponse)
async def create_member(
    member_data: MemberCreate,
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    """Create a member; the response carries the one-time PIN"""
    account, pin = await MemberService(store).create_member(identity, member_data)

    return MemberCreateResponse(
        user=UserInfo(
            code=account.code,
            name=account.name,
            ld_id=account.ld_id,
            role=account.role,
            enabled=account.enabled,
        ),
        pin=pin,
    )


@router.patch("/users/{code}", response_model=MemberUpdateResponse)
async def update_member(
    member_data: MemberUpdate,
    code: str = Path(..., min_length=1),
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    patch = await MemberService(store).update_member(identity, code, member_data)
    return MemberUpdateResponse(code=code, patch=patch)


@router.delete("/users/{code}", response_model=MemberDeleteResponse)
async def delete_member(
    code: str = Path(..., min_length=1),
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    """Delete (or disable, per ACCOUNT_DELETE_MODE) a member"""
    mode = await MemberService(store).delete_member(identity, code)
    return MemberDeleteResponse(deleted=code, mode=mode)


@router.post("/users/{code}/reset-pin", response_model=PinResetResponse)
async def reset_pin(
    code: str = Path(..., min_length=1),
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    """Issue a fresh PIN; the response is the only place it is ever shown"""
    pin = await MemberService(store).reset_pin(identity, code)
    return PinResetResponse(code=code, pin=pin)

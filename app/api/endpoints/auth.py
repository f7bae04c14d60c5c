"""
Authentication endpoints: PIN login, identity, association switching
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_identity, get_store
from app.db.document_store import DocumentStore
from app.schemas.auth import (
    AssociationListResponse, Identity, LoginRequest, LoginResponse, MeResponse,
    PingResponse, SwitchAssociationRequest, UserInfo
)
from app.services.auth_service import AuthService

router = APIRouter()


@router.get("/ping", response_model=PingResponse)
async def ping():
    return PingResponse(route="/auth/ping")


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    store: DocumentStore = Depends(get_store)
):
    """Authenticate with account code + PIN and return a 30-day token"""
    token, account = await AuthService(store).login(login_data.code, login_data.pin)

    return LoginResponse(
        token=token,
        user=UserInfo(
            code=account.code,
            name=account.display_name,
            ld_id=account.ld_id,
            role=account.role,
            enabled=account.enabled,
        ),
    )


@router.get("/me", response_model=MeResponse)
async def me(identity: Identity = Depends(get_current_identity)):
    """Claims of the presented token"""
    return MeResponse(
        user=UserInfo(code=identity.code, name=identity.name, ld_id=identity.ld_id, role=identity.role)
    )


@router.get("/lds", response_model=AssociationListResponse)
async def list_associations(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    """All associations (top privilege only)"""
    lds = await AuthService(store).list_associations(identity)
    return AssociationListResponse(lds=lds)


@router.post("/switch-ld", response_model=LoginResponse)
async def switch_association(
    switch_data: SwitchAssociationRequest,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    """Re-issue the caller's token scoped to another association (top privilege only)"""
    token, switched = await AuthService(store).switch_association(identity, switch_data.ld_id)

    return LoginResponse(
        token=token,
        user=UserInfo(code=switched.code, name=switched.name, ld_id=switched.ld_id, role=switched.role),
    )

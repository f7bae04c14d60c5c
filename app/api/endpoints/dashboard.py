"""
Association dashboard endpoints
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_identity, get_store
from app.db.document_store import DocumentStore
from app.schemas.auth import Identity, PingResponse
from app.schemas.dashboard import DashboardResponse
from app.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/ping", response_model=PingResponse)
async def ping():
    return PingResponse(route="/ld/ping")


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    """Association name, member count and hunts logged this month"""
    return await DashboardService(store).get_dashboard(identity)

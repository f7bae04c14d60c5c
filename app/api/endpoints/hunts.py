"""
Active hunt and hunt log endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_identity, get_store
from app.db.document_store import DocumentStore
from app.schemas.auth import Identity
from app.schemas.hunt import ActiveHuntListResponse, HuntLogListResponse
from app.services.hunt_service import HuntService, parse_bound

router = APIRouter()


@router.get("/active-hunts", response_model=ActiveHuntListResponse)
async def list_active_hunts(
    limit: Optional[int] = Query(None, ge=1, description="Page size (capped at MAX_LIST_LIMIT)"),
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    """In-progress hunts of the caller's association, newest first"""
    active = await HuntService(store).list_active_hunts(identity.ld_id, limit=limit)
    return ActiveHuntListResponse(active=active)


@router.get("/hunt-logs", response_model=HuntLogListResponse)
async def list_hunt_logs(
    from_: Optional[str] = Query(None, alias="from", description="ISO-8601 lower bound on finishedAt"),
    to: Optional[str] = Query(None, description="ISO-8601 upper bound on finishedAt"),
    limit: Optional[int] = Query(None, ge=1, description="Page size (capped at MAX_LIST_LIMIT)"),
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    """Completed hunts of the caller's association, most recently finished first"""
    start = parse_bound(from_, "from")
    end = parse_bound(to, "to")

    logs = await HuntService(store).list_hunt_logs(identity.ld_id, start=start, end=end, limit=limit)
    return HuntLogListResponse(logs=logs)

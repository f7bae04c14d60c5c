"""
Harvest-quota ("odvzem") plan import and realization view endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_identity, get_store, require_staff
from app.db.document_store import DocumentStore
from app.schemas.auth import Identity
from app.schemas.quota import PlanImportRequest, PlanImportResponse, QuotaViewResponse
from app.services.quota_service import QuotaService

router = APIRouter()


@router.post("/odvzem-plan/import-excel", response_model=PlanImportResponse)
async def import_plan(
    import_data: PlanImportRequest,
    year: Optional[int] = Query(None, description="Plan year"),
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    """Replace the caller's association plan for the year with the uploaded workbook"""
    plan = await QuotaService(store).import_plan(
        identity.ld_id, year, import_data.filename, import_data.content_base64
    )
    return PlanImportResponse(ld_id=plan.ld_id, year=plan.year, imported=len(plan.items))


@router.get("/odvzem-view", response_model=QuotaViewResponse)
async def get_view(
    year: Optional[int] = Query(None, description="Plan year"),
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    """Plan rows with executed and pending counts from the year's hunt logs"""
    view = await QuotaService(store).build_view(identity.ld_id, year)
    return QuotaViewResponse(view=view)

"""
Point of interest endpoints
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_identity, get_store, require_staff
from app.db.document_store import DocumentStore
from app.schemas.auth import Identity
from app.schemas.point import PointImportRequest, PointImportResponse, PointListResponse
from app.services.point_service import PointService

router = APIRouter()


@router.get("/points", response_model=PointListResponse)
async def list_points(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store)
):
    points = await PointService(store).list_points(identity.ld_id)
    return PointListResponse(points=points)


@router.post("/points/import-csv", response_model=PointImportResponse)
async def import_points(
    import_data: PointImportRequest,
    identity: Identity = Depends(require_staff),
    store: DocumentStore = Depends(get_store)
):
    """Upsert points into the caller's association, keyed on pointId"""
    result = await PointService(store).import_rows(import_data.rows, ld_id=identity.ld_id)

    return PointImportResponse(
        processed=result.processed,
        created=result.created,
        updated=result.updated,
        skipped=result.skipped,
    )

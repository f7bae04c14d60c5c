"""
Point of interest schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, OkResponse


class PointItem(CamelModel):
    id: str
    ld_id: str
    ld_name: str = ""
    point_id: Optional[str] = None
    name: str = ""
    type: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    status: str = ""
    notes: str = ""
    source: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PointListResponse(OkResponse):
    points: List[PointItem]


class PointImportRequest(CamelModel):
    """Rows as parsed from a CSV on the client; keys follow the sheet headers"""
    rows: List[Dict[str, Any]] = Field(..., min_length=1)


class PointImportResponse(OkResponse):
    processed: int
    created: int
    updated: int
    skipped: int

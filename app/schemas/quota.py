"""
Harvest-quota plan import and realization view schemas
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field

from app.schemas.common import CamelModel, OkResponse

Number = Union[int, float]


class PlanImportRequest(CamelModel):
    filename: Optional[str] = None
    content_base64: str = Field(..., description="Base64-encoded .xlsx workbook")


class PlanImportResponse(OkResponse):
    ld_id: str
    year: int
    imported: int


class QuotaViewRow(CamelModel):
    key: str
    species: str
    class_label: str
    plan: Number
    executed: Number
    pending: Number
    total: Number
    percent: str


class QuotaView(CamelModel):
    ld_id: str
    year: int
    title: str
    updated_at: Optional[datetime] = None
    rows: List[QuotaViewRow]


class QuotaViewResponse(OkResponse):
    view: QuotaView

"""
Point of interest (collection "ld_points")
"""

import enum
from datetime import datetime
from typing import Optional

from app.models.base import StoredModel


class PointType(str, enum.Enum):
    FEEDER = "krmisce"
    HIDE = "opazovalnica"
    LODGE = "lovska_koca"
    FIELD = "njiva"
    OTHER = "drugo"


class PointStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNSET = ""


class Point(StoredModel):
    COLLECTION = "ld_points"

    ld_id: str
    ld_name: str = ""
    point_id: Optional[str] = None
    name: str = ""
    type: PointType = PointType.OTHER
    lat: float
    lng: float
    status: PointStatus = PointStatus.UNSET
    notes: str = ""
    source: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

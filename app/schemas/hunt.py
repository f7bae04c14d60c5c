"""
Active hunt and hunt log listing schemas
"""

from datetime import datetime
from typing import List, Optional, Union

from app.schemas.common import CamelModel, OkResponse


class LocationFields(CamelModel):
    location_mode: Optional[str] = None
    location_name: str = ""
    poi_id: Optional[str] = None
    poi_name: Optional[str] = None
    poi_type: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    approx_lat: Optional[float] = None
    approx_lng: Optional[float] = None
    approx_radius_m: Optional[float] = None


class ActiveHuntItem(LocationFields):
    uid: str
    hunter_id: Optional[str] = None
    hunter_name: Optional[str] = None
    ld_id: str
    started_at: Optional[datetime] = None


class ActiveHuntListResponse(OkResponse):
    active: List[ActiveHuntItem]


class HarvestItemOut(CamelModel):
    key: Optional[str] = None
    count: Optional[Union[int, float]] = None


class HuntLogItem(LocationFields):
    id: str
    ld_id: str
    hunter_id: str = ""
    hunter_name: str = ""
    species: str = ""
    harvest: bool = False
    notes: str = ""
    ended_reason: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    harvest_items: List[HarvestItemOut] = []
    pending_items: List[HarvestItemOut] = []


class HuntLogListResponse(OkResponse):
    logs: List[HuntLogItem]

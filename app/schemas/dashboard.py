"""
Dashboard schema
"""

from datetime import datetime

from app.schemas.common import OkResponse


class DashboardResponse(OkResponse):
    association_id: str
    association_name: str
    member_count: int
    hunts_this_month: int
    last_sync_timestamp: datetime

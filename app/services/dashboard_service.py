"""
Dashboard Service - per-association summary that always renders
"""

import structlog

from app.db.document_store import DocumentStore
from app.models.account import Account
from app.models.association import Association
from app.models.hunt_log import HuntLog
from app.schemas.auth import Identity
from app.schemas.dashboard import DashboardResponse
from app.utils.date_utils import get_current_month_start, utcnow

logger = structlog.get_logger()


class DashboardService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_dashboard(self, identity: Identity) -> DashboardResponse:
        """
        Association name, member count and hunts logged this month.

        Every sub-query is soft: a failure is logged and replaced by a default.
        """
        ld_id = identity.ld_id

        association_name = ld_id
        try:
            snapshot = await self.store.get(Association.COLLECTION, ld_id)
            if snapshot is not None:
                association_name = Association.from_snapshot(snapshot).display_name
        except Exception as e:
            logger.warning("Dashboard association lookup failed", ld_id=ld_id, error=str(e))

        member_count = 0
        try:
            member_count = await self.store.count(Account.COLLECTION, [("ldId", "==", ld_id)])
        except Exception as e:
            logger.warning("Dashboard member count failed", ld_id=ld_id, error=str(e))

        hunts_this_month = 0
        try:
            hunts_this_month = await self.store.count(
                HuntLog.COLLECTION,
                [("ldId", "==", ld_id), ("createdAt", ">=", get_current_month_start())],
            )
        except Exception as e:
            logger.warning("Dashboard hunt count failed", ld_id=ld_id, error=str(e))

        return DashboardResponse(
            association_id=ld_id,
            association_name=association_name,
            member_count=member_count,
            hunts_this_month=hunts_this_month,
            last_sync_timestamp=utcnow(),
        )

"""
Hunt Service - active sessions and completed hunt logs of an association
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog

from app.core.config import settings
from app.core.exceptions import InvalidRequestError
from app.db.document_store import DocumentStore
from app.models.active_hunt import ActiveHunt
from app.models.hunt_log import HuntLog
from app.schemas.hunt import ActiveHuntItem, HarvestItemOut, HuntLogItem
from app.utils.date_utils import parse_timestamp, to_utc

logger = structlog.get_logger()

_LOCATION_FIELDS = (
    "location_mode", "location_name", "poi_id", "poi_name", "poi_type",
    "lat", "lng", "approx_lat", "approx_lng", "approx_radius_m",
)


# Widest UTC offset in use (+14:00 / -12:00), rounded up
OFFSET_SLACK = timedelta(days=1)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: Optional[datetime]) -> datetime:
    return to_utc(value) if value is not None else _EPOCH


def _in_window(value: Optional[datetime], start: Optional[datetime], end: Optional[datetime],
               end_inclusive: bool) -> bool:
    if value is None:
        return False
    value = to_utc(value)
    if start is not None and value < start:
        return False
    if end is not None and (value > end if end_inclusive else value >= end):
        return False
    return True


def clamp_limit(limit: Optional[int]) -> int:
    """Caller-supplied page size, defaulted and capped"""
    if limit is None:
        return settings.DEFAULT_LIST_LIMIT
    return max(1, min(limit, settings.MAX_LIST_LIMIT))


def parse_bound(value: Optional[str], name: str) -> Optional[datetime]:
    """Parse a from/to query bound; unparsable input is a 400"""
    try:
        return parse_timestamp(value)
    except ValueError:
        raise InvalidRequestError(f"Invalid '{name}' date", field=name, detail=value)


def _location(record) -> dict:
    values = {name: getattr(record, name) for name in _LOCATION_FIELDS}
    if values["location_mode"] is not None:
        values["location_mode"] = values["location_mode"].value
    return values


class HuntService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_active_hunts(self, ld_id: str, limit: Optional[int] = None) -> List[ActiveHuntItem]:
        """In-progress sessions, most recently started first"""
        snapshots = await self.store.query(
            ActiveHunt.COLLECTION,
            filters=[("ldId", "==", ld_id)],
            order_by="startedAt",
            descending=True,
            limit=clamp_limit(limit),
        )
        hunts = [ActiveHunt.from_snapshot(snapshot) for snapshot in snapshots]
        return [
            ActiveHuntItem(
                uid=hunt.id,
                hunter_id=hunt.hunter_id,
                hunter_name=hunt.hunter_name,
                ld_id=hunt.ld_id,
                started_at=hunt.started_at,
                **_location(hunt),
            )
            for hunt in hunts
        ]

    async def list_hunt_logs(
        self,
        ld_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[HuntLogItem]:
        """Logs finished within [start, end] (both inclusive), newest first"""
        logs = await self.find_logs(ld_id, start=start, end=end, end_inclusive=True, limit=clamp_limit(limit))
        return [self._to_item(log) for log in logs]

    async def find_logs(
        self,
        ld_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        end_inclusive: bool = False,
        limit: Optional[int] = None,
    ) -> List[HuntLog]:
        """
        Typed hunt logs of one association whose finishedAt falls in the window, newest first

        Clients write finishedAt with any UTC offset, so stored strings only
        narrow the query (bounds widened by OFFSET_SLACK); the window itself is
        applied to the decoded, UTC-normalised timestamps.
        """
        filters = [("ldId", "==", ld_id)]
        if start is not None:
            filters.append(("finishedAt", ">=", start - OFFSET_SLACK))
        if end is not None:
            filters.append(("finishedAt", "<=", end + OFFSET_SLACK))

        snapshots = await self.store.query(HuntLog.COLLECTION, filters=filters)
        logs = [HuntLog.from_snapshot(snapshot) for snapshot in snapshots]

        if start is not None or end is not None:
            logs = [log for log in logs if _in_window(log.finished_at, start, end, end_inclusive)]

        logs.sort(key=lambda log: (log.finished_at is not None, _as_utc(log.finished_at)), reverse=True)
        if limit is not None:
            logs = logs[:limit]

        logger.debug("Hunt logs loaded", ld_id=ld_id, candidates=len(snapshots), count=len(logs))
        return logs

    @staticmethod
    def _to_item(log: HuntLog) -> HuntLogItem:
        return HuntLogItem(
            id=log.id,
            ld_id=log.ld_id,
            hunter_id=log.hunter_id,
            hunter_name=log.hunter_name,
            species=log.species,
            harvest=log.harvest,
            notes=log.notes,
            ended_reason=log.ended_reason,
            started_at=log.started_at,
            finished_at=log.finished_at,
            created_at=log.created_at,
            harvest_items=[HarvestItemOut(key=item.key, count=item.count) for item in log.harvest_items],
            pending_items=[HarvestItemOut(key=item.key, count=item.count) for item in log.pending_items],
            **_location(log),
        )

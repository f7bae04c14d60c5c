"""
Point Service - listing and de-duplicating bulk import of points of interest
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog

from app.db.document_store import DocumentStore
from app.models.point import Point, PointStatus, PointType
from app.schemas.point import PointItem
from app.utils.date_utils import utcnow
from app.utils.numbers import parse_number
from app.utils.text_keys import normalize_label, point_document_id, safe_str

logger = structlog.get_logger()

# Alternative header spellings seen in point sheets
_HEADER_ALIASES = {
    "LD ime": "ldName",
}


@dataclass
class ImportResult:
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0


def normalize_headers(row: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the trailing '*' that marks required columns in the sheet template"""
    normalized = {}
    for key, value in row.items():
        name = safe_str(key).rstrip("*").strip()
        normalized[_HEADER_ALIASES.get(name, name)] = value
    return normalized


def normalize_type(value: Any) -> Optional[PointType]:
    """None for an empty type; unknown types fall back to 'drugo'"""
    label = normalize_label(value)
    if not label:
        return None
    try:
        return PointType(label)
    except ValueError:
        return PointType.OTHER


def normalize_status(value: Any) -> PointStatus:
    status = safe_str(value).lower()
    if status in (PointStatus.ACTIVE.value, PointStatus.INACTIVE.value):
        return PointStatus(status)
    return PointStatus.UNSET


class PointService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_points(self, ld_id: str) -> List[PointItem]:
        snapshots = await self.store.query(Point.COLLECTION, filters=[("ldId", "==", ld_id)])
        points = [Point.from_snapshot(snapshot) for snapshot in snapshots]
        return [
            PointItem(
                id=point.id,
                ld_id=point.ld_id,
                ld_name=point.ld_name,
                point_id=point.point_id,
                name=point.name,
                type=point.type.value,
                lat=point.lat,
                lng=point.lng,
                status=point.status.value,
                notes=point.notes,
                source=point.source,
                created_at=point.created_at,
                updated_at=point.updated_at,
            )
            for point in points
        ]

    async def import_rows(
        self,
        rows: Iterable[Dict[str, Any]],
        ld_id: Optional[str] = None,
        only_ld_id: Optional[str] = None,
    ) -> ImportResult:
        """
        Upsert point rows keyed on (ldId, pointId)

        Args:
            rows: raw rows; headers may carry a trailing '*'
            ld_id: association every row is imported into (API import);
                when None each row's own ldId column is used (sheet import)
            only_ld_id: with ld_id=None, ignore rows of other associations

        Rows missing pointId, name, type, lat or lng are skipped. Existing
        points of the touched associations are preloaded so a point stored
        under a legacy id is updated in place rather than duplicated.
        """
        result = ImportResult()
        candidates: List[Tuple[str, Point]] = []

        for raw in rows:
            row = normalize_headers(raw)
            row_ld_id = ld_id or safe_str(row.get("ldId"))
            if not row_ld_id:
                result.skipped += 1
                continue
            if ld_id is None and only_ld_id and row_ld_id != only_ld_id:
                continue

            point = self._parse_row(row, row_ld_id)
            if point is None:
                result.skipped += 1
                continue
            candidates.append((row_ld_id, point))

        existing = await self._existing_ids({candidate_ld for candidate_ld, _ in candidates})

        now = utcnow()
        writes = []
        for row_ld_id, point in candidates:
            key = (row_ld_id, point.point_id)
            document_id = existing.get(key)
            if document_id is None:
                document_id = point_document_id(row_ld_id, point.point_id)
                existing[key] = document_id
                point.created_at = now
                result.created += 1
            else:
                result.updated += 1
            point.updated_at = now
            writes.append((Point.COLLECTION, document_id, point.to_document(), True))

        await self.store.commit_chunked(writes)
        result.processed = result.created + result.updated

        logger.info(
            "Point import finished",
            ld_id=ld_id or only_ld_id,
            processed=result.processed,
            created=result.created,
            updated=result.updated,
            skipped=result.skipped,
        )
        return result

    async def _existing_ids(self, ld_ids: Iterable[str]) -> Dict[Tuple[str, str], str]:
        existing: Dict[Tuple[str, str], str] = {}
        for ld_id in ld_ids:
            snapshots = await self.store.query(Point.COLLECTION, filters=[("ldId", "==", ld_id)])
            for snapshot in snapshots:
                point_id = safe_str(snapshot.data.get("pointId"))
                if point_id:
                    existing[(ld_id, point_id)] = snapshot.id
            logger.info("Existing points loaded", ld_id=ld_id, count=len(snapshots))
        return existing

    @staticmethod
    def _parse_row(row: Dict[str, Any], ld_id: str) -> Optional[Point]:
        point_id = safe_str(row.get("pointId"))
        name = safe_str(row.get("name"))
        point_type = normalize_type(row.get("type"))
        lat = parse_number(row.get("lat"))
        lng = parse_number(row.get("lng"))

        if not point_id or not name or point_type is None or lat is None or lng is None:
            logger.debug("Skipping point row", ld_id=ld_id, point_id=point_id, name=name)
            return None

        return Point(
            ld_id=ld_id,
            ld_name=safe_str(row.get("ldName")),
            point_id=point_id,
            name=name,
            type=point_type,
            lat=lat,
            lng=lng,
            status=normalize_status(row.get("status")),
            notes=safe_str(row.get("notes")),
            source=safe_str(row.get("source")),
        )

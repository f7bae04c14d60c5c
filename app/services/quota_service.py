"""
Quota Service - harvest-quota plan import and plan-vs-realization view.

Import: the first worksheet of an .xlsx export is walked top to bottom. A
non-empty first column names the current species (carried over to the rows
below it) unless it is a title or footer line. A row becomes a line item when
it has a class label or any figure. Figures are read positionally:

    0 species, 1 structural class, 2 plan, 3 executed (informational),
    13 total (informational), 14 percent (informational)

The plan document for (association, year) is replaced as a whole.

View: recomputed on every call from the stored plan and the hunt logs
finished within the calendar year; nothing is cached.
"""

import base64
import binascii
import zipfile
from collections import defaultdict
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence

import structlog
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.core.config import settings
from app.core.exceptions import EmptyUploadError, InvalidRequestError, InvalidYearError
from app.db.document_store import DocumentStore
from app.models.hunt_log import HuntLog
from app.models.quota_plan import PlanLineItem, PlanSource, QuotaPlan
from app.schemas.quota import QuotaView, QuotaViewRow
from app.services.hunt_service import HuntService
from app.utils.date_utils import get_year_bounds, utcnow
from app.utils.numbers import format_percent, parse_number
from app.utils.text_keys import derive_key, safe_str

logger = structlog.get_logger()

SPECIES_COLUMN = 0
CLASS_COLUMN = 1
PLAN_COLUMN = 2
EXECUTED_COLUMN = 3
TOTAL_COLUMN = 13
PERCENT_COLUMN = 14

HEADER_CELL = "divjad"
TITLE_CELL = "realizacija odvzema"
FOOTER_PREFIXES = ("datum zadnjega", "datum zadnje")
DEFAULT_CLASS_LABEL = "skupaj"

# Pending items recorded without a key are collected here
PENDING_OTHER_KEY = "PENDING_OTHER"


def check_year(year: Optional[int]) -> int:
    if year is None or not settings.PLAN_YEAR_MIN <= year <= settings.PLAN_YEAR_MAX:
        raise InvalidYearError(year, settings.PLAN_YEAR_MIN, settings.PLAN_YEAR_MAX)
    return year


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def _names_species(label: str) -> bool:
    lowered = label.lower()
    return bool(label) and lowered != TITLE_CELL and not lowered.startswith(FOOTER_PREFIXES)


def parse_plan_rows(rows: Sequence[Sequence[Any]]) -> List[PlanLineItem]:
    """Turn worksheet rows (lists of cell values) into ordered plan line items"""
    items: List[PlanLineItem] = []
    current_species = ""

    for row in rows:
        row = row or ()
        first = safe_str(_cell(row, SPECIES_COLUMN))
        class_label = safe_str(_cell(row, CLASS_COLUMN))

        if first.lower() == HEADER_CELL:
            continue
        if _names_species(first):
            current_species = first

        plan = parse_number(_cell(row, PLAN_COLUMN))
        executed = parse_number(_cell(row, EXECUTED_COLUMN))
        total = parse_number(_cell(row, TOTAL_COLUMN))
        percent = parse_number(_cell(row, PERCENT_COLUMN))

        if not current_species:
            continue
        if not class_label and plan is None and executed is None and total is None and percent is None:
            continue

        class_label = class_label or DEFAULT_CLASS_LABEL
        items.append(PlanLineItem(
            key=derive_key(current_species, class_label),
            species=current_species,
            class_label=class_label,
            plan=plan if plan is not None else 0,
            executed_excel=executed if executed is not None else 0,
            total_excel=total,
            percent_excel=percent,
        ))

    return items


def decode_upload(content_base64: str) -> bytes:
    text = safe_str(content_base64)
    if not text:
        raise EmptyUploadError("Missing contentBase64")
    try:
        content = base64.b64decode(text, validate=False)
    except (binascii.Error, ValueError):
        raise InvalidRequestError("contentBase64 is not valid base64", field="contentBase64")
    if not content:
        raise EmptyUploadError()
    return content


def read_first_sheet(content: bytes) -> List[Sequence[Any]]:
    """Cell values of the first worksheet, row by row"""
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise InvalidRequestError("Upload is not a readable .xlsx workbook", field="contentBase64", detail=str(e))

    try:
        if not workbook.worksheets:
            raise EmptyUploadError("XLSX has no sheets")
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


class QuotaService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def import_plan(self, ld_id: str, year: Optional[int], filename: Optional[str],
                          content_base64: str) -> QuotaPlan:
        """Parse the workbook and replace the stored plan for (ld_id, year)"""
        year = check_year(year)
        rows = read_first_sheet(decode_upload(content_base64))
        items = parse_plan_rows(rows)

        now = utcnow()
        plan = QuotaPlan(
            id=QuotaPlan.document_id(ld_id, year),
            ld_id=ld_id,
            year=year,
            title=QuotaPlan.default_title(ld_id, year),
            source=PlanSource(filename=safe_str(filename) or "plan.xlsx", imported_at=now),
            items=items,
            updated_at=now,
        )
        await self.store.set(QuotaPlan.COLLECTION, plan.id, plan.to_document(), merge=False)

        logger.info("Quota plan imported", ld_id=ld_id, year=year, items=len(items), rows=len(rows),
                    filename=plan.source.filename)
        return plan

    async def get_plan(self, ld_id: str, year: int) -> Optional[QuotaPlan]:
        snapshot = await self.store.get(QuotaPlan.COLLECTION, QuotaPlan.document_id(ld_id, year))
        if snapshot is None:
            return None
        return QuotaPlan.from_snapshot(snapshot)

    async def build_view(self, ld_id: str, year: Optional[int]) -> QuotaView:
        """Plan rows with executed and pending counts accumulated from the year's hunt logs"""
        year = check_year(year)
        plan = await self.get_plan(ld_id, year)

        start, end = get_year_bounds(year)
        logs = await HuntService(self.store).find_logs(ld_id, start=start, end=end)
        executed, pending = accumulate(logs)

        rows = []
        for item in plan.items if plan else []:
            done = executed.get(item.key, 0)
            rows.append(QuotaViewRow(
                key=item.key,
                species=item.species,
                class_label=item.class_label,
                plan=item.plan,
                executed=done,
                pending=pending.get(item.key, 0),
                # Pending items are not counted toward the total
                total=done,
                percent=format_percent(done, item.plan),
            ))

        return QuotaView(
            ld_id=ld_id,
            year=year,
            title=(plan.title if plan and plan.title else QuotaPlan.default_title(ld_id, year)),
            updated_at=plan.updated_at if plan else None,
            rows=rows,
        )


def accumulate(logs: Sequence[HuntLog]):
    """Sum harvest and pending counts per key; non-positive or unusable counts are ignored"""
    executed: Dict[str, Any] = defaultdict(int)
    pending: Dict[str, Any] = defaultdict(int)

    for log in logs:
        for item in log.harvest_items:
            count = item.positive_count
            if not item.key or count is None:
                continue
            executed[item.key] += count

        for item in log.pending_items:
            count = item.positive_count
            if count is None:
                continue
            pending[item.key or PENDING_OTHER_KEY] += count

    return dict(executed), dict(pending)

#!/usr/bin/env python3
"""
Bulk-load points of interest from an .xlsx sheet.

The first worksheet has a header row: ldId*, type*, name*, lat*, lng*,
notes, status, source, pointId (a trailing '*' marks required columns).
Rows are upserted keyed on (ldId, pointId), the same way as the
/ld/points/import-csv endpoint.

Usage:
    python import_ld_points_xlsx.py points_all.xlsx [ldId]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add the app directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

load_dotenv()

from openpyxl import load_workbook  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.logging_config import configure_logging  # noqa: E402
from app.db.document_store import DocumentStore  # noqa: E402
from app.services.point_service import PointService  # noqa: E402
from app.utils.text_keys import safe_str  # noqa: E402


def read_rows(path: Path):
    """Header-keyed rows of the first worksheet; empty cells become ''"""
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        values = sheet.iter_rows(values_only=True)
        header = next(values, None)
        if not header:
            return []
        names = [safe_str(cell) for cell in header]

        rows = []
        for cells in values:
            if cells is None or all(cell is None or safe_str(cell) == "" for cell in cells):
                continue
            rows.append({
                name: ("" if cell is None else cell)
                for name, cell in zip(names, cells)
                if name
            })
        return rows
    finally:
        workbook.close()


async def import_points(path: Path, only_ld_id: str):
    rows = read_rows(path)

    store = DocumentStore.from_url(settings.DATABASE_URL, batch_size=settings.WRITE_BATCH_SIZE)
    try:
        if settings.AUTO_CREATE_SCHEMA:
            await store.create_schema()
        result = await PointService(store).import_rows(rows, only_ld_id=only_ld_id or None)
    finally:
        await store.close()

    if not result.processed and not result.skipped:
        print("⚠️ No rows found for import (check ldId column / optional ld filter).")
    else:
        print("🎉 DONE")
        print({
            "totalImported": result.processed,
            "created": result.created,
            "updated": result.updated,
            "skipped": result.skipped,
        })
    return result


def main():
    parser = argparse.ArgumentParser(description="Import LD points of interest from an .xlsx sheet")
    parser.add_argument("path", help="Workbook with a header row on the first sheet")
    parser.add_argument("ld_id", nargs="?", default="", help="Only import rows of this association")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    path = Path(args.path)
    if not path.exists():
        print(f"❌ File not found: {path}")
        sys.exit(1)

    try:
        asyncio.run(import_points(path, safe_str(args.ld_id)))
    except Exception as e:
        print(f"❌ Import failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

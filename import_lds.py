#!/usr/bin/env python3
"""
Bulk-load hunting associations (LDs) from a JSON file.

The file holds an array of {id, name, region?, kmlFile?, enabled?}.
Entries are merged into the "lds" collection; createdAt is only set for
associations that did not exist yet.

Usage:
    python import_lds.py lds.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add the app directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

load_dotenv()

import structlog  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.logging_config import configure_logging  # noqa: E402
from app.db.document_store import DocumentStore  # noqa: E402
from app.models.association import Association  # noqa: E402
from app.utils.date_utils import utcnow  # noqa: E402
from app.utils.text_keys import safe_str  # noqa: E402

logger = structlog.get_logger()


def build_writes(items, existing_ids):
    """(collection, id, body, merge) writes for valid entries; invalid ones are skipped"""
    now = utcnow()
    writes = []
    skipped = 0

    for item in items:
        ld_id = safe_str(item.get("id")) if isinstance(item, dict) else ""
        name = safe_str(item.get("name")) if isinstance(item, dict) else ""
        if not ld_id or not name:
            logger.warning("Skipping invalid item (need id+name)", item=item)
            skipped += 1
            continue

        association = Association(
            id=ld_id,
            name=name,
            region=safe_str(item.get("region")),
            kml_file=safe_str(item.get("kmlFile")),
            enabled=item.get("enabled") is not False,
            updated_at=now,
            created_at=None if ld_id in existing_ids else now,
        )
        writes.append((Association.COLLECTION, ld_id, association.to_document(), True))

    return writes, skipped


async def import_lds(path: Path) -> int:
    items = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(items, list):
        raise ValueError(f"{path} must contain a JSON array")

    store = DocumentStore.from_url(settings.DATABASE_URL, batch_size=settings.WRITE_BATCH_SIZE)
    try:
        if settings.AUTO_CREATE_SCHEMA:
            await store.create_schema()

        existing_ids = {snapshot.id for snapshot in await store.list_all(Association.COLLECTION)}
        writes, skipped = build_writes(items, existing_ids)
        total = await store.commit_chunked(writes)
    finally:
        await store.close()

    print(f"✅ {total} associations imported/updated into '{Association.COLLECTION}' ({skipped} skipped)")
    return total


def main():
    parser = argparse.ArgumentParser(description="Import hunting associations from a JSON file")
    parser.add_argument("path", nargs="?", default="lds.json", help="JSON array of associations (default: lds.json)")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    path = Path(args.path)
    if not path.exists():
        print(f"❌ File not found: {path}")
        sys.exit(1)

    try:
        asyncio.run(import_lds(path))
    except Exception as e:
        print(f"❌ Import failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Document store adapter over the `documents` table.

The rest of the application only ever talks to a collection/document API:
get, set (replace or merge), delete, filtered queries, counts and atomic
write batches. Datetimes are encoded to fixed-width UTC strings on the way
in so that ordering and range filters behave like timestamps.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import structlog
from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.exceptions import ConflictError, InvalidRequestError
from app.db.database import create_engine_for_url, create_tables
from app.models.document import DocumentRecord
from app.utils.date_utils import to_stored

logger = structlog.get_logger()

Filter = Tuple[str, str, Any]

_OPERATORS = {
    "==": lambda column, value: column == value,
    "<": lambda column, value: column < value,
    "<=": lambda column, value: column <= value,
    ">": lambda column, value: column > value,
    ">=": lambda column, value: column >= value,
}


class _DeleteField:
    def __repr__(self):
        return "DELETE_FIELD"


# Merge sentinel: removes the field from the stored body
DELETE_FIELD = _DeleteField()


@dataclass
class DocumentSnapshot:
    id: str
    data: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class _WriteOp:
    kind: str  # "set" | "delete"
    collection: str
    document_id: str
    data: Optional[Dict[str, Any]] = None
    merge: bool = False


def encode_value(value: Any) -> Any:
    """Make a value JSON-storable: datetimes become fixed-width UTC strings, enums their values"""
    if isinstance(value, datetime):
        return to_stored(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def _merge(existing: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(existing)
    for key, value in patch.items():
        if value is DELETE_FIELD:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


def _strip_deletes(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not DELETE_FIELD}


def _field_expression(name: str, value: Any):
    element = DocumentRecord.data[name]
    if isinstance(value, bool):
        return element.as_boolean()
    if isinstance(value, (int, float)):
        return element.as_float()
    return element.as_string()


class WriteBatch:
    """Collects writes and applies them in a single transaction"""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._ops: List[_WriteOp] = []

    def __len__(self) -> int:
        return len(self._ops)

    def set(self, collection: str, document_id: str, data: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        self._ops.append(_WriteOp("set", collection, document_id, data, merge))
        return self

    def delete(self, collection: str, document_id: str) -> "WriteBatch":
        self._ops.append(_WriteOp("delete", collection, document_id))
        return self

    async def commit(self) -> int:
        if not self._ops:
            return 0
        async with self._store.session() as session, session.begin():
            for op in self._ops:
                await self._store._apply(session, op)
        committed = len(self._ops)
        self._ops = []
        return committed


class DocumentStore:
    """Async collection/document API; one instance per process, created at startup"""

    def __init__(self, engine: AsyncEngine, batch_size: int = 400):
        self.engine = engine
        self.batch_size = batch_size
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, database_url: str, batch_size: int = 400, echo: bool = False) -> "DocumentStore":
        return cls(create_engine_for_url(database_url, echo=echo), batch_size=batch_size)

    def session(self) -> AsyncSession:
        return self._session_factory()

    async def create_schema(self) -> None:
        await create_tables(self.engine)

    async def close(self) -> None:
        await self.engine.dispose()

    # ---------- Reads ----------

    async def get(self, collection: str, document_id: str) -> Optional[DocumentSnapshot]:
        async with self.session() as session:
            record = await session.get(DocumentRecord, (collection, document_id))
            if record is None:
                return None
            return self._snapshot(record)

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[DocumentSnapshot]:
        """
        Filtered listing of one collection

        Args:
            collection: collection name
            filters: (field, op, value) triples combined with AND
            order_by: body field to order by (missing values sort last)
            descending: order direction
            limit: maximum number of documents
        """
        stmt = select(DocumentRecord).where(self._conditions(collection, filters))

        if order_by:
            column = DocumentRecord.data[order_by].as_string()
            stmt = stmt.order_by((column.desc() if descending else column.asc()).nulls_last())
        else:
            stmt = stmt.order_by(DocumentRecord.id.asc())

        if limit is not None:
            stmt = stmt.limit(limit)

        async with self.session() as session:
            result = await session.execute(stmt)
            return [self._snapshot(record) for record in result.scalars().all()]

    async def list_all(self, collection: str) -> List[DocumentSnapshot]:
        return await self.query(collection)

    async def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentRecord)
            .where(self._conditions(collection, filters))
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            return int(result.scalar() or 0)

    # ---------- Writes ----------

    async def create(self, collection: str, document_id: str, data: Dict[str, Any]) -> DocumentSnapshot:
        """Insert a new document; an existing id is a conflict and is left untouched"""
        try:
            async with self.session() as session, session.begin():
                existing = await session.get(DocumentRecord, (collection, document_id))
                if existing is not None:
                    raise ConflictError(f"Document '{document_id}' already exists", detail=collection)
                record = DocumentRecord(
                    collection=collection,
                    id=document_id,
                    data=encode_value(_strip_deletes(data)),
                )
                session.add(record)
        except IntegrityError:
            raise ConflictError(f"Document '{document_id}' already exists", detail=collection)
        return DocumentSnapshot(id=document_id, data=record.data)

    async def set(self, collection: str, document_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        """Replace the document body, or shallow-merge top-level fields when merge=True"""
        async with self.session() as session, session.begin():
            await self._apply(session, _WriteOp("set", collection, document_id, data, merge))

    async def delete(self, collection: str, document_id: str) -> None:
        async with self.session() as session, session.begin():
            await self._apply(session, _WriteOp("delete", collection, document_id))

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    async def commit_chunked(self, writes: Iterable[Tuple[str, str, Dict[str, Any], bool]]) -> int:
        """
        Apply (collection, id, data, merge) writes in sequential batches of at most batch_size.

        Each chunk is committed before the next one starts; if a later chunk
        fails the earlier ones stay committed.
        """
        batch = self.batch()
        total = 0
        for collection, document_id, data, merge in writes:
            batch.set(collection, document_id, data, merge=merge)
            if len(batch) >= self.batch_size:
                committed = await batch.commit()
                total += committed
                logger.info("Committed write batch", size=committed, total=total)

        if len(batch):
            committed = await batch.commit()
            total += committed
            logger.info("Committed final write batch", size=committed, total=total)
        return total

    # ---------- Internals ----------

    async def _apply(self, session: AsyncSession, op: _WriteOp) -> None:
        if op.kind == "delete":
            await session.execute(
                delete(DocumentRecord).where(
                    DocumentRecord.collection == op.collection,
                    DocumentRecord.id == op.document_id,
                )
            )
            return

        record = await session.get(DocumentRecord, (op.collection, op.document_id))
        if record is None:
            session.add(DocumentRecord(
                collection=op.collection,
                id=op.document_id,
                data=encode_value(_strip_deletes(op.data or {})),
            ))
            # Flush so a later op in the same batch sees this document
            await session.flush()
            return

        if op.merge:
            body = _merge(record.data or {}, encode_value(op.data or {}))
        else:
            body = encode_value(_strip_deletes(op.data or {}))
        # Reassign so the JSON column is marked dirty
        record.data = body

    def _conditions(self, collection: str, filters: Sequence[Filter]):
        conditions = [DocumentRecord.collection == collection]
        for name, op, value in filters:
            if op not in _OPERATORS:
                raise InvalidRequestError(f"Unsupported filter operator '{op}'")
            value = encode_value(value)
            conditions.append(_OPERATORS[op](_field_expression(name, value), value))
        return and_(*conditions)

    @staticmethod
    def _snapshot(record: DocumentRecord) -> DocumentSnapshot:
        return DocumentSnapshot(
            id=record.id,
            data=dict(record.data or {}),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

"""
Typed stored records.

Every collection body is decoded through exactly one model. Stored field
names are camelCase because mobile clients write some collections directly.
Decoding fails closed: a body that does not match raises DocumentDecodeError.
"""

from typing import Any, ClassVar, Dict, Union

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from app.core.exceptions import DocumentDecodeError
from app.db.document_store import DocumentSnapshot, encode_value

Number = Union[int, float]


class StoredModel(BaseModel):
    """Base for collection records"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    COLLECTION: ClassVar[str] = ""

    id: str = ""

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot):
        return cls.decode(snapshot.id, snapshot.data)

    @classmethod
    def decode(cls, document_id: str, data: Dict[str, Any]):
        try:
            return cls.model_validate({**data, "id": document_id})
        except ValidationError as exc:
            reasons = "; ".join(
                f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in exc.errors()
            )
            raise DocumentDecodeError(cls.COLLECTION, document_id, reasons)

    def to_document(self) -> Dict[str, Any]:
        """Body to store (camelCase, no id, no unset optionals)"""
        return encode_value(self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True))

"""
Stored document row: one JSON body per (collection, id)
"""

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func

from app.db.database import Base


class DocumentRecord(Base):
    __tablename__ = "documents"

    collection = Column(String(100), primary_key=True)
    id = Column(String(255), primary_key=True)

    data = Column(JSON, nullable=False, default=dict)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<DocumentRecord {self.collection}/{self.id}>"

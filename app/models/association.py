"""
Hunting association (collection "lds"); loaded offline, read-mostly
"""

from datetime import datetime
from typing import Optional

from app.models.base import StoredModel


class Association(StoredModel):
    COLLECTION = "lds"

    name: Optional[str] = None
    title: Optional[str] = None
    region: str = ""
    kml_file: str = ""
    enabled: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return (self.name or self.title or self.id).strip() or self.id

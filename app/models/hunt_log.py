"""
Completed hunts (collection "hunt_logs"); written by the mobile client, never updated
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from app.models.active_hunt import LocatedModel
from app.models.base import Number
from app.utils.numbers import parse_number


class HarvestItem(BaseModel):
    """One recorded outcome; count stays None when the client wrote something unusable"""

    model_config = ConfigDict(extra="ignore")

    key: Optional[str] = None
    count: Optional[Number] = None

    @field_validator("key", mode="before")
    @classmethod
    def key_as_text(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("count", mode="before")
    @classmethod
    def count_as_number(cls, value):
        return parse_number(value)

    @property
    def positive_count(self) -> Optional[Number]:
        if self.count is None or self.count <= 0:
            return None
        return self.count


class HuntLog(LocatedModel):
    COLLECTION = "hunt_logs"

    ld_id: str
    hunter_id: str = ""
    hunter_name: str = ""
    species: str = ""
    harvest: bool = False
    notes: str = ""
    ended_reason: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    harvest_items: List[HarvestItem] = []
    pending_items: List[HarvestItem] = []

    @field_validator("harvest_items", "pending_items", mode="before")
    @classmethod
    def missing_list_is_empty(cls, value):
        return [] if value is None else value

    @model_validator(mode="after")
    def consistent(self):
        if self.started_at and self.finished_at and self.finished_at < self.started_at:
            raise ValueError("finishedAt is before startedAt")
        self._check_location()
        return self

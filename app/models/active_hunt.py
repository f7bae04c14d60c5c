"""
In-progress hunt sessions (collection "active_hunts") and the shared location fields
"""

import enum
from datetime import datetime
from typing import Optional

from pydantic import model_validator

from app.models.base import StoredModel


class LocationMode(str, enum.Enum):
    EXACT = "exact"                # exact coordinates, optionally at a point of interest
    APPROX = "approx"              # approximate coordinates + radius
    PRIVATE_TEXT = "private_text"  # free text only


class LocatedModel(StoredModel):
    location_mode: Optional[LocationMode] = None
    location_name: str = ""
    poi_id: Optional[str] = None
    poi_name: Optional[str] = None
    poi_type: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    approx_lat: Optional[float] = None
    approx_lng: Optional[float] = None
    approx_radius_m: Optional[float] = None

    def _check_location(self) -> None:
        exact = self.lat is not None or self.lng is not None
        approx = any(v is not None for v in (self.approx_lat, self.approx_lng, self.approx_radius_m))

        if self.location_mode == LocationMode.EXACT:
            if self.lat is None or self.lng is None:
                raise ValueError("exact location needs lat and lng")
            if approx:
                raise ValueError("exact location must not carry approximate coordinates")
        elif self.location_mode == LocationMode.APPROX:
            if None in (self.approx_lat, self.approx_lng, self.approx_radius_m):
                raise ValueError("approximate location needs approxLat, approxLng and approxRadiusM")
            if exact:
                raise ValueError("approximate location must not carry exact coordinates")
        elif self.location_mode == LocationMode.PRIVATE_TEXT:
            if exact or approx:
                raise ValueError("private location must not carry coordinates")


class ActiveHunt(LocatedModel):
    COLLECTION = "active_hunts"

    hunter_id: Optional[str] = None
    hunter_name: Optional[str] = None
    ld_id: str
    location_mode: LocationMode = LocationMode.PRIVATE_TEXT
    started_at: Optional[datetime] = None

    @model_validator(mode="after")
    def one_location_mode(self):
        self._check_location()
        return self

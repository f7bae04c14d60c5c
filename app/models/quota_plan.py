"""
Harvest-quota plan (collection "odvzem_plans", one document per association and year)
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.base import Number, StoredModel


class PlanLineItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    key: str
    species: str
    class_label: str
    plan: Number = 0
    # Informational figures copied from the spreadsheet
    executed_excel: Number = 0
    total_excel: Optional[Number] = None
    percent_excel: Optional[Number] = None


class PlanSource(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    filename: str = "plan.xlsx"
    imported_at: Optional[datetime] = None


class QuotaPlan(StoredModel):
    COLLECTION = "odvzem_plans"

    ld_id: str
    year: int
    title: str = ""
    source: PlanSource = PlanSource()
    items: List[PlanLineItem] = []
    updated_at: Optional[datetime] = None

    @staticmethod
    def document_id(ld_id: str, year: int) -> str:
        return f"{ld_id}_{year}"

    @staticmethod
    def default_title(ld_id: str, year: int) -> str:
        return f"Realizacija odvzema – {ld_id}, {year}"

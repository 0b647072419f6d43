from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ScheduleFiltersModel(BaseModel):
    query: str = ""
    shift: str = "all"
    position: str = "all"
    name: str = "all"
    date: Optional[str] = None
    sort_field: str = "date"
    ascending: bool = True
    view_year: Optional[int] = None
    view_month: Optional[int] = Field(default=None, ge=1, le=12)


class ProductivityFiltersModel(BaseModel):
    shift: str = "all"
    sort_field: str = "shift"
    ascending: bool = True
    selected_names: List[str] = Field(default_factory=list)


class IngestResultModel(BaseModel):
    status: str
    message: str
    loaded: int = 0
    total_rows: int = 0
    dropped: int = 0
    warnings: List[str] = Field(default_factory=list)


class ExcludedSolutionsModel(BaseModel):
    labels: List[str] = Field(default_factory=list)


class MetaListResponse(BaseModel):
    values: List[str]

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class DashboardFiltersModel(BaseModel):
    year: Optional[int] = None
    school_type: Optional[str] = None
    category: Optional[str] = None
    search: str = ""


class LoadStatusResponse(BaseModel):
    kind: str
    message: str
    count: int = 0


class MetaYearsResponse(BaseModel):
    years: List[int]


class MetaListResponse(BaseModel):
    values: List[str]

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class DashboardFilters:
    year: Optional[int] = None
    school_type: Optional[str] = None
    category: Optional[str] = None
    search: str = ""

    @property
    def is_empty(self) -> bool:
        return self.year is None and not self.school_type and not self.category and not self.search.strip()


def _as_int(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(str(value).strip())
    except Exception:
        return None
    if not f.is_integer():
        return None
    return int(f)


def _as_label(value: object) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def normalize_filters(raw: dict) -> DashboardFilters:
    return DashboardFilters(
        year=_as_int(raw.get("year")),
        school_type=_as_label(raw.get("school_type", raw.get("type"))),
        category=_as_label(raw.get("category")),
        search=str(raw.get("search") or ""),
    )


def apply_filters(records: pd.DataFrame, filters: DashboardFilters) -> pd.DataFrame:
    """Keep rows matching every active equality filter."""
    mask = pd.Series(True, index=records.index)
    if filters.year is not None:
        mask &= (records["year"] == filters.year).fillna(False).astype(bool)
    if filters.school_type:
        mask &= records["type"] == filters.school_type
    if filters.category:
        mask &= records["category"] == filters.category
    return records[mask].reset_index(drop=True)


def stringify(value: object) -> str:
    """String form of a field value for search; integral numbers have no decimal point."""
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def apply_search(records: pd.DataFrame, term: str) -> pd.DataFrame:
    """Keep rows where any field contains ``term``, case-insensitively."""
    q = (term or "").lower()
    if not q or records.empty:
        return records.reset_index(drop=True)
    text = records.astype(object).map(stringify)
    mask = text.apply(lambda s: s.str.lower().str.contains(q, regex=False)).any(axis=1)
    return records[mask].reset_index(drop=True)


def filter_records(records: pd.DataFrame, filters: DashboardFilters) -> pd.DataFrame:
    """Dropdown filters and search combined with AND over the canonical records."""
    return apply_search(apply_filters(records, filters), filters.search)

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import pandas as pd

from schoolstats.settings import DEFAULT_SETTINGS, DashboardSettings


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return math.ceil(count / page_size)


def normalize_page_size(value: object, settings: DashboardSettings = DEFAULT_SETTINGS) -> int:
    try:
        size = int(value)  # type: ignore[arg-type]
    except Exception:
        return settings.default_page_size
    if size not in settings.page_size_choices:
        return settings.default_page_size
    return size


@dataclass(frozen=True)
class Page:
    rows: pd.DataFrame
    page: int
    page_size: int
    total_pages: int
    total_rows: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def label(self) -> str:
        return f"{self.page} / {self.total_pages}"

    def meta(self) -> dict:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "total_rows": self.total_rows,
            "has_prev": self.has_prev,
            "has_next": self.has_next,
            "label": self.label,
        }


def paginate(records: pd.DataFrame, page: int, page_size: int) -> Page:
    """Slice ``records`` to one 1-based page. Pages past the end are empty."""
    pages = total_pages(len(records), page_size)
    page = max(1, int(page))
    start = (page - 1) * page_size
    rows = records.iloc[start : start + page_size].reset_index(drop=True)
    return Page(rows=rows, page=page, page_size=page_size, total_pages=pages, total_rows=len(records))


@dataclass(frozen=True)
class PageState:
    page: int = 1
    page_size: int = DEFAULT_SETTINGS.default_page_size

    def next(self, pages: int) -> "PageState":
        if self.page >= pages:
            return self
        return replace(self, page=self.page + 1)

    def prev(self) -> "PageState":
        if self.page <= 1:
            return self
        return replace(self, page=self.page - 1)

    def reset(self) -> "PageState":
        return replace(self, page=1)

    def with_page_size(self, page_size: int) -> "PageState":
        return PageState(page=1, page_size=page_size)

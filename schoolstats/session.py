"""Per-user dashboard state.

A session owns the canonical records, the active filters, the page state and the
chart specs of the last render. A load either replaces all of them at once or
leaves them untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from schoolstats.data import label_options, load_dashboard_data, load_records, prepare_context, year_options
from schoolstats.errors import EmptyDatasetError, LoadError
from schoolstats.filters import DashboardFilters, normalize_filters
from schoolstats.metrics_overview import compute_overview
from schoolstats.metrics_table import compute_table
from schoolstats.metrics_teachers import compute_teachers
from schoolstats.metrics_trends import compute_trends
from schoolstats.normalize import empty_records
from schoolstats.pagination import PageState, normalize_page_size, total_pages
from schoolstats.settings import DEFAULT_SETTINGS, DashboardSettings


logger = logging.getLogger(__name__)

FILTER_FIELDS = ("year", "school_type", "category")


@dataclass(frozen=True)
class LoadStatus:
    kind: str = "idle"  # idle | loaded | empty | error
    message: str = ""
    count: int = 0
    error_type: str = ""

    @property
    def ok(self) -> bool:
        return self.kind == "loaded"


class DashboardSession:
    def __init__(self, settings: DashboardSettings = DEFAULT_SETTINGS):
        self.settings = settings
        self.records: pd.DataFrame = empty_records()
        self.filters = DashboardFilters()
        self.pager = PageState(page_size=settings.default_page_size)
        self.status = LoadStatus()
        self.charts: Dict[str, Any] = {}

    @property
    def has_data(self) -> bool:
        return not self.records.empty

    # ----- loading -----
    def load(self, text: Union[str, bytes]) -> LoadStatus:
        try:
            records = load_records(text)
        except EmptyDatasetError as exc:
            logger.info("empty dataset: %s", exc)
            self.status = LoadStatus(kind="empty", message=str(exc), error_type=type(exc).__name__)
            return self.status
        except LoadError as exc:
            logger.warning("dataset load failed: %s", exc)
            self.status = LoadStatus(kind="error", message=str(exc), error_type=type(exc).__name__)
            return self.status
        return self._commit(records)

    def seed_from_data_dir(self) -> LoadStatus:
        """Load the newest dataset file in ``DATA_DIR``; with no files the session is left as is."""
        try:
            data = load_dashboard_data()
        except (LoadError, OSError) as exc:
            logger.warning("dataset file load failed: %s", exc)
            self.status = LoadStatus(kind="error", message=str(exc), error_type=type(exc).__name__)
            return self.status
        if data["records"].empty:
            return self.status
        logger.info("seeded from %s", data["files"][-1])
        return self._commit(data["records"])

    @classmethod
    def from_data_dir(cls, settings: DashboardSettings = DEFAULT_SETTINGS) -> DashboardSession:
        session = cls(settings)
        session.seed_from_data_dir()
        return session

    def _commit(self, records: pd.DataFrame) -> LoadStatus:
        self.records = records
        self.filters = DashboardFilters()
        self.pager = PageState(page_size=self.pager.page_size)
        self.charts = {}
        self.status = LoadStatus(kind="loaded", message=f"✓ {len(records)}件のデータを読み込みました", count=len(records))
        return self.status

    # ----- filter options -----
    def year_options(self) -> List[int]:
        return year_options(self.records)

    def type_options(self) -> List[str]:
        return label_options(self.records, "type")

    def category_options(self) -> List[str]:
        return label_options(self.records, "category")

    # ----- events -----
    def set_filter(self, field: str, value: object) -> DashboardFilters:
        if field not in FILTER_FIELDS:
            raise ValueError(f"unknown filter field: {field!r}")
        raw = {**self._filters_raw(), field: value}
        self.filters = normalize_filters(raw)
        self.pager = self.pager.reset()
        return self.filters

    def set_search(self, term: Optional[str]) -> DashboardFilters:
        self.filters = replace(self.filters, search=term or "")
        self.pager = self.pager.reset()
        return self.filters

    def set_page_size(self, value: object) -> PageState:
        self.pager = self.pager.with_page_size(normalize_page_size(value, self.settings))
        return self.pager

    def next_page(self) -> PageState:
        self.pager = self.pager.next(self.total_pages())
        return self.pager

    def prev_page(self) -> PageState:
        self.pager = self.pager.prev()
        return self.pager

    def _filters_raw(self) -> Dict[str, Any]:
        return {
            "year": self.filters.year,
            "school_type": self.filters.school_type,
            "category": self.filters.category,
            "search": self.filters.search,
        }

    # ----- views -----
    def context(self) -> Dict[str, Any]:
        return prepare_context(self.filters, self.records)

    @property
    def filtered(self) -> pd.DataFrame:
        return self.context()["filtered"]

    def total_pages(self) -> int:
        return total_pages(len(self.filtered), self.pager.page_size)

    def render(self) -> Dict[str, Any]:
        """Recompute every view; chart specs from the previous render are dropped."""
        ctx = self.context()
        overview = compute_overview(self.filters, ctx)
        trends = compute_trends(self.filters, ctx)
        teachers = compute_teachers(self.filters, ctx)
        table = compute_table(self.filters, ctx, page=self.pager.page, page_size=self.pager.page_size)
        self.charts = {**overview["charts"], **trends["charts"], **teachers["charts"]}
        return {
            "status": {"kind": self.status.kind, "message": self.status.message},
            "overview": overview,
            "trends": trends,
            "teachers": teachers,
            "table": table,
            "charts": self.charts,
        }

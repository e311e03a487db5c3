from __future__ import annotations

import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from schoolstats.errors import EmptyDatasetError, ParseError
from schoolstats.filters import DashboardFilters, filter_records, normalize_filters
from schoolstats.normalize import empty_records, normalize_entries
from schoolstats.settings import DATA_DIR, FILE_GLOB, YEAR_SUFFIX


logger = logging.getLogger(__name__)


def get_source_files() -> List[Path]:
    return sorted(DATA_DIR.glob(FILE_GLOB))


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def parse_json(text: Union[str, bytes]) -> object:
    """Parse a JSON document. Bytes are decoded as UTF-8 (a BOM is tolerated)."""
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"JSONの読み込みに失敗しました: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"JSONの読み込みに失敗しました: {exc}") from exc


def load_records(text: Union[str, bytes]) -> pd.DataFrame:
    """Parse and normalize a dataset document.

    Raises:
        ParseError: the text is not valid JSON.
        FormatError: the top level is not an array.
        EmptyDatasetError: no records remain after normalization.
    """
    records = normalize_entries(parse_json(text))
    if records.empty:
        raise EmptyDatasetError("データの読み込みに失敗しました: レコードがありません")
    logger.info("loaded %d records", len(records))
    return records


def load_dataset_file(path: Union[str, Path]) -> pd.DataFrame:
    path = Path(path)
    return _load_dataset_file_cached(str(path), path.stat().st_mtime).copy()


@lru_cache(maxsize=4)
def _load_dataset_file_cached(path: str, mtime: float) -> pd.DataFrame:
    return load_records(Path(path).read_bytes())


def load_dashboard_data() -> Dict[str, object]:
    """Load the newest dataset file next to the package, if there is one."""
    files = get_source_files()
    if not files:
        return {"files": [], "years": [], "records": empty_records()}
    latest = files[-1]
    records = load_dataset_file(latest)
    return {"files": [name for name, _ in file_signature(files)], "years": year_options(records), "records": records}


# ---------------- Filter options ----------------
def year_options(records: pd.DataFrame) -> List[int]:
    if records.empty:
        return []
    return sorted(int(y) for y in records["year"].dropna().unique())


def label_options(records: pd.DataFrame, column: str) -> List[str]:
    """Distinct non-blank labels in first-seen order."""
    if records.empty or column not in records.columns:
        return []
    return [str(v) for v in records[column].drop_duplicates().tolist() if str(v)]


def year_label(year: object) -> str:
    if year is None or pd.isna(year):
        return ""
    return f"{int(year)}{YEAR_SUFFIX}"


# ---------------- Formatting ----------------
def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_count(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    v = float(value)
    if v.is_integer():
        return f"{int(v):,}"
    return f"{v:,.1f}"


def format_percent(value: object, decimals: int = 1) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{float(value):.{decimals}f}%"


# ---------------- Public API (Streamlit parity + FastAPI use) ----------------
def prepare_context(filters: dict | DashboardFilters, records: pd.DataFrame) -> Dict[str, object]:
    available_years = year_options(records)
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    filtered = filter_records(records, filt)
    return {
        "filters": filt,
        "records": records,
        "filtered": filtered,
        "years": available_years,
        "types": label_options(records, "type"),
        "categories": label_options(records, "category"),
    }

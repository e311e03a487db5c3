"""Record normalization.

Raw entries are loosely structured JSON objects:

    {"year": 2020, "school": 5, "type": "公立", "category": "小学校",
     "population": {"teacher": 30,
                    "sutudent": {"data": [{"type": "男", "population": 100},
                                          {"type": "女", "population": null}]}}}

Rows where both ``type`` and ``category`` are the total label repeat data that
is already present in the other rows, so they are dropped before anything else.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

import pandas as pd

from schoolstats.errors import FormatError
from schoolstats.settings import FEMALE_LABEL, MALE_LABEL, TOTAL_LABEL


logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "year",
    "school",
    "type",
    "category",
    "teacher",
    "male_student",
    "female_student",
    "total_student",
]
COUNT_COLUMNS = ["school", "teacher", "male_student", "female_student"]

# The source data spells the breakdown key "sutudent".
STUDENT_KEYS = ("sutudent", "student")

# Larger magnitudes are treated as missing so column sums stay within int64.
MAX_ABS_VALUE = 10**12


def is_duplicate_total(entry: object) -> bool:
    if not isinstance(entry, dict):
        return False
    return entry.get("type") == TOTAL_LABEL and entry.get("category") == TOTAL_LABEL


def _get(obj: object, key: str) -> Any:
    if not isinstance(obj, dict):
        return None
    return obj.get(key)


def _student_breakdown(population: object) -> List[Dict[str, Any]]:
    for key in STUDENT_KEYS:
        data = _get(_get(population, key), "data")
        if isinstance(data, list):
            return [d for d in data if isinstance(d, dict)]
    return []


def find_gender_count(population: object, label: str) -> Any:
    """Return the raw count of the first breakdown item whose type is ``label``."""
    for item in _student_breakdown(population):
        if item.get("type") == label:
            return item.get("population")
    return None


def _as_label(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _scalar(value: object) -> Any:
    """Numeric value of a raw field, or None when it is not a usable number."""
    # bool is an int subclass; a flag is not a count.
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if abs(value) > MAX_ABS_VALUE:
        return None
    return value


def _as_count_series(values: List[Any]) -> pd.Series:
    cleaned = [_scalar(v) for v in values]
    s = pd.to_numeric(pd.Series(cleaned, dtype=object), errors="coerce").fillna(0)
    if s.empty or (s % 1 == 0).all():
        return s.astype("int64")
    return s.astype(float)


def _as_year_series(values: List[Any]) -> pd.Series:
    cleaned = [_scalar(v) for v in values]
    s = pd.to_numeric(pd.Series(cleaned, dtype=object), errors="coerce")
    s = s.where(s % 1 == 0)
    return s.astype("Int64")


def normalize_entries(entries: object) -> pd.DataFrame:
    """Normalize raw entries into canonical records.

    Output order follows input order after duplicate total rows are removed.
    ``total_student`` is always recomputed from the gender counts.

    Raises:
        FormatError: ``entries`` is not a list.
    """
    if not isinstance(entries, list):
        raise FormatError(f"JSON must be an array of objects, got {type(entries).__name__}")

    kept = [e for e in entries if not is_duplicate_total(e)]
    dropped = len(entries) - len(kept)
    if dropped:
        logger.debug("dropped %d duplicate total rows", dropped)

    raw: Dict[str, List[Any]] = {c: [] for c in ["year", "type", "category"] + COUNT_COLUMNS}
    for entry in kept:
        entry = entry if isinstance(entry, dict) else {}
        population: Optional[object] = entry.get("population")
        raw["year"].append(entry.get("year"))
        raw["school"].append(entry.get("school"))
        raw["type"].append(_as_label(entry.get("type")))
        raw["category"].append(_as_label(entry.get("category")))
        raw["teacher"].append(_get(population, "teacher"))
        raw["male_student"].append(find_gender_count(population, MALE_LABEL))
        raw["female_student"].append(find_gender_count(population, FEMALE_LABEL))

    df = pd.DataFrame(
        {
            "year": _as_year_series(raw["year"]),
            "school": _as_count_series(raw["school"]),
            "type": pd.Series(raw["type"], dtype=object),
            "category": pd.Series(raw["category"], dtype=object),
            "teacher": _as_count_series(raw["teacher"]),
            "male_student": _as_count_series(raw["male_student"]),
            "female_student": _as_count_series(raw["female_student"]),
        }
    )
    df["total_student"] = df["male_student"] + df["female_student"]
    return df[RECORD_COLUMNS]


def empty_records() -> pd.DataFrame:
    return normalize_entries([])

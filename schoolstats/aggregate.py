"""Aggregations behind every dashboard view.

All functions are pure: they take the current (filtered) records and return
fresh plain-Python values. Nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd

from schoolstats.data import round_half_up


GROUP_KEYS = ("category", "type", "type_category")
VALUE_COLUMNS = ("total_student", "teacher")
TYPE_CATEGORY_SEP = " - "


def _num(value: Any) -> float | int:
    """Plain Python number; integral sums stay ints."""
    v = float(value)
    return int(v) if v.is_integer() else v


def _sum(records: pd.DataFrame, column: str) -> float | int:
    if records.empty:
        return 0
    return _num(records[column].sum())


def summary_totals(records: pd.DataFrame, *, decimals: int = 1) -> Dict[str, Any]:
    total = _sum(records, "total_student")
    male = _sum(records, "male_student")
    male_pct = round_half_up(male / total * 100, decimals) if total else 0.0
    return {
        "schools": _sum(records, "school"),
        "teachers": _sum(records, "teacher"),
        "total_students": total,
        "male_students": male,
        "female_students": _sum(records, "female_student"),
        "male_pct": male_pct,
    }


def _group_labels(records: pd.DataFrame, key: str) -> pd.Series:
    if key == "type_category":
        return records["type"].astype(str) + TYPE_CATEGORY_SEP + records["category"].astype(str)
    return records[key].astype(str)


def group_sum(records: pd.DataFrame, key: str, value: str) -> Dict[str, float | int]:
    """Sum ``value`` per ``key`` label, keeping first-seen key order."""
    if key not in GROUP_KEYS:
        raise ValueError(f"unknown group key: {key!r}")
    if value not in VALUE_COLUMNS:
        raise ValueError(f"unknown value column: {value!r}")
    if records.empty:
        return {}
    labels = _group_labels(records, key)
    sums = records[value].groupby(labels, sort=False).sum()
    return {str(k): _num(v) for k, v in sums.items()}


def year_series(records: pd.DataFrame) -> List[Dict[str, Any]]:
    """Per-year male/female/total sums, ascending by year. Rows without a year are skipped."""
    if records.empty:
        return []
    dated = records.dropna(subset=["year"])
    if dated.empty:
        return []
    grouped = (
        dated.groupby(dated["year"].astype(int))[["male_student", "female_student", "total_student"]]
        .sum()
        .sort_index()
    )
    return [
        {
            "year": int(year),
            "male": _num(row["male_student"]),
            "female": _num(row["female_student"]),
            "total": _num(row["total_student"]),
        }
        for year, row in grouped.iterrows()
    ]


def pct_change(prev: float, curr: float) -> Optional[float]:
    """Percentage change from ``prev`` to ``curr``; None when ``prev`` is 0."""
    if not prev:
        return None
    return (curr - prev) / prev * 100


def change_rates(series: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Year-over-year change between each pair of adjacent years in ``series``."""
    out: List[Dict[str, Any]] = []
    for prev, curr in zip(series, series[1:]):
        out.append(
            {
                "label": f"{prev['year']}→{curr['year']}",
                "prev_year": prev["year"],
                "curr_year": curr["year"],
                "male": pct_change(prev["male"], curr["male"]),
                "female": pct_change(prev["female"], curr["female"]),
                "total": pct_change(prev["total"], curr["total"]),
            }
        )
    return out

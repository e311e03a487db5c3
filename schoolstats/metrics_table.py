from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from schoolstats.data import format_count, year_label
from schoolstats.filters import DashboardFilters
from schoolstats.pagination import paginate

DISPLAY_COLUMNS = {
    "year": "年度",
    "type": "設置種別",
    "category": "学校種別",
    "school": "学校数",
    "teacher": "教員数",
    "male_student": "男",
    "female_student": "女",
    "total_student": "計",
}


def records_payload(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows as plain dicts; missing values become None."""
    if df.empty:
        return []
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def display_rows(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=list(DISPLAY_COLUMNS.values()))
    out = pd.DataFrame(
        {
            "year": df["year"].apply(year_label),
            "type": df["type"],
            "category": df["category"],
            "school": df["school"].apply(format_count),
            "teacher": df["teacher"].apply(format_count),
            "male_student": df["male_student"].apply(format_count),
            "female_student": df["female_student"].apply(format_count),
            "total_student": df["total_student"].apply(format_count),
        }
    )
    return out.rename(columns=DISPLAY_COLUMNS)


def compute_table(filters: DashboardFilters, ctx: Dict[str, Any], *, page: int = 1, page_size: int = 25) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    current = paginate(df, page, page_size)
    return {
        "filters": asdict(filters),
        "page": current.meta(),
        "rows": records_payload(current.rows),
        "display_rows": display_rows(current.rows).to_dict(orient="records"),
    }

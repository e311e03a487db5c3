from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from schoolstats.aggregate import group_sum
from schoolstats.charts import TEACHER_COLORS, palette, to_vega_spec
from schoolstats.filters import DashboardFilters


def compute_teachers(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    by_type_category = group_sum(df, "type_category", "teacher")

    charts: Dict[str, Any] = {}
    if by_type_category:
        labels = list(by_type_category.keys())
        bar_df = pd.DataFrame({"label": labels, "teachers": list(by_type_category.values())})
        bar = (
            alt.Chart(bar_df)
            .mark_bar()
            .encode(
                y=alt.Y("label:N", title=None, sort=None),
                x=alt.X("teachers:Q", title="教員数", axis=alt.Axis(format=",")),
                color=alt.Color("label:N", scale=alt.Scale(domain=labels, range=palette(TEACHER_COLORS, len(labels))), legend=None),
                tooltip=[alt.Tooltip("label:N", title="設置種別 - 学校種別"), alt.Tooltip("teachers:Q", title="教員数", format=",")],
            )
            .properties(height=max(120, 32 * len(labels)))
        )
        charts["teacher"] = to_vega_spec(bar)

    return {"filters": asdict(filters), "teachers_by_type_category": by_type_category, "charts": charts}

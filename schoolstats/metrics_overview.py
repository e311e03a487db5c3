from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from schoolstats.aggregate import group_sum, summary_totals
from schoolstats.charts import CATEGORY_COLORS, GENDER_COLORS, TYPE_COLORS, palette, to_vega_spec
from schoolstats.data import format_count, format_percent
from schoolstats.filters import DashboardFilters
from schoolstats.settings import DEFAULT_SETTINGS, FEMALE_LABEL, MALE_LABEL


def _frame(sums: Dict[str, Any]) -> pd.DataFrame:
    return pd.DataFrame({"label": list(sums.keys()), "value": list(sums.values())})


def _arc_chart(df: pd.DataFrame, colors: list, *, inner_radius: int = 0) -> alt.Chart:
    labels = df["label"].tolist()
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=inner_radius, stroke="#fff", strokeWidth=2)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color(
                "label:N",
                scale=alt.Scale(domain=labels, range=palette(colors, len(labels))),
                sort=labels,
                legend=alt.Legend(orient="bottom", title=None),
            ),
            tooltip=[alt.Tooltip("label:N", title="区分"), alt.Tooltip("value:Q", title="生徒数", format=",")],
        )
        .properties(height=DEFAULT_SETTINGS.chart_height)
    )


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    summary = summary_totals(df, decimals=DEFAULT_SETTINGS.percent_decimals)
    gender = {MALE_LABEL: summary["male_students"], FEMALE_LABEL: summary["female_students"]}

    if df.empty:
        return {
            "filters": asdict(filters),
            "summary": summary,
            "display": {},
            "gender": gender,
            "category_students": {},
            "type_students": {},
            "charts": {},
        }

    by_category = group_sum(df, "category", "total_student")
    by_type = group_sum(df, "type", "total_student")

    category_df = _frame(by_category)
    category_labels = category_df["label"].tolist()
    category_bar = (
        alt.Chart(category_df)
        .mark_bar()
        .encode(
            x=alt.X("label:N", title=None, sort=None, axis=alt.Axis(labelAngle=0)),
            y=alt.Y("value:Q", title="生徒数", axis=alt.Axis(format=",")),
            color=alt.Color(
                "label:N",
                scale=alt.Scale(domain=category_labels, range=palette(CATEGORY_COLORS, len(category_labels))),
                legend=None,
            ),
            tooltip=[alt.Tooltip("label:N", title="学校種別"), alt.Tooltip("value:Q", title="生徒数", format=",")],
        )
        .properties(height=DEFAULT_SETTINGS.chart_height)
    )

    charts = {
        "gender": to_vega_spec(_arc_chart(_frame(gender), GENDER_COLORS, inner_radius=50)),
        "category": to_vega_spec(category_bar),
        "type": to_vega_spec(_arc_chart(_frame(by_type), TYPE_COLORS)),
    }

    return {
        "filters": asdict(filters),
        "summary": summary,
        "display": {
            "schools": format_count(summary["schools"]),
            "teachers": format_count(summary["teachers"]),
            "total_students": format_count(summary["total_students"]),
            "gender_ratio": f"{MALE_LABEL} {format_percent(summary['male_pct'], DEFAULT_SETTINGS.percent_decimals)}",
        },
        "gender": gender,
        "category_students": by_category,
        "type_students": by_type,
        "charts": charts,
    }

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from schoolstats.aggregate import change_rates, year_series
from schoolstats.charts import CHANGE_RATE_COLORS, TREND_COLORS, to_vega_spec
from schoolstats.data import year_label
from schoolstats.filters import DashboardFilters
from schoolstats.settings import DEFAULT_SETTINGS, FEMALE_LABEL, MALE_LABEL

CHANGE_RATE_SERIES = {
    "male": "男生徒数変化率",
    "female": "女生徒数変化率",
    "total": "計の変化率",
}


def compute_trends(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    series = year_series(df)
    rates = change_rates(series)

    charts: Dict[str, Any] = {}
    if series:
        trend = pd.DataFrame(
            [
                {"year": row["year"], "year_label": year_label(row["year"]), "gender": label, "students": row[key]}
                for row in series
                for label, key in [(FEMALE_LABEL, "female"), (MALE_LABEL, "male")]
            ]
        )
        year_order = [year_label(row["year"]) for row in series]
        trend_hover = alt.selection_point(fields=["gender"], on="mouseover", empty="all")
        line = (
            alt.Chart(trend)
            .mark_line(point={"filled": True, "size": 60}, interpolate="monotone")
            .encode(
                x=alt.X("year_label:O", title=None, sort=year_order, axis=alt.Axis(labelAngle=0, grid=False)),
                y=alt.Y("students:Q", title="生徒数", axis=alt.Axis(format=",", gridDash=[4, 4], domain=False, ticks=False)),
                color=alt.Color(
                    "gender:N",
                    scale=alt.Scale(domain=list(TREND_COLORS), range=list(TREND_COLORS.values())),
                    legend=alt.Legend(orient="top", title=None),
                ),
                opacity=alt.condition(trend_hover, alt.value(1), alt.value(0.2)),
                tooltip=["year_label", "gender", alt.Tooltip("students:Q", format=",")],
            )
            .add_params(trend_hover)
            .properties(height=DEFAULT_SETTINGS.chart_height)
        )
        charts["year_trend"] = to_vega_spec(line)

    if rates:
        long_df = pd.DataFrame(
            [
                {"label": r["label"], "series": title, "rate": r[key]}
                for r in rates
                for key, title in CHANGE_RATE_SERIES.items()
            ]
        )
        bars = (
            alt.Chart(long_df)
            .mark_bar()
            .encode(
                x=alt.X("label:N", title=None, sort=[r["label"] for r in rates], axis=alt.Axis(labelAngle=0)),
                xOffset=alt.XOffset("series:N", sort=list(CHANGE_RATE_SERIES.values())),
                y=alt.Y("rate:Q", title="前年度比変化率", axis=alt.Axis(format=".1f", labelExpr="datum.label + '%'")),
                color=alt.Color(
                    "series:N",
                    scale=alt.Scale(domain=list(CHANGE_RATE_SERIES.values()), range=CHANGE_RATE_COLORS),
                    legend=alt.Legend(orient="top", title=None),
                ),
                tooltip=["label", "series", alt.Tooltip("rate:Q", format=".1f")],
            )
            .properties(height=DEFAULT_SETTINGS.chart_height)
        )
        charts["change_rate"] = to_vega_spec(bars)

    return {
        "filters": asdict(filters),
        "year_series": series,
        "change_rates": rates,
        "charts": charts,
    }

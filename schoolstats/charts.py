from __future__ import annotations

from typing import Any, Dict, List

import altair as alt

alt.data_transformers.disable_max_rows()

GENDER_COLORS = ["#FFB3D9", "#B3E5FC"]
TREND_COLORS = {"女": "#FFB3D9", "男": "#B3E5FC"}
CATEGORY_COLORS = ["#FFD9B3", "#FFB3D9"]
TYPE_COLORS = ["#FFB3D9", "#FFD9B3", "#B3E5FC", "#D9A5FF"]
TEACHER_COLORS = ["#FFB3D9", "#FFD9B3", "#B3E5FC", "#D9A5FF", "#B3FFD9", "#FFFFC0"]
CHANGE_RATE_COLORS = ["#FFB3D9", "#B3E5FC", "#D9A5FF"]


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def palette(colors: List[str], n: int) -> List[str]:
    """First ``n`` colors, cycling when there are more labels than colors."""
    if n <= 0:
        return []
    return [colors[i % len(colors)] for i in range(n)]

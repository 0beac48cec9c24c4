from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def series_bar_chart(points: List[Dict[str, Any]], *, title: str, value_format: str = "$,.2f", sort: Optional[List[str]] = None) -> Dict[str, Any]:
    data = pd.DataFrame(points, columns=["name", "value"]) if not points else pd.DataFrame(points)[["name", "value"]]
    chart = (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("name:N", title=None, sort=sort or [str(p["name"]) for p in points], axis=alt.Axis(grid=False)),
            y=alt.Y("value:Q", title=title, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip("name:N", title=""), alt.Tooltip("value:Q", title=title, format=value_format)],
        )
        .properties(height=260, title=title)
    )
    return to_vega_spec(chart)


def series_line_chart(points: List[Dict[str, Any]], *, title: str, value_format: str = "$,.2f") -> Dict[str, Any]:
    data = pd.DataFrame(points, columns=["name", "value"]) if not points else pd.DataFrame(points)[["name", "value"]]
    hover = alt.selection_point(fields=["name"], on="mouseover", empty="all")
    chart = (
        alt.Chart(data)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("name:N", title=None, sort=[str(p["name"]) for p in points], axis=alt.Axis(grid=False)),
            y=alt.Y("value:Q", title=title, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.4)),
            tooltip=[alt.Tooltip("name:N", title=""), alt.Tooltip("value:Q", title=title, format=value_format)],
        )
        .add_params(hover)
        .properties(height=260, title=title)
    )
    return to_vega_spec(chart)


def ranking_bar_chart(groups: List[Dict[str, Any]], *, metric: str, title: str) -> Dict[str, Any]:
    cols = ["name", metric]
    data = pd.DataFrame(groups, columns=cols) if not groups else pd.DataFrame(groups)[cols]
    chart = (
        alt.Chart(data)
        .mark_bar()
        .encode(
            y=alt.Y("name:N", title=None, sort="-x"),
            x=alt.X(f"{metric}:Q", title=title, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip("name:N", title=""), alt.Tooltip(f"{metric}:Q", title=title, format=",.2f")],
        )
        .properties(height=max(len(data) * 32, 300), title=title)
    )
    return to_vega_spec(chart)

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def shift_distribution_chart(rows: Iterable[Mapping[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(list(rows), columns=["shift", "records"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("shift:N", title="Work Shift", sort=None),
            y=alt.Y("records:Q", title="Records"),
            tooltip=[alt.Tooltip("shift:N", title="Shift"), alt.Tooltip("records:Q", title="Records", format=",")],
        )
    )


def staff_contribution_chart(rows: Iterable[Mapping[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(list(rows), columns=["name", "records", "contribution"])
    return (
        alt.Chart(df)
        .mark_arc()
        .encode(
            theta=alt.Theta("records:Q"),
            color=alt.Color("name:N", title="Staff"),
            tooltip=[
                alt.Tooltip("name:N", title="Name"),
                alt.Tooltip("records:Q", title="Records", format=","),
                alt.Tooltip("contribution:Q", title="Contribution %", format=".1f"),
            ],
        )
    )


def daily_headcount_chart(rows: Iterable[Mapping[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(list(rows), columns=["day", "count"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("day:O", title="Day"),
            y=alt.Y("count:Q", title="Scheduled"),
            tooltip=["day", "count"],
        )
    )

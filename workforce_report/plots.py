"""Plotting helpers using Plotly Express."""
from __future__ import annotations

import pandas as pd
import plotly.express as px

COLORS = px.colors.sequential.Plasma
SUB_SCORE_LABELS = {
    "fill_rate_score": "충원율",
    "balance_score": "인력균형",
    "stability_score": "근속안정",
    "expertise_score": "전문성",
    "service_score": "서비스효율",
}


def ranking_bar(scores: pd.DataFrame, top: int = 20) -> px.bar:
    """Horizontal bar chart of composite scores, best institution on top."""
    view = scores.head(top).iloc[::-1]
    fig = px.bar(
        view,
        x="composite",
        y="name",
        orientation="h",
        color="has_real_match",
        color_discrete_sequence=COLORS,
        hover_data=list(SUB_SCORE_LABELS),
    )
    fig.update_layout(
        title="기관별 종합점수",
        xaxis_title="종합점수 (0-100)",
        yaxis_title=None,
        legend_title="실제 매칭",
        template="simple_white",
    )
    return fig


def sub_score_box(scores: pd.DataFrame) -> px.box:
    """Distribution of each percentile sub-score across the population."""
    melted = scores.melt(
        id_vars=["name"],
        value_vars=list(SUB_SCORE_LABELS),
        var_name="sub_score",
        value_name="score",
    )
    melted["sub_score"] = melted["sub_score"].map(SUB_SCORE_LABELS)
    fig = px.box(melted, x="sub_score", y="score", color="sub_score", color_discrete_sequence=COLORS)
    fig.update_layout(
        title="세부점수 분포",
        xaxis_title=None,
        yaxis_title="백분위 점수",
        showlegend=False,
        template="simple_white",
    )
    return fig


def district_fill_rate(summary: pd.DataFrame) -> px.bar:
    fig = px.bar(
        summary,
        x="district",
        y="fill_rate",
        color="district",
        color_discrete_sequence=COLORS,
        hover_data=["institutions", "allocated", "actual"],
    )
    fig.update_layout(
        title="시군구별 충원율",
        xaxis_title="시군구",
        yaxis_title="충원율 (%)",
        showlegend=False,
        template="simple_white",
    )
    return fig


def completion_pie(education: pd.DataFrame) -> px.pie:
    counts = education["status"].value_counts().rename_axis("status").reset_index(name="count")
    fig = px.pie(counts, names="status", values="count", color_discrete_sequence=COLORS)
    fig.update_layout(title="직무교육 이수 현황", template="simple_white")
    return fig

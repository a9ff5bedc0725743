from __future__ import annotations

from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from resource_pulse.gaps import ALL_LEVELS, aggregate_proficiency_gaps
from resource_pulse.models import ProficiencyGapRow
from resource_pulse.result_types import (
    CategoryGapScore,
    RecommendationReport,
    UtilizationBand,
    UtilizationSummary,
)

from .adapters import GAP_COLUMNS, ReportAdapter
from .data_models import AnalysisKpis, BandSlice

SHORTAGE_COLOR = "#ef4444"
SURPLUS_COLOR = "#22c55e"

BAND_COLORS = {
    UtilizationBand.UNALLOCATED.value: "#94a3b8",
    UtilizationBand.PARTIAL.value: "#3b82f6",
    UtilizationBand.FULL.value: "#22c55e",
    UtilizationBand.OVER.value: "#ef4444",
}


def gap_chart_frame(gaps: pd.DataFrame, top: int | None = 15) -> pd.DataFrame:
    """
    Shape a gap frame for a bar chart: largest shortage first, at most `top`
    rows, with a colour per bar (red = shortage, green = surplus or balanced).
    """
    if gaps.empty:
        return pd.DataFrame(columns=[*GAP_COLUMNS, "color"])
    df = gaps.sort_values(["gap", "skill_name"], kind="mergesort").reset_index(
        drop=True
    )
    if top is not None:
        df = df.head(top)
    df = df.assign(color=np.where(df["gap"] < 0, SHORTAGE_COLOR, SURPLUS_COLOR))
    return df.reset_index(drop=True)


def proficiency_chart_frame(
    rows: Iterable[ProficiencyGapRow], level: str = ALL_LEVELS, top: int | None = 15
) -> pd.DataFrame:
    """Aggregate per-level rows for `level` and shape them like gap_chart_frame."""
    entries = aggregate_proficiency_gaps(rows, level=level)
    df = pd.DataFrame(
        [
            {
                "skill_name": e.skill_name,
                "category": e.category,
                "available": e.available,
                "required": e.required,
                "gap": e.gap,
            }
            for e in entries
        ],
        columns=GAP_COLUMNS,
    )
    return gap_chart_frame(df, top=top)


def band_slices(summary: UtilizationSummary | None) -> list[BandSlice]:
    """Non-empty utilization bands in canonical order."""
    if summary is None:
        return []
    return [
        BandSlice(
            band=band.value,
            count=int(summary.counts.get(band, 0)),
            percentage=float(summary.percentages.get(band, 0.0)),
        )
        for band in UtilizationBand
        if summary.counts.get(band, 0) > 0
    ]


def category_frame(scores: Sequence[CategoryGapScore]) -> pd.DataFrame:
    cols = ["category", "avg_demand_pct", "avg_coverage_pct", "gap_score", "oversupply"]
    return pd.DataFrame(
        [
            {
                "category": c.category,
                "avg_demand_pct": c.avg_demand_pct,
                "avg_coverage_pct": c.avg_coverage_pct,
                "gap_score": c.gap_score,
                "oversupply": c.oversupply,
            }
            for c in scores
        ],
        columns=cols,
    )


def recommendation_frame(report: RecommendationReport | None) -> pd.DataFrame:
    cols = [
        "name",
        "kind",
        "bucket",
        "priority",
        "action",
        "recommended_training_type",
        "hiring_timeframe",
        "headcount",
        "demand_percentage",
    ]
    if report is None:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame(
        [{c: getattr(i, c) for c in cols} for i in report.all_items()], columns=cols
    )


def best_candidates(df_matches: pd.DataFrame, per_project: int = 3) -> pd.DataFrame:
    """Top `per_project` candidates per project, keeping the ranked order."""
    if df_matches.empty:
        return df_matches
    return (
        df_matches.groupby("project_id", sort=False, group_keys=False)
        .head(per_project)
        .reset_index(drop=True)
    )


def compute_kpis(res: Any, adapter: ReportAdapter) -> AnalysisKpis:
    gaps = adapter.df_gaps(res)
    summary = adapter.utilization(res)
    report = adapter.recommendations(res)

    over = 0
    avg = 0.0
    total_resources = 0
    if summary is not None:
        over = int(summary.counts.get(UtilizationBand.OVER, 0))
        avg = float(summary.average_utilization)
        total_resources = int(summary.total_resources)

    shortage = surplus = 0
    if not gaps.empty:
        shortage = int(((gaps["gap"] < 0) & (gaps["required"] > 0)).sum())
        surplus = int((gaps["gap"] > 0).sum())

    return AnalysisKpis(
        total_resources=total_resources,
        total_projects=len(getattr(res, "projects", []) or []),
        total_skills=int(len(gaps)),
        shortage_skills=shortage,
        surplus_skills=surplus,
        average_utilization=avg,
        overallocated_resources=over,
        overall_gap_score=(
            report.summary.overall_gap_score if report is not None else None
        ),
    )

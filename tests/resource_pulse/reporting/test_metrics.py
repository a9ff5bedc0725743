from __future__ import annotations

from types import SimpleNamespace

import pandas as pd

from resource_pulse.models import ProficiencyGapRow
from resource_pulse.reporting import metrics
from resource_pulse.reporting.adapters import AnalysisResultAdapter
from resource_pulse.result_types import (
    GapEntry,
    UtilizationBand,
    UtilizationSummary,
)


def make_summary() -> UtilizationSummary:
    counts = {
        UtilizationBand.UNALLOCATED: 1,
        UtilizationBand.PARTIAL: 2,
        UtilizationBand.FULL: 0,
        UtilizationBand.OVER: 1,
    }
    return UtilizationSummary(
        total_resources=4,
        counts=counts,
        percentages={b: 25.0 * c for b, c in counts.items()},
        average_utilization=70.0,
    )


def gaps_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "skill_name": ["Python", "Welding", "CAD", "Go"],
            "category": [None] * 4,
            "available": [2, 0, 1, 0],
            "required": [1, 1, 1, 1],
            "gap": [1, -1, 0, -1],
        }
    )


def test_gap_chart_frame_orders_and_colours():
    df = metrics.gap_chart_frame(gaps_frame())
    assert df["skill_name"].tolist() == ["Go", "Welding", "CAD", "Python"]
    assert df["color"].tolist() == [
        metrics.SHORTAGE_COLOR,
        metrics.SHORTAGE_COLOR,
        metrics.SURPLUS_COLOR,
        metrics.SURPLUS_COLOR,
    ]
    assert len(metrics.gap_chart_frame(gaps_frame(), top=2)) == 2
    assert metrics.gap_chart_frame(pd.DataFrame()).empty


def test_proficiency_chart_frame_filters_level():
    rows = [
        ProficiencyGapRow("Go", None, "Expert", 0, 2),
        ProficiencyGapRow("Go", None, "Beginner", 3, 0),
    ]
    expert = metrics.proficiency_chart_frame(rows, level="Expert")
    assert expert[["skill_name", "gap"]].values.tolist() == [["Go", -2]]
    everything = metrics.proficiency_chart_frame(rows)
    assert everything["gap"].tolist() == [1]


def test_band_slices_skip_empty_bands():
    slices = metrics.band_slices(make_summary())
    assert [s.band for s in slices] == [
        "Unallocated",
        "Partially Allocated",
        "Over-allocated",
    ]
    assert slices[1].count == 2 and slices[1].percentage == 50.0
    assert metrics.band_slices(None) == []


def test_best_candidates_keeps_top_per_project():
    df = pd.DataFrame(
        {
            "project_id": [1, 1, 1, 2],
            "resource_name": ["a", "b", "c", "d"],
            "match_score": [90, 80, 70, 60],
        }
    )
    top = metrics.best_candidates(df, per_project=2)
    assert top["resource_name"].tolist() == ["a", "b", "d"]


def test_compute_kpis():
    res = SimpleNamespace(
        utilization=make_summary(),
        projects=[object(), object()],
        gaps=[
            GapEntry("Go", None, 0, 2),
            GapEntry("SQL", None, 3, 1),
            GapEntry("CAD", None, 1, 1),
        ],
        recommendations=None,
    )
    kpis = metrics.compute_kpis(res, AnalysisResultAdapter())
    assert kpis.total_resources == 4
    assert kpis.total_projects == 2
    assert kpis.total_skills == 3
    assert kpis.shortage_skills == 1
    assert kpis.surplus_skills == 1
    assert kpis.overallocated_resources == 1
    assert kpis.overall_gap_score is None


def test_recommendation_frame_without_report():
    df = metrics.recommendation_frame(None)
    assert df.empty
    assert "action" in df.columns

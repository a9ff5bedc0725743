from __future__ import annotations

import pytest

from resource_pulse.config import TIMEFRAMES, Config
from resource_pulse.models import MarketTrend
from resource_pulse.recommendations import (
    ACTION_TABLE,
    build_recommendations,
    lookup_action,
)
from resource_pulse.result_types import CategoryGapScore, GapEntry, RoleGap


def make_inputs():
    gaps = [
        GapEntry("Welding", "Engineering", available=0, required=3),
        GapEntry("CAD", "Engineering", available=1, required=2),
        GapEntry("Python", "Programming", available=5, required=2),
        GapEntry("Go", "Programming", available=1, required=1),
        GapEntry("Machine Learning", "Data", available=1, required=0),
        GapEntry("Figma", "Design", available=3, required=0),
    ]
    trends = [
        MarketTrend("Rust", "Programming", growth_rate=30.0),
        MarketTrend("Machine Learning", "Data", growth_rate=20.0),
        MarketTrend("Figma", "Design", growth_rate=50.0),
        MarketTrend("Designer", growth_rate=25.0, kind="role"),
    ]
    role_gaps = [
        RoleGap("Engineer", available=1, required=4, demand_percentage=75.0),
        RoleGap("Designer", available=0, required=0, demand_percentage=0.0),
    ]
    return gaps, trends, role_gaps


def build(timeframe: str = "6months", **kwargs):
    gaps, trends, role_gaps = make_inputs()
    return build_recommendations(
        gaps,
        4,
        timeframe,
        Config(),
        trends=trends,
        role_gaps=role_gaps,
        **kwargs,
    )


def test_buckets():
    report = build()
    assert [i.name for i in report.critical_skills] == ["Welding"]
    assert [i.name for i in report.high_demand_skills] == ["CAD", "Python"]
    assert [i.name for i in report.emerging_skills] == ["Rust", "Machine Learning"]
    assert [i.name for i in report.high_demand_roles] == ["Engineer"]
    assert [i.name for i in report.emerging_roles] == ["Designer"]

    welding = report.critical_skills[0]
    assert welding.priority == "High"
    assert welding.headcount == 3
    assert welding.demand_percentage == 75.0
    assert report.high_demand_roles[0].priority == "High"
    assert report.emerging_skills[0].required == 0


def test_summary_for_six_months():
    s = build().summary
    assert s.timeframe_label == "next 6 months"
    assert (s.critical_count, s.high_demand_count, s.emerging_count) == (1, 3, 3)
    assert s.training_needed == 4
    assert s.total_hiring_headcount == 0
    assert s.skills_covered == 2


def test_one_month_hires_instead_of_training():
    report = build("1month")
    assert report.critical_skills[0].action == "hire"
    assert report.critical_skills[0].hiring_timeframe == "Immediate (within 2 weeks)"
    assert report.summary.total_hiring_headcount == 3 + 1 + 0 + 3
    assert report.summary.training_needed == 0


def test_covered_demand_is_not_a_hire():
    report = build("1month")
    python = next(i for i in report.high_demand_skills if i.name == "Python")
    assert python.headcount == 0
    assert python.action == "monitor"
    assert python.hiring_timeframe == "Not required"
    assert all(i.headcount > 0 for i in report.all_items() if i.action == "hire")


def test_trends_route_by_kind_not_by_name():
    gaps = [GapEntry("Designer", "Design", available=0, required=0)]
    role_gaps = [RoleGap("Designer", available=0, required=0)]
    skill_trend = MarketTrend("Designer", "Design", growth_rate=40.0)
    report = build_recommendations(
        gaps, 2, "6months", Config(), trends=[skill_trend], role_gaps=role_gaps
    )
    assert [i.kind for i in report.emerging_skills] == ["skill"]
    assert report.emerging_roles == []

    role_trend = MarketTrend("Designer", growth_rate=40.0, kind="role")
    report = build_recommendations(
        gaps, 2, "6months", Config(), trends=[role_trend], role_gaps=role_gaps
    )
    assert report.emerging_skills == []
    assert [i.kind for i in report.emerging_roles] == ["role"]


def test_timeframe_never_changes_bucket_membership():
    def names(r):
        return [(i.bucket, i.name) for i in r.all_items()]

    baseline = names(build("1month"))
    for tf in TIMEFRAMES:
        assert names(build(tf)) == baseline


def test_overall_gap_score_upstream_or_estimated():
    upstream = build(overall_gap_score=0.4).summary
    assert upstream.overall_gap_score == 0.4
    assert not upstream.overall_gap_score_estimated

    estimated = build(
        category_scores=[
            CategoryGapScore("Engineering", 62.5, 12.5, 0.5, False),
            CategoryGapScore("Design", 0.0, 75.0, 0.0, True),
            CategoryGapScore("Programming", 37.5, 75.0, 0.0, False),
        ]
    ).summary
    assert estimated.overall_gap_score == 0.25
    assert estimated.overall_gap_score_estimated


def test_unknown_timeframe_raises():
    with pytest.raises(ValueError, match="Unknown timeframe"):
        build("2weeks")


def test_action_table_is_complete():
    for priority in ("High", "Medium", "Low"):
        for tf in TIMEFRAMES:
            assert (priority, tf) in ACTION_TABLE
    assert lookup_action("Low", "1year").action == "plan"
    with pytest.raises(ValueError, match="Unknown priority"):
        lookup_action("Urgent", "1month")

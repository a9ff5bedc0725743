from __future__ import annotations

from resource_pulse.gaps import (
    ALL_LEVELS,
    UNCATEGORIZED,
    aggregate_proficiency_gaps,
    category_gap_scores,
    compute_gaps,
    compute_role_gaps,
    estimate_overall_gap_score,
    find_oversupply,
    proficiency_levels,
    proficiency_rows,
)
from resource_pulse.models import Project, Resource, RoleRequirement
from resource_pulse.result_types import GapEntry


def make_pool():
    resources = [
        Resource(id=1, name="A", skills=["Python", "CAD"]),
        Resource(id=2, name="B", skills=["Python"]),
    ]
    projects = [Project(id=1, name="P", required_skills=["Python", "CAD", "Welding"])]
    return resources, projects


def test_compute_gaps_orders_largest_shortage_first():
    resources, projects = make_pool()
    gaps = compute_gaps(resources, projects)
    assert [(g.skill_name, g.available, g.required, g.gap) for g in gaps] == [
        ("Welding", 0, 1, -1),
        ("CAD", 1, 1, 0),
        ("Python", 2, 1, 1),
    ]
    assert gaps[0].is_shortage
    assert gaps[0].demand_percentage == 100.0


def test_compute_gaps_is_idempotent_and_leaves_inputs_alone():
    resources, projects = make_pool()
    skills_before = [list(r.skills) for r in resources]
    first = compute_gaps(resources, projects, {"CAD": "Engineering"})
    second = compute_gaps(resources, projects, {"CAD": "Engineering"})
    assert first == second
    assert [list(r.skills) for r in resources] == skills_before
    assert projects[0].required_skills == ["Python", "CAD", "Welding"]


def test_compute_gaps_breaks_ties_by_name_and_uses_categories():
    resources = [Resource(id=1, name="A", skills=["Go", "Figma"])]
    gaps = compute_gaps(resources, [], {"Go": "Programming"})
    assert [g.skill_name for g in gaps] == ["Figma", "Go"]
    assert gaps[1].category == "Programming"
    assert gaps[0].category is None
    assert all(g.demand_percentage == 0.0 for g in gaps)


def test_all_levels_equals_sum_of_each_level():
    resources = [
        Resource(id=1, name="A", skills=["Go"], proficiency={"Go": "Expert"}),
        Resource(id=2, name="B", skills=["Go"], proficiency={"Go": "Beginner"}),
        Resource(id=3, name="C", skills=["Go", "SQL"]),
    ]
    projects = [
        Project(
            id=1,
            name="P1",
            required_skills=["Go"],
            required_proficiency={"Go": "Expert"},
        ),
        Project(id=2, name="P2", required_skills=["Go", "SQL"]),
    ]
    rows = proficiency_rows(resources, projects)
    levels = proficiency_levels(rows)
    assert levels == ["Beginner", "Expert", "Unspecified"]

    total = {
        g.skill_name: (g.available, g.required)
        for g in aggregate_proficiency_gaps(rows, ALL_LEVELS)
    }
    summed: dict[str, list[int]] = {}
    for level in levels:
        for g in aggregate_proficiency_gaps(rows, level):
            acc = summed.setdefault(g.skill_name, [0, 0])
            acc[0] += g.available
            acc[1] += g.required
    assert {k: tuple(v) for k, v in summed.items()} == total
    assert total["Go"] == (3, 2)

    expert = aggregate_proficiency_gaps(rows, "Expert")
    assert [(g.skill_name, g.available, g.required) for g in expert] == [
        ("Go", 1, 1)
    ]


def test_compute_role_gaps_sums_counts_and_demand_share():
    resources = [
        Resource(id=1, name="A", role="Engineer"),
        Resource(id=2, name="B", role="Designer"),
    ]
    projects = [
        Project(id=1, name="P1", required_roles=[RoleRequirement(1, "Engineer", 3)]),
        Project(id=2, name="P2", required_roles=[RoleRequirement(1, "Engineer", 1)]),
        Project(id=3, name="P3"),
    ]
    gaps = {g.role_name: g for g in compute_role_gaps(resources, projects)}
    assert gaps["Engineer"].required == 4
    assert gaps["Engineer"].gap == -3
    assert gaps["Engineer"].demand_percentage == 66.67
    assert gaps["Designer"].required == 0
    assert not gaps["Designer"].is_shortage


def test_category_scores_cover_shortage_no_supply_and_oversupply():
    gaps = [
        GapEntry("Welding", "Engineering", available=0, required=2),
        GapEntry("CAD", "Engineering", available=0, required=1),
        GapEntry("Python", "Programming", available=4, required=1),
        GapEntry("Go", "Programming", available=1, required=2),
        GapEntry("Figma", "Design", available=3, required=0),
        GapEntry("Excel", None, available=1, required=2),
    ]
    scores = {c.category: c for c in category_gap_scores(gaps, 4, 2)}

    assert scores["Engineering"].gap_score == 1.0
    assert scores["Design"].oversupply and scores["Design"].gap_score == 0.0
    # demand avg = (50 + 100) / 2 = 75, coverage avg = (100 + 25) / 2 = 62.5
    assert scores["Programming"].gap_score == 0.125
    assert UNCATEGORIZED in scores
    assert all(0.0 <= c.gap_score <= 1.0 for c in scores.values())

    ordered = [c.category for c in category_gap_scores(gaps, 4, 2)]
    assert ordered[0] == "Engineering"
    assert ordered[-1] == "Design"


def test_estimate_overall_gap_score_ignores_oversupply():
    gaps = [
        GapEntry("Welding", "Engineering", available=0, required=2),
        GapEntry("Figma", "Design", available=3, required=0),
    ]
    scores = category_gap_scores(gaps, 4, 2)
    assert estimate_overall_gap_score(scores) == 1.0
    assert estimate_overall_gap_score([]) == 0.0


def test_find_oversupply_threshold():
    gaps = [
        GapEntry("Figma", "Design", available=2, required=0),
        GapEntry("Excel", None, available=1, required=0),
        GapEntry("Go", None, available=4, required=1),
    ]
    assert [g.skill_name for g in find_oversupply(gaps, 4, 30.0)] == ["Figma"]

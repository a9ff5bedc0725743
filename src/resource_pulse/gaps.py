# resource_pulse/gaps.py
from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping, Optional, Sequence

from resource_pulse.models import (
    UNSPECIFIED_LEVEL,
    ProficiencyGapRow,
    Project,
    Resource,
)
from resource_pulse.result_types import CategoryGapScore, GapEntry, RoleGap

ALL_LEVELS = "All"
UNCATEGORIZED = "Uncategorized"


def _pct(part: int, whole: int) -> float:
    return round(100.0 * part / whole, 2) if whole else 0.0


def _gap_sort_key(entry: GapEntry | RoleGap) -> tuple[int, str]:
    name = entry.skill_name if isinstance(entry, GapEntry) else entry.role_name
    return (entry.gap, name)


def compute_gaps(
    resources: Sequence[Resource],
    projects: Sequence[Project],
    categories: Optional[Mapping[str, Optional[str]]] = None,
) -> list[GapEntry]:
    """
    Per-skill supply vs demand, largest shortage first.

    available = number of resources holding the skill
    required  = number of projects requiring the skill
    gap       = available - required

    Ties on gap are broken by skill name so the ordering is deterministic.
    """
    categories = categories or {}
    available: dict[str, int] = defaultdict(int)
    required: dict[str, int] = defaultdict(int)

    for r in resources:
        for s in set(r.skills):
            available[s] += 1
    for p in projects:
        for s in set(p.required_skills):
            required[s] += 1

    n_projects = len(projects)
    entries = [
        GapEntry(
            skill_name=s,
            category=categories.get(s),
            available=available.get(s, 0),
            required=required.get(s, 0),
            demand_percentage=_pct(required.get(s, 0), n_projects),
        )
        for s in set(available) | set(required)
    ]
    entries.sort(key=_gap_sort_key)
    return entries


# ----------------------------
# Proficiency-aware variant
# ----------------------------
def proficiency_rows(
    resources: Sequence[Resource],
    projects: Sequence[Project],
    categories: Optional[Mapping[str, Optional[str]]] = None,
) -> list[ProficiencyGapRow]:
    """
    Build the raw per-(skill, proficiency level) dataset.

    A skill held or required without a level is filed under "Unspecified".
    """
    categories = categories or {}
    have: dict[tuple[str, str], int] = defaultdict(int)
    need: dict[tuple[str, str], int] = defaultdict(int)

    for r in resources:
        for s in r.skills:
            have[(s, r.proficiency.get(s, UNSPECIFIED_LEVEL))] += 1
    for p in projects:
        for s in p.required_skills:
            need[(s, p.required_proficiency.get(s, UNSPECIFIED_LEVEL))] += 1

    keys = sorted(set(have) | set(need))
    return [
        ProficiencyGapRow(
            skill_name=s,
            category=categories.get(s),
            proficiency_level=level,
            resources_at_level=have.get((s, level), 0),
            projects_requiring_level=need.get((s, level), 0),
        )
        for s, level in keys
    ]


def proficiency_levels(rows: Iterable[ProficiencyGapRow]) -> list[str]:
    """Distinct levels present in the dataset, for building a level filter."""
    return sorted({row.proficiency_level for row in rows})


def aggregate_proficiency_gaps(
    rows: Iterable[ProficiencyGapRow],
    level: str = ALL_LEVELS,
    total_projects: int = 0,
) -> list[GapEntry]:
    """
    Collapse per-level rows into one GapEntry per skill.

    `level="All"` sums every level; any other value keeps only that level.
    """
    available: dict[str, int] = defaultdict(int)
    required: dict[str, int] = defaultdict(int)
    category: dict[str, Optional[str]] = {}

    for row in rows:
        if level != ALL_LEVELS and row.proficiency_level != level:
            continue
        available[row.skill_name] += int(row.resources_at_level)
        required[row.skill_name] += int(row.projects_requiring_level)
        if category.get(row.skill_name) is None:
            category[row.skill_name] = row.category

    entries = [
        GapEntry(
            skill_name=s,
            category=category.get(s),
            available=available[s],
            required=required[s],
            demand_percentage=_pct(required[s], total_projects),
        )
        for s in available
    ]
    entries.sort(key=_gap_sort_key)
    return entries


# ----------------------------
# Roles
# ----------------------------
def compute_role_gaps(
    resources: Sequence[Resource], projects: Sequence[Project]
) -> list[RoleGap]:
    """Headcount per role vs the summed role counts requested by projects."""
    available: dict[str, int] = defaultdict(int)
    required: dict[str, int] = defaultdict(int)
    requesting: dict[str, int] = defaultdict(int)

    for r in resources:
        if r.role:
            available[r.role] += 1
    for p in projects:
        seen: set[str] = set()
        for req in p.required_roles:
            if not req.name:
                continue
            required[req.name] += int(req.count)
            if req.name not in seen:
                requesting[req.name] += 1
                seen.add(req.name)

    n_projects = len(projects)
    gaps = [
        RoleGap(
            role_name=name,
            available=available.get(name, 0),
            required=required.get(name, 0),
            demand_percentage=_pct(requesting.get(name, 0), n_projects),
        )
        for name in set(available) | set(required)
    ]
    gaps.sort(key=_gap_sort_key)
    return gaps


# ----------------------------
# Category scores
# ----------------------------
def category_gap_scores(
    gaps: Sequence[GapEntry], total_resources: int, total_projects: int
) -> list[CategoryGapScore]:
    """
    Per-category shortage severity in [0, 1]:

      score = max(0, avg_demand_pct - avg_coverage_pct) / 100

    where demand_pct = required / total_projects * 100 and
    coverage_pct = available / total_resources * 100, averaged over the
    category's skills. A category with demand and no supply scores 1.0; a
    category with no demand is flagged oversupply and scores 0.
    """
    grouped: dict[str, list[GapEntry]] = defaultdict(list)
    for g in gaps:
        grouped[g.category or UNCATEGORIZED].append(g)

    out: list[CategoryGapScore] = []
    for category, entries in grouped.items():
        n = len(entries)
        avg_demand = sum(_pct(e.required, total_projects) for e in entries) / n
        avg_coverage = sum(_pct(e.available, total_resources) for e in entries) / n
        oversupply = all(e.required == 0 for e in entries)

        if oversupply:
            score = 0.0
        elif avg_coverage == 0.0:
            score = 1.0
        else:
            score = min(1.0, max(0.0, avg_demand - avg_coverage) / 100.0)

        out.append(
            CategoryGapScore(
                category=category,
                avg_demand_pct=round(avg_demand, 2),
                avg_coverage_pct=round(avg_coverage, 2),
                gap_score=round(score, 4),
                oversupply=oversupply,
            )
        )
    out.sort(key=lambda c: (-c.gap_score, c.category))
    return out


def estimate_overall_gap_score(category_scores: Iterable[CategoryGapScore]) -> float:
    """Mean of non-oversupply category scores, 0.0 when there are none."""
    scores = [c.gap_score for c in category_scores if not c.oversupply]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 4)


def find_oversupply(
    gaps: Iterable[GapEntry], total_resources: int, threshold_pct: float = 30.0
) -> list[GapEntry]:
    """Skills nobody requires that more than `threshold_pct` of resources hold."""
    hits = [
        g
        for g in gaps
        if g.required == 0 and _pct(g.available, total_resources) > threshold_pct
    ]
    hits.sort(key=lambda g: (-g.available, g.skill_name))
    return hits

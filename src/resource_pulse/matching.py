from __future__ import annotations

import math
from collections import Counter
from datetime import date
from typing import Optional, Sequence

from resource_pulse.config import Config, cfg
from resource_pulse.models import Project, Resource
from resource_pulse.result_types import MatchResult, ProjectMatches
from resource_pulse.utilization import days_until_available, total_utilization


def matching_requirement_index(resource: Resource, project: Project) -> Optional[int]:
    """
    Index into `project.required_roles` of the requirement the resource's role
    satisfies, matched by name or by role id. First match wins.
    """
    for i, req in enumerate(project.required_roles):
        if req.name and req.name == resource.role:
            return i
        if req.role_id is not None and req.role_id == resource.role_id:
            return i
    return None


def _on_project(resource: Resource, project: Project) -> bool:
    return any(a.project_id == project.id for a in resource.allocations)


def allocated_role_counts(
    project: Project, resources: Sequence[Resource]
) -> Counter[int]:
    """
    Resources already allocated to the project, counted per required role
    (keyed by requirement index).
    """
    counts: Counter[int] = Counter()
    for r in resources:
        if not _on_project(r, project):
            continue
        idx = matching_requirement_index(r, project)
        if idx is not None:
            counts[idx] += 1
    return counts


def open_seats_per_requirement(
    project: Project, resources: Sequence[Resource]
) -> list[int]:
    """Seats still open for each entry of `project.required_roles`."""
    allocated = allocated_role_counts(project, resources)
    return [
        max(0, int(req.count) - allocated.get(i, 0))
        for i, req in enumerate(project.required_roles)
    ]


def open_role_seats(project: Project, resources: Sequence[Resource]) -> dict[str, int]:
    """Role name -> seats still open (only roles with at least one open seat)."""
    out: dict[str, int] = {}
    open_seats = open_seats_per_requirement(project, resources)
    for req, remaining in zip(project.required_roles, open_seats):
        if remaining > 0:
            out[req.name] = out.get(req.name, 0) + remaining
    return out


def match_score(
    n_matching: int,
    n_required: int,
    has_roles: bool,
    role_factor: float,
    config: Config = cfg,
) -> float:
    """
    0-100 fit score.

    A project requiring skills scores 0 for a resource matching none of them.
    With no required roles the skill ratio is scaled to 100; with no required
    skills the role factor is.
    """
    if n_required > 0 and n_matching == 0:
        return 0.0
    if n_required == 0:
        return round(100.0 * role_factor, 2) if has_roles else 0.0

    ratio = n_matching / n_required
    if not has_roles:
        return round(100.0 * ratio, 2)
    return round(config.SKILL_WEIGHT * ratio + config.ROLE_WEIGHT * role_factor, 2)


def score_resource(
    project: Project,
    resource: Resource,
    as_of: date,
    config: Config = cfg,
    allocated: Optional[Counter[int]] = None,
) -> MatchResult:
    """
    Score a single (project, resource) pair.

    `allocated` is `allocated_role_counts(project, pool)`; without it every
    matching role counts as still needed.
    """
    held = set(resource.skills)
    matching = tuple(s for s in project.required_skills if s in held)

    idx = matching_requirement_index(resource, project)
    role_match = idx is not None
    role_needed = False
    if idx is not None:
        taken = allocated.get(idx, 0) if allocated is not None else 0
        role_needed = taken < int(project.required_roles[idx].count)

    if role_needed:
        factor = 1.0
    elif role_match:
        factor = float(config.ROLE_FILLED_FACTOR)
    else:
        factor = 0.0

    score = match_score(
        len(matching),
        len(project.required_skills),
        bool(project.required_roles),
        factor,
        config,
    )

    util = total_utilization(resource)
    days_left = days_until_available(resource, as_of)
    if util < config.MAX_UTILIZATION:
        status = "available"
    elif days_left is not None:
        status = f"in {days_left} days"
    else:
        status = "unavailable"

    return MatchResult(
        resource_id=resource.id,
        resource_name=resource.name,
        role=resource.role,
        match_score=score,
        matching_skills=matching,
        role_match=role_match,
        role_needed=role_needed,
        availability_status=status,
        days_left=days_left,
        total_utilization=util,
    )


def _rank_key(m: MatchResult) -> tuple[float, int, float, str, str]:
    days = m.days_left if m.days_left is not None else math.inf
    return (
        -m.match_score,
        0 if m.is_available else 1,
        days,
        m.resource_name,
        str(m.resource_id),
    )


def rank_resources_for_project(
    project: Project,
    resources: Sequence[Resource],
    as_of: Optional[date] = None,
    config: Config = cfg,
    exclude_allocated: bool = False,
) -> list[MatchResult]:
    """
    Score every resource for `project` and rank them.

    Order: score descending, available before busy, fewer days until free,
    then resource name and id.
    """
    today = as_of or config.as_of()
    allocated = allocated_role_counts(project, resources)
    pool = resources
    if exclude_allocated:
        pool = [r for r in resources if not _on_project(r, project)]
    results = [score_resource(project, r, today, config, allocated) for r in pool]
    results.sort(key=_rank_key)
    return results


def find_resource_matches(
    projects: Sequence[Project],
    resources: Sequence[Resource],
    as_of: Optional[date] = None,
    config: Config = cfg,
) -> list[ProjectMatches]:
    """
    Candidates for every project: scored above 0, not already on the project,
    truncated to MATCH_LIMIT.
    """
    today = as_of or config.as_of()
    out: list[ProjectMatches] = []
    for p in projects:
        ranked = rank_resources_for_project(
            p, resources, today, config, exclude_allocated=True
        )
        candidates = [m for m in ranked if m.match_score > 0]
        if config.MATCH_LIMIT is not None:
            candidates = candidates[: config.MATCH_LIMIT]
        out.append(
            ProjectMatches(
                project=p,
                roles_needed=open_role_seats(p, resources),
                candidates=candidates,
            )
        )
    return out


def rank_projects_for_resource(
    resource: Resource,
    projects: Sequence[Project],
    as_of: Optional[date] = None,
    config: Config = cfg,
    resources: Sequence[Resource] = (),
) -> list[tuple[Project, MatchResult]]:
    """
    Projects ordered by how well `resource` fits them, best first.

    `resources` is the full pool, used to decide whether a role is still needed.
    """
    today = as_of or config.as_of()
    pool = resources or [resource]
    scored = [
        (p, score_resource(p, resource, today, config, allocated_role_counts(p, pool)))
        for p in projects
    ]
    scored.sort(key=lambda pm: (-pm[1].match_score, pm[0].name, str(pm[0].id)))
    return scored

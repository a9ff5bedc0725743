from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from resource_pulse.models import (
    TREND_KINDS,
    UNSPECIFIED_LEVEL,
    Allocation,
    MarketTrend,
    ProficiencyGapRow,
    Project,
    Resource,
    RoleRequirement,
    Skill,
    SkillName,
    SkillRecord,
    SkillRef,
)


class IngestError(ValueError):
    """Raised when a fetched record cannot be turned into a typed object."""


@dataclass
class Snapshot:
    """
    Immutable-by-convention view of the collections fetched for one session.

    `skill_categories` maps skill name -> category, learned from full skill
    records wherever they appeared in the payload.
    """

    resources: list[Resource] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    skills: list[Skill] = field(default_factory=list)
    trends: list[MarketTrend] = field(default_factory=list)
    skill_categories: dict[str, Optional[str]] = field(default_factory=dict)
    overall_gap_score: Optional[float] = None

    def __post_init__(self) -> None:
        for sk in self.skills:
            if sk.category is not None:
                self.skill_categories.setdefault(sk.name, sk.category)


# ----------------------------
# Field helpers
# ----------------------------
def _get(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key; payloads mix camelCase and snake_case."""
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return default


def _require_id(raw: Mapping[str, Any], kind: str) -> Any:
    value = _get(raw, "id", f"{kind}Id", f"{kind}_id", f"{kind.capitalize()}ID")
    if value is None:
        raise IngestError(f"{kind} record is missing 'id': {dict(raw)!r}")
    return value


def _listify(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, Mapping)):
        return [value]
    return list(value)


def _as_int(value: Any, name: str, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise IngestError(f"Invalid integer for '{name}': {value!r}") from exc


def _as_float(value: Any, name: str, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise IngestError(f"Invalid number for '{name}': {value!r}") from exc


# ----------------------------
# Skill references
# ----------------------------
def parse_skill_ref(raw: Any) -> SkillRef:
    """A skill field is either a bare name or a {id, name, category} record."""
    if isinstance(raw, str):
        return SkillName(raw)
    if isinstance(raw, Mapping):
        name = _get(raw, "name", "skillName", "Name")
        if not name:
            raise IngestError(f"Skill reference without a name: {dict(raw)!r}")
        return SkillRecord(
            id=_get(raw, "id", "skillId", "SkillID"),
            name=str(name),
            category=_get(raw, "category", "Category"),
        )
    raise IngestError(f"Unsupported skill reference: {raw!r}")


def resolve_skill_refs(
    values: Any, categories: dict[str, Optional[str]]
) -> tuple[list[str], dict[str, str]]:
    """
    Resolve references to plain names, collecting categories on the way.
    Returns the names and any proficiency level attached to them.
    """
    names: list[str] = []
    levels: dict[str, str] = {}
    for item in _listify(values):
        ref = parse_skill_ref(item)
        if isinstance(ref, SkillRecord) and ref.category is not None:
            categories.setdefault(ref.name, ref.category)
        names.append(ref.name)
        if isinstance(item, Mapping):
            level = _get(item, "proficiencyLevel", "proficiency_level", "proficiency")
            if level is not None:
                levels[ref.name] = str(level)
    return names, levels


def _role_name(value: Any) -> tuple[str, Any]:
    if isinstance(value, Mapping):
        return str(_get(value, "name", "Name", default="")), _get(value, "id", "roleId")
    return ("" if value is None else str(value)), None


# ----------------------------
# Records
# ----------------------------
def parse_allocation(raw: Mapping[str, Any]) -> Allocation:
    project = _get(raw, "project")
    project_id = _get(raw, "projectId", "project_id", "ProjectID")
    if project_id is None and isinstance(project, Mapping):
        project_id = _get(project, "id")
    try:
        return Allocation(
            project_id=project_id,
            utilization=_as_float(
                _get(raw, "utilization", "Utilization"), "utilization"
            ),
            start_date=_get(raw, "startDate", "start_date", "StartDate"),
            end_date=_get(raw, "endDate", "end_date", "EndDate"),
            id=_get(raw, "id", "allocationId", "AllocationID"),
        )
    except (TypeError, ValueError) as exc:
        raise IngestError(f"Invalid allocation {dict(raw)!r}: {exc}") from exc


def parse_resource(
    raw: Mapping[str, Any], categories: Optional[dict[str, Optional[str]]] = None
) -> Resource:
    categories = categories if categories is not None else {}
    rid = _require_id(raw, "resource")
    role, role_id = _role_name(_get(raw, "role", "Role"))
    role_id = _get(raw, "roleId", "role_id", "RoleID", default=role_id)

    allocations = [parse_allocation(a) for a in _listify(_get(raw, "allocations"))]
    # the ending-soon payload carries a single `allocation` object
    single = _get(raw, "allocation")
    if isinstance(single, Mapping):
        allocations.append(parse_allocation(single))

    skills, proficiency = resolve_skill_refs(_get(raw, "skills"), categories)

    return Resource(
        id=rid,
        name=str(_get(raw, "name", "Name", default="")),
        role=role,
        skills=skills,
        allocations=allocations,
        role_id=role_id,
        proficiency=proficiency,
    )


def parse_role_requirement(raw: Any) -> RoleRequirement:
    if isinstance(raw, str):
        return RoleRequirement(role_id=None, name=raw, count=1)
    if not isinstance(raw, Mapping):
        raise IngestError(f"Unsupported role requirement: {raw!r}")
    name, nested_id = _role_name(_get(raw, "role", default=None))
    name = str(_get(raw, "name", "roleName", default=name))
    return RoleRequirement(
        role_id=_get(raw, "roleId", "role_id", "id", default=nested_id),
        name=name,
        count=_as_int(_get(raw, "count"), "count", default=1),
    )


def parse_project(
    raw: Mapping[str, Any], categories: Optional[dict[str, Optional[str]]] = None
) -> Project:
    categories = categories if categories is not None else {}
    pid = _require_id(raw, "project")

    required, required_proficiency = resolve_skill_refs(
        _get(raw, "requiredSkills", "required_skills", "skills"), categories
    )

    budget = _get(raw, "budget")
    try:
        return Project(
            id=pid,
            name=str(_get(raw, "name", "Name", default="")),
            client=str(_get(raw, "client", "Client", default="")),
            required_skills=required,
            required_roles=[
                parse_role_requirement(r)
                for r in _listify(_get(raw, "requiredRoles", "required_roles"))
            ],
            budget=None if budget is None else _as_float(budget, "budget"),
            currency=_get(raw, "currency"),
            start_date=_get(raw, "startDate", "start_date"),
            end_date=_get(raw, "endDate", "end_date"),
            required_proficiency=required_proficiency,
        )
    except (TypeError, ValueError) as exc:
        if isinstance(exc, IngestError):
            raise
        raise IngestError(f"Invalid project {pid!r}: {exc}") from exc


def parse_skill(raw: Mapping[str, Any]) -> Skill:
    name = _get(raw, "name", "Name")
    if not name:
        raise IngestError(f"Skill record is missing 'name': {dict(raw)!r}")
    return Skill(
        id=_require_id(raw, "skill"),
        name=str(name),
        category=_get(raw, "category", "Category"),
        is_active=bool(_get(raw, "isActive", "is_active", default=True)),
        resource_count=_as_int(
            _get(raw, "resourceCount", "resource_count"), "resourceCount"
        ),
        project_count=_as_int(
            _get(raw, "projectCount", "project_count"), "projectCount"
        ),
    )


def parse_trend(raw: Mapping[str, Any]) -> MarketTrend:
    """
    A trend names either a skill (`skillName`) or a role (`roleName`). An
    explicit `kind` wins; a bare `name` is a skill trend.
    """
    role_name = _get(raw, "roleName", "role_name")
    name = _get(raw, "name", "skillName", "skill_name", default=role_name)
    if not name:
        raise IngestError(f"Trend record is missing a name: {dict(raw)!r}")
    kind = _get(raw, "kind")
    if kind is None:
        kind = "role" if role_name is not None else "skill"
    if kind not in TREND_KINDS:
        raise IngestError(f"Unsupported trend kind {kind!r} for {name!r}")
    return MarketTrend(
        name=str(name),
        category=_get(raw, "category"),
        demand_score=_as_float(_get(raw, "demandScore", "demand_score"), "demandScore"),
        growth_rate=_as_float(_get(raw, "growthRate", "growth_rate"), "growthRate"),
        kind=kind,
    )


def parse_proficiency_rows(
    rows: Iterable[Mapping[str, Any]]
) -> list[ProficiencyGapRow]:
    """Parse the per-level payload of GET /skills/gap-analysis."""
    out: list[ProficiencyGapRow] = []
    for raw in rows or []:
        name = _get(raw, "name", "skillName")
        if not name:
            raise IngestError(f"Gap row is missing a skill name: {dict(raw)!r}")
        out.append(
            ProficiencyGapRow(
                skill_name=str(name),
                category=_get(raw, "category"),
                proficiency_level=str(
                    _get(raw, "proficiencyLevel", "proficiency_level", default="")
                    or UNSPECIFIED_LEVEL
                ),
                resources_at_level=_as_int(
                    _get(raw, "resourcesAtProficiencyCount", "resources_at_level"),
                    "resourcesAtProficiencyCount",
                ),
                projects_requiring_level=_as_int(
                    _get(
                        raw,
                        "projectsRequiringProficiencyCount",
                        "projects_requiring_level",
                    ),
                    "projectsRequiringProficiencyCount",
                ),
            )
        )
    return out


# ----------------------------
# Snapshot construction
# ----------------------------
def build_snapshot(
    resources: Optional[Sequence[Mapping[str, Any]]] = None,
    projects: Optional[Sequence[Mapping[str, Any]]] = None,
    skills: Optional[Sequence[Mapping[str, Any]]] = None,
    trends: Optional[Sequence[Mapping[str, Any]]] = None,
    overall_gap_score: Optional[float] = None,
) -> Snapshot:
    """
    Build a Snapshot from raw JSON collections. Missing collections are empty.

    Parameters:
    resources / projects / skills / trends: lists of JSON objects as returned by the API
    overall_gap_score (float, optional): upstream summary score in [0, 1]

    Returns:
    Snapshot: typed collections ready for the analytics functions
    """
    categories: dict[str, Optional[str]] = {}
    parsed_skills = [parse_skill(s) for s in skills or []]
    for sk in parsed_skills:
        if sk.category is not None:
            categories.setdefault(sk.name, sk.category)

    if overall_gap_score is not None and not (0.0 <= float(overall_gap_score) <= 1.0):
        raise IngestError("overall_gap_score must be within [0, 1].")

    return Snapshot(
        resources=[parse_resource(r, categories) for r in resources or []],
        projects=[parse_project(p, categories) for p in projects or []],
        skills=parsed_skills,
        trends=[parse_trend(t) for t in trends or []],
        skill_categories=categories,
        overall_gap_score=(
            None if overall_gap_score is None else float(overall_gap_score)
        ),
    )


def snapshot_from_json(path: str | Path) -> Snapshot:
    """
    Load a snapshot from a JSON file holding `resources`, `projects`, `skills`
    and optionally `trends` / `overallGapScore` keys.
    """
    file_path = Path(path).expanduser()
    if file_path.suffix.lower() != ".json":
        raise ValueError("snapshot_from_json expects a path to a .json file.")
    if not file_path.exists():
        raise FileNotFoundError(f"Snapshot JSON file not found: {file_path}")

    try:
        data = json.loads(file_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {file_path}") from exc

    if not isinstance(data, Mapping):
        raise TypeError("Snapshot JSON must be an object with collection keys.")

    return build_snapshot(
        resources=data.get("resources"),
        projects=data.get("projects"),
        skills=data.get("skills"),
        trends=data.get("trends"),
        overall_gap_score=data.get("overallGapScore"),
    )


from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional, Union

UNSPECIFIED_LEVEL = "Unspecified"
TREND_KINDS = ("skill", "role")


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Accept "2024-01-31" as well as full ISO timestamps "2024-01-31T00:00:00.000Z"
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid date string {value!r}") from exc
    raise TypeError("Dates must be datetime.date, datetime.datetime or ISO strings.")


def _dedup(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


@dataclass(slots=True)
class Allocation:
    """A time-bounded share of a resource's capacity assigned to a project."""

    project_id: Any
    utilization: float = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None  # None = open-ended
    id: Any = None

    def __post_init__(self) -> None:
        self.start_date = _to_date(self.start_date)
        self.end_date = _to_date(self.end_date)
        if self.utilization is None:
            self.utilization = 0

    def is_in_progress(self, as_of: date) -> bool:
        started = self.start_date is None or self.start_date <= as_of
        not_ended = self.end_date is None or self.end_date >= as_of
        return started and not_ended


@dataclass(slots=True)
class Resource:
    """
    A person who can be assigned to project work.
    """

    id: Any
    name: str
    role: str = ""
    skills: list[str] = field(default_factory=list)
    allocations: list[Allocation] = field(default_factory=list)
    role_id: Any = None
    proficiency: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"Resource(id={self.id!r}, name='{self.name}', role='{self.role}', "
            f"skills={self.skills}, allocations={len(self.allocations)})"
        )

    def __post_init__(self) -> None:
        self.skills = _dedup(self.skills)
        self.allocations = list(self.allocations)


@dataclass(frozen=True, slots=True)
class RoleRequirement:
    role_id: Any
    name: str
    count: int = 1


@dataclass(slots=True)
class Project:
    """A unit of client work needing resources."""

    id: Any
    name: str
    client: str = ""
    required_skills: list[str] = field(default_factory=list)
    required_roles: list[RoleRequirement] = field(default_factory=list)
    budget: Optional[float] = None
    currency: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    required_proficiency: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.required_skills = _dedup(self.required_skills)
        self.start_date = _to_date(self.start_date)
        self.end_date = _to_date(self.end_date)


@dataclass(slots=True)
class Skill:
    id: Any
    name: str
    category: Optional[str] = None
    is_active: bool = True
    # backend-derived counts; read-only here
    resource_count: int = 0
    project_count: int = 0

    @property
    def in_use(self) -> bool:
        return self.resource_count > 0 or self.project_count > 0


# ----------------------------
# Skill references
# ----------------------------
@dataclass(frozen=True, slots=True)
class SkillName:
    name: str


@dataclass(frozen=True, slots=True)
class SkillRecord:
    id: Any
    name: str
    category: Optional[str] = None


SkillRef = Union[SkillName, SkillRecord]


@dataclass(frozen=True, slots=True)
class MarketTrend:
    """External growth signal for a skill or a role."""

    name: str
    category: Optional[str] = None
    demand_score: float = 0.0
    growth_rate: float = 0.0  # percent
    kind: str = "skill"  # "skill" | "role"

    def __post_init__(self) -> None:
        if self.kind not in TREND_KINDS:
            raise ValueError(f"kind must be one of {TREND_KINDS}, got {self.kind!r}")


@dataclass(frozen=True, slots=True)
class ProficiencyGapRow:
    """One row of the per-(skill, proficiency level) gap dataset."""

    skill_name: str
    category: Optional[str]
    proficiency_level: str
    resources_at_level: int
    projects_requiring_level: int

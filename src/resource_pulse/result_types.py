# resource_pulse/result_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

import pandas as pd

from resource_pulse.models import ProficiencyGapRow, Project, Resource


class UtilizationBand(str, Enum):
    UNALLOCATED = "Unallocated"
    PARTIAL = "Partially Allocated"
    FULL = "Fully Allocated"
    OVER = "Over-allocated"


@dataclass(frozen=True)
class UtilizationSummary:
    """Band counts/percentages over a resource pool."""

    total_resources: int
    counts: dict[UtilizationBand, int]
    percentages: dict[UtilizationBand, float]
    average_utilization: float


@dataclass(frozen=True)
class EndingSoonEntry:
    resource_id: Any
    resource_name: str
    role: str
    project_id: Any
    utilization: float
    end_date: date
    days_left: int


@dataclass(frozen=True)
class GapEntry:
    """Supply vs demand for one skill. Negative gap = shortage."""

    skill_name: str
    category: Optional[str]
    available: int
    required: int
    demand_percentage: float = 0.0

    @property
    def gap(self) -> int:
        return self.available - self.required

    @property
    def is_shortage(self) -> bool:
        return self.required > 0 and self.gap < 0


@dataclass(frozen=True)
class RoleGap:
    role_name: str
    available: int
    required: int
    demand_percentage: float = 0.0

    @property
    def gap(self) -> int:
        return self.available - self.required

    @property
    def is_shortage(self) -> bool:
        return self.required > 0 and self.gap < 0


@dataclass(frozen=True)
class CategoryGapScore:
    category: str
    avg_demand_pct: float
    avg_coverage_pct: float
    gap_score: float  # [0, 1]
    oversupply: bool


@dataclass(frozen=True)
class MatchResult:
    """Fit of one resource for one project."""

    resource_id: Any
    resource_name: str
    role: str
    match_score: float  # 0-100
    matching_skills: tuple[str, ...]
    role_match: bool
    role_needed: bool
    availability_status: str  # "available" | "in N days" | "unavailable"
    days_left: Optional[int]
    total_utilization: int

    @property
    def is_available(self) -> bool:
        return self.availability_status == "available"


@dataclass(frozen=True)
class ProjectMatches:
    project: Project
    roles_needed: dict[str, int]
    candidates: list[MatchResult]


@dataclass(frozen=True)
class RecommendationItem:
    name: str
    kind: str  # "skill" | "role"
    category: Optional[str]
    bucket: str  # "critical" | "high_demand" | "emerging"
    priority: str  # "High" | "Medium" | "Low"
    action: str  # "hire" | "train" | "monitor" | "plan"
    recommended_training_type: str
    hiring_timeframe: str
    available: int
    required: int
    demand_percentage: float
    growth_rate: Optional[float] = None
    headcount: int = 0


@dataclass(frozen=True)
class RecommendationSummary:
    timeframe: str
    timeframe_label: str
    critical_count: int
    high_demand_count: int
    emerging_count: int
    total_hiring_headcount: int
    training_needed: int
    skills_covered: int
    overall_gap_score: float
    overall_gap_score_estimated: bool


@dataclass(frozen=True)
class RecommendationReport:
    critical_skills: list[RecommendationItem]
    high_demand_skills: list[RecommendationItem]
    emerging_skills: list[RecommendationItem]
    high_demand_roles: list[RecommendationItem]
    emerging_roles: list[RecommendationItem]
    summary: RecommendationSummary

    def all_items(self) -> list[RecommendationItem]:
        return [
            *self.critical_skills,
            *self.high_demand_skills,
            *self.emerging_skills,
            *self.high_demand_roles,
            *self.emerging_roles,
        ]


@dataclass
class StaffingPlan:
    """Structured output of a staffing-plan solve."""

    status_name: str
    objective_value: Optional[float]
    df_assignments: pd.DataFrame
    df_unfilled: pd.DataFrame
    progress_history: list[tuple[float, float, float]] | None = None


@dataclass
class AnalysisResult:
    """Everything produced by one `run_analysis` call."""

    as_of: date
    resources: list[Resource]
    projects: list[Project]
    utilization: UtilizationSummary
    ending_soon: list[EndingSoonEntry]
    gaps: list[GapEntry]
    role_gaps: list[RoleGap]
    category_scores: list[CategoryGapScore]
    recommendations: RecommendationReport
    proficiency_rows: list[ProficiencyGapRow] = field(default_factory=list)
    oversupply: list[GapEntry] = field(default_factory=list)
    matches: list[ProjectMatches] = field(default_factory=list)
    plan: Optional[StaffingPlan] = None

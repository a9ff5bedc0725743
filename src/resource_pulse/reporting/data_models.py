from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisKpis:
    """Headline numbers shown at the top of a report."""

    total_resources: int
    total_projects: int
    total_skills: int  # distinct skills held or required
    shortage_skills: int
    surplus_skills: int
    average_utilization: float
    overallocated_resources: int
    overall_gap_score: float | None


@dataclass(frozen=True)
class BandSlice:
    """One wedge of the utilization pie."""

    band: str
    count: int
    percentage: float

from __future__ import annotations

from typing import Any, Optional, Protocol, cast

import pandas as pd

from resource_pulse.result_types import (
    RecommendationReport,
    StaffingPlan,
    UtilizationSummary,
)

GAP_COLUMNS = ["skill_name", "category", "available", "required", "gap"]
MATCH_COLUMNS = [
    "project_id",
    "project_name",
    "resource_id",
    "resource_name",
    "role",
    "match_score",
    "matching_skills",
    "role_needed",
    "availability_status",
    "days_left",
]
ENDING_COLUMNS = ["resource_name", "role", "project_id", "end_date", "days_left"]


class ReportAdapter(Protocol):
    """Minimal interface the Reporter needs to work with any analysis result object."""

    def utilization(self, res: Any) -> Optional[UtilizationSummary]: ...
    def recommendations(self, res: Any) -> Optional[RecommendationReport]: ...
    def plan(self, res: Any) -> Optional[StaffingPlan]: ...

    def df_gaps(self, res: Any) -> pd.DataFrame: ...
    def df_matches(self, res: Any) -> pd.DataFrame: ...
    def df_ending_soon(self, res: Any) -> pd.DataFrame: ...


def _rename_by_alias(
    df: pd.DataFrame, aliases: dict[str, tuple[str, ...]]
) -> pd.DataFrame:
    """Map loosely named columns (camelCase, any case) onto canonical names."""
    lowered = {str(c).lower().replace("_", ""): c for c in df.columns}
    renames: dict[Any, str] = {}
    for target, options in aliases.items():
        for opt in (target, *options):
            key = opt.lower().replace("_", "")
            if key in lowered:
                renames[lowered[key]] = target
                break
    return df.rename(columns=renames)


class AnalysisResultAdapter:
    """Default adapter for the shipped AnalysisResult dataclass."""

    def utilization(self, res: Any) -> Optional[UtilizationSummary]:
        return cast(Optional[UtilizationSummary], getattr(res, "utilization", None))

    def recommendations(self, res: Any) -> Optional[RecommendationReport]:
        return cast(
            Optional[RecommendationReport], getattr(res, "recommendations", None)
        )

    def plan(self, res: Any) -> Optional[StaffingPlan]:
        return cast(Optional[StaffingPlan], getattr(res, "plan", None))

    def df_gaps(self, res: Any) -> pd.DataFrame:
        gaps = getattr(res, "gaps", None)
        if gaps is None:
            return pd.DataFrame(columns=GAP_COLUMNS)
        if isinstance(gaps, pd.DataFrame):
            df = _rename_by_alias(
                gaps,
                {
                    "skill_name": ("skillName", "name", "skill"),
                    "available": ("availableCount", "resources"),
                    "required": ("requiredCount", "projects"),
                    "category": (),
                    "gap": (),
                },
            )
            if not {"skill_name", "available", "required"}.issubset(df.columns):
                return pd.DataFrame(columns=GAP_COLUMNS)
            if "category" not in df.columns:
                df = df.assign(category=None)
            df = df.assign(
                available=pd.to_numeric(df["available"], errors="coerce")
                .fillna(0)
                .astype(int),
                required=pd.to_numeric(df["required"], errors="coerce")
                .fillna(0)
                .astype(int),
            )
            df = df.assign(gap=df["available"] - df["required"])
            return df[GAP_COLUMNS].reset_index(drop=True)

        rows = [
            {
                "skill_name": g.skill_name,
                "category": g.category,
                "available": g.available,
                "required": g.required,
                "gap": g.gap,
            }
            for g in gaps
        ]
        return pd.DataFrame(rows, columns=GAP_COLUMNS)

    def df_matches(self, res: Any) -> pd.DataFrame:
        rows = []
        for pm in getattr(res, "matches", None) or []:
            for m in pm.candidates:
                rows.append(
                    {
                        "project_id": pm.project.id,
                        "project_name": pm.project.name,
                        "resource_id": m.resource_id,
                        "resource_name": m.resource_name,
                        "role": m.role,
                        "match_score": m.match_score,
                        "matching_skills": ", ".join(m.matching_skills),
                        "role_needed": m.role_needed,
                        "availability_status": m.availability_status,
                        "days_left": m.days_left,
                    }
                )
        return pd.DataFrame(rows, columns=MATCH_COLUMNS)

    def df_ending_soon(self, res: Any) -> pd.DataFrame:
        rows = [
            {
                "resource_name": e.resource_name,
                "role": e.role,
                "project_id": e.project_id,
                "end_date": e.end_date,
                "days_left": e.days_left,
            }
            for e in getattr(res, "ending_soon", None) or []
        ]
        return pd.DataFrame(rows, columns=ENDING_COLUMNS)

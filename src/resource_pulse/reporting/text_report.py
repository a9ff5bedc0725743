from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pandas as pd

from resource_pulse.result_types import RecommendationItem

from .adapters import ReportAdapter
from .metrics import (
    best_candidates,
    category_frame,
    compute_kpis,
    recommendation_frame,
)


class ReportDocument:
    """Collects everything printed during a report and writes it as plain text."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.lines: list[str] = []
        self.figures: list[str] = []  # saved chart filenames

    def add_text(self, text: str) -> None:
        self.lines.append(text)

    def add_figure(self, filename: str) -> None:
        self.figures.append(filename)

    def write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        body = "\n".join(self.lines) if self.lines else "Report contains no data."
        if self.figures:
            body += "\n\nCharts:\n" + "\n".join(f"  - {f}" for f in self.figures)
        self.path.write_text(body + "\n")


_ACTIVE_REPORT: Optional[ReportDocument] = None


def set_active_report(doc: Optional[ReportDocument]) -> None:
    global _ACTIVE_REPORT
    _ACTIVE_REPORT = doc


def get_active_report() -> Optional[ReportDocument]:
    return _ACTIVE_REPORT


def _log_print(*args, **kwargs) -> None:
    from io import StringIO

    buf = StringIO()
    kwargs_copy = kwargs.copy()
    kwargs_copy["file"] = buf
    print(*args, **kwargs_copy)
    print(*args, **kwargs)
    if _ACTIVE_REPORT is not None:
        _ACTIVE_REPORT.add_text(buf.getvalue().rstrip("\n"))


def _fmt_float(x: float | None, nd: int = 2, as_pct: bool = False) -> str:
    if x is None or pd.isna(x):
        return "nan"
    return f"{float(100 * x):.{nd}f}%" if as_pct else f"{float(x):.{nd}f}"


def _print_items(title: str, items: list[RecommendationItem], limit: int) -> None:
    if not items:
        return
    _log_print(f"\n{title} ({len(items)}):")
    for i in items[:limit]:
        extra = f", +{i.headcount} needed" if i.headcount else ""
        growth = f", growth {i.growth_rate:.0f}%" if i.growth_rate is not None else ""
        _log_print(
            f"  - [{i.priority}] {i.name}: {i.action} "
            f"({i.recommended_training_type}; {i.hiring_timeframe}) "
            f"demand {i.demand_percentage:.0f}%{extra}{growth}"
        )
    if len(items) > limit:
        _log_print(f"  … {len(items) - limit} more")


def render_text_report(
    cfg: Any,
    adapter: ReportAdapter,
    res: Any,
    *,
    num_print_examples: int = 6,
) -> None:
    kpis = compute_kpis(res, adapter)
    _log_print(
        f"Resources: {kpis.total_resources} | Projects: {kpis.total_projects} | "
        f"Skills tracked: {kpis.total_skills}"
    )

    summary = adapter.utilization(res)
    if summary is not None and summary.total_resources:
        _log_print("\nUtilization bands:")
        for band, count in summary.counts.items():
            pct = summary.percentages.get(band, 0.0)
            bar = "█" * min(int(count), 50)
            _log_print(f"  {band.value:<20} {count:>4} ({pct:5.1f}%)  {bar}")
        _log_print(
            f"Average utilization: {_fmt_float(summary.average_utilization, 1)}%"
        )
        if kpis.overallocated_resources:
            n_over = kpis.overallocated_resources
            _log_print(f"⚠️ {n_over} resource(s) above 100% utilization")
    else:
        _log_print("\nUtilization bands: (no resources)")

    ending = adapter.df_ending_soon(res)
    if not ending.empty:
        _log_print(f"\nAllocations ending soon (top {num_print_examples}):")
        _log_print(ending.head(num_print_examples).to_string(index=False))

    gaps = adapter.df_gaps(res)
    if not gaps.empty:
        gaps = gaps[(gaps["gap"] < 0) & (gaps["required"] > 0)]
    shortages = gaps
    if shortages.empty:
        _log_print("\nSkill gaps: every required skill is covered.")
    else:
        _log_print(f"\nLargest skill shortages (top {num_print_examples}):")
        _log_print(shortages.head(num_print_examples).to_string(index=False))

    scores = getattr(res, "category_scores", None) or []
    if scores:
        _log_print("\nCategory gap scores (0 = covered, 1 = no supply):")
        _log_print(category_frame(scores).to_string(index=False))

    oversupply = getattr(res, "oversupply", None) or []
    if oversupply:
        _log_print(
            f"\nSkills held by more than "
            f"{getattr(cfg, 'OVERSUPPLY_COVERAGE_PCT', 30):.0f}% of resources "
            "that no project requires:"
        )
        for g in oversupply[:num_print_examples]:
            _log_print(f"  - {g.skill_name}: {g.available} resource(s)")

    report = adapter.recommendations(res)
    if report is not None:
        s = report.summary
        est = " (estimated)" if s.overall_gap_score_estimated else ""
        _log_print(
            f"\nRecommendations for the {s.timeframe_label}: "
            f"critical={s.critical_count} | high demand={s.high_demand_count} | "
            f"emerging={s.emerging_count}"
        )
        _log_print(
            f"Hiring headcount={s.total_hiring_headcount} | "
            f"training needed={s.training_needed} | "
            f"skills covered={s.skills_covered} | "
            f"overall gap score={_fmt_float(s.overall_gap_score, 1, as_pct=True)}{est}"
        )
        for title, items in (
            ("Critical skills", report.critical_skills),
            ("High-demand skills", report.high_demand_skills),
            ("Emerging skills", report.emerging_skills),
            ("High-demand roles", report.high_demand_roles),
            ("Emerging roles", report.emerging_roles),
        ):
            _print_items(title, items, num_print_examples)

        actions = recommendation_frame(report)["action"].value_counts().sort_index()
        if not actions.empty:
            _log_print("Actions: " + ", ".join(f"{a}={n}" for a, n in actions.items()))

    matches = adapter.df_matches(res)
    if not matches.empty:
        _log_print("\nBest candidates per project:")
        cols = [
            "project_name",
            "resource_name",
            "role",
            "match_score",
            "availability_status",
        ]
        _log_print(best_candidates(matches)[cols].to_string(index=False))

    plan = adapter.plan(res)
    if plan is not None:
        _print_plan(plan, num_print_examples)


def _print_plan(plan: Any, num_print_examples: int) -> None:
    _log_print(f"\nStaffing plan solver status: {plan.status_name}")
    if plan.status_name not in {"FEASIBLE", "OPTIMAL"}:
        _log_print("No staffing plan could be proposed.")
        return
    if plan.objective_value is not None:
        _log_print(
            f"Total match score of proposed assignments: {plan.objective_value:,.0f}"
        )
    if plan.df_assignments.empty:
        _log_print("No assignments proposed.")
    else:
        _log_print(f"Proposed assignments (top {num_print_examples}):")
        _log_print(plan.df_assignments.head(num_print_examples).to_string(index=False))
    if not plan.df_unfilled.empty:
        _log_print(f"Seats left unfilled: {len(plan.df_unfilled)}")
        by_role = plan.df_unfilled.groupby("role").size().sort_values(ascending=False)
        for role, n in by_role.items():
            _log_print(f"  - {role}: {n}")

from __future__ import annotations

from pathlib import Path
from typing import Any

from resource_pulse.gaps import ALL_LEVELS
from resource_pulse.ingest import Snapshot
from resource_pulse.reporting.adapters import AnalysisResultAdapter, ReportAdapter
from resource_pulse.reporting.metrics import (
    band_slices,
    category_frame,
    gap_chart_frame,
    proficiency_chart_frame,
)
from resource_pulse.reporting.plots import (
    show_category_scores,
    show_gap_chart,
    show_solution_progress,
    show_utilization_pie,
)
from resource_pulse.reporting.text_report import (
    ReportDocument,
    _log_print,
    render_text_report,
    set_active_report,
)


class Reporter:
    """High-level orchestrator: input sanity summary before, reports after analysis."""

    def __init__(
        self,
        cfg: Any,
        adapter: ReportAdapter | None = None,
        num_print_examples: int = 6,
        enable_plots: bool = True,
        output_path: Path | str = Path("outputs/report.txt"),
        proficiency_level: str = ALL_LEVELS,
    ) -> None:
        self.cfg = cfg
        self.adapter: ReportAdapter = adapter or AnalysisResultAdapter()
        self.num_print_examples = num_print_examples
        self.enable_plots = enable_plots
        self.output_path = Path(output_path)
        self.proficiency_level = proficiency_level

    def pre_analysis(self, snapshot: Snapshot) -> list[str]:
        """
        Print collection sizes and return warnings about records that will not
        contribute to the analysis (no skills, no requirements).
        """
        warnings: list[str] = []
        no_skills = [r.name for r in snapshot.resources if not r.skills]
        no_reqs = [
            p.name
            for p in snapshot.projects
            if not p.required_skills and not p.required_roles
        ]
        if no_skills:
            warnings.append(
                f"{len(no_skills)} resource(s) list no skills: "
                + ", ".join(no_skills[: self.num_print_examples])
            )
        if no_reqs:
            warnings.append(
                f"{len(no_reqs)} project(s) list no required skills or roles: "
                + ", ".join(no_reqs[: self.num_print_examples])
            )

        print(
            f"Input: {len(snapshot.resources)} resources | "
            f"{len(snapshot.projects)} projects | {len(snapshot.skills)} skills | "
            f"{len(snapshot.trends)} market trends"
        )
        for w in warnings:
            print(f"⚠️ {w}")
        return warnings

    def render_text_report(self, res: object) -> None:
        """Public entry point for callers that want text reporting only."""
        render_text_report(
            self.cfg,
            self.adapter,
            res,
            num_print_examples=self.num_print_examples,
        )

    def post_analysis(self, res: Any) -> None:
        """Render the text report (and optional charts), then write it to disk."""
        report_doc = ReportDocument(self.output_path)
        set_active_report(report_doc)
        try:
            _log_print(f"Analysis as of {getattr(res, 'as_of', 'n/a')}")
            self.render_text_report(res)
            if not self.enable_plots:
                return
            show_utilization_pie(band_slices(self.adapter.utilization(res)))
            rows = getattr(res, "proficiency_rows", None)
            if rows:
                show_gap_chart(
                    proficiency_chart_frame(rows, level=self.proficiency_level),
                    title=f"Skills gap ({self.proficiency_level} proficiency levels)",
                )
            else:
                show_gap_chart(gap_chart_frame(self.adapter.df_gaps(res)))
            show_category_scores(category_frame(getattr(res, "category_scores", [])))
            plan = self.adapter.plan(res)
            if plan is not None:
                show_solution_progress(history=plan.progress_history or [])
        finally:
            set_active_report(None)
            report_doc.write()

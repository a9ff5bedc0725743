from __future__ import annotations

from typing import Callable, Optional

from ortools.sat.python import cp_model

from resource_pulse.config import Config, cfg
from resource_pulse.gaps import (
    category_gap_scores,
    compute_gaps,
    compute_role_gaps,
    find_oversupply,
    proficiency_rows,
)
from resource_pulse.generate.sample import SampleGenConfig, build_sample_snapshot
from resource_pulse.ingest import Snapshot
from resource_pulse.matching import find_resource_matches
from resource_pulse.planner import plan_staffing
from resource_pulse.progress import MinimalProgress
from resource_pulse.recommendations import build_recommendations
from resource_pulse.reporting import Reporter
from resource_pulse.result_types import AnalysisResult
from resource_pulse.utilization import ending_soon, summarize_utilization

SnapshotBuilder = Callable[[Config], Snapshot]


def default_snapshot_builder(config: Config) -> Snapshot:
    """Build a synthetic snapshot using the project's generator."""
    seed = config.SEED if config.SEED is not None else 42
    return build_sample_snapshot(SampleGenConfig(seed=seed, as_of=config.as_of()))


def run_analysis(
    config: Config | None = None,
    snapshot: Snapshot | None = None,
    snapshot_builder: SnapshotBuilder | None = None,
    timeframe: Optional[str] = None,
    reporter: Reporter | None = None,
    progress_cb: cp_model.CpSolverSolutionCallback | None = None,
    validate_config: bool = True,
    enable_reporting: bool = True,
    include_matches: bool = True,
    plan: bool = False,
) -> AnalysisResult:
    """
    Run utilization, gap, recommendation and matching analytics over one snapshot.

    Parameters
    ----------
    config:
        The configuration for the run. Defaults to `resource_pulse.config.cfg`.
    snapshot:
        Pre-built `Snapshot`. When omitted then `snapshot_builder` (or the default
        synthetic builder) is used.
    snapshot_builder:
        Optional callable that accepts a `Config` and returns a `Snapshot`. Ignored
        when `snapshot` is supplied.
    timeframe:
        Recommendation timeframe; defaults to `Config.DEFAULT_TIMEFRAME`.
    reporter:
        Custom reporter instance. When `enable_reporting` is True and no reporter is
        provided, the default `Reporter` is used.
    enable_reporting:
        When False, skips reporter hooks even if a reporter is provided.
    include_matches:
        Rank candidates for every project.
    plan:
        Also solve a staffing plan for the open role seats with CP-SAT.
    progress_cb:
        Optional `cp_model.CpSolverSolutionCallback` for the staffing plan.
        Defaults to `MinimalProgress`.

    Returns
    -------
    AnalysisResult
    """
    cfg_obj = config or cfg
    if validate_config:
        cfg_obj.validate()

    snap = snapshot
    if snap is None:
        builder = snapshot_builder or default_snapshot_builder
        snap = builder(cfg_obj)

    active_reporter = reporter if enable_reporting else None
    if active_reporter is None and enable_reporting:
        active_reporter = Reporter(cfg_obj)
    if active_reporter is not None:
        active_reporter.pre_analysis(snap)

    as_of = cfg_obj.as_of()
    resources, projects = snap.resources, snap.projects

    gaps = compute_gaps(resources, projects, snap.skill_categories)
    role_gaps = compute_role_gaps(resources, projects)
    cat_scores = category_gap_scores(gaps, len(resources), len(projects))
    recs = build_recommendations(
        gaps,
        len(projects),
        timeframe or cfg_obj.DEFAULT_TIMEFRAME,
        cfg_obj,
        trends=snap.trends,
        role_gaps=role_gaps,
        overall_gap_score=snap.overall_gap_score,
        category_scores=cat_scores,
    )

    result = AnalysisResult(
        as_of=as_of,
        resources=resources,
        projects=projects,
        utilization=summarize_utilization(resources),
        ending_soon=ending_soon(resources, cfg_obj.ENDING_SOON_DAYS, as_of, cfg_obj),
        gaps=gaps,
        role_gaps=role_gaps,
        category_scores=cat_scores,
        recommendations=recs,
        proficiency_rows=proficiency_rows(resources, projects, snap.skill_categories),
        oversupply=find_oversupply(
            gaps, len(resources), cfg_obj.OVERSUPPLY_COVERAGE_PCT
        ),
    )

    if include_matches:
        result.matches = find_resource_matches(projects, resources, as_of, cfg_obj)

    if plan:
        progress = progress_cb or MinimalProgress(
            cfg_obj.TIME_LIMIT_SEC, cfg_obj.LOG_SOLUTIONS_FREQUENCY_SECONDS
        )
        result.plan = plan_staffing(projects, resources, as_of, cfg_obj, progress)

    if active_reporter is not None:
        active_reporter.post_analysis(result)

    return result


def main() -> AnalysisResult:
    """CLI entry point: analyse a synthetic snapshot and propose a staffing plan."""
    return run_analysis(
        config=cfg,
        validate_config=True,
        snapshot_builder=default_snapshot_builder,
        reporter=Reporter(cfg),
        enable_reporting=True,
        plan=True,
        progress_cb=MinimalProgress(
            cfg.TIME_LIMIT_SEC, cfg.LOG_SOLUTIONS_FREQUENCY_SECONDS
        ),
    )


if __name__ == "__main__":
    main()

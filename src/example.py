"""
Module with example code for running the resource-pulse analysis.

There are four ways to run the code:

1. Run the code with default options. This will generate a synthetic
    resource/project snapshot and analyse it, including a staffing plan.
2. Run the code with a snapshot defined via code.
3. Run the code with a snapshot pre-defined in a JSON file.
4. Run the code against a live backend (RESOURCE_PULSE_API_URL).

Usage via cli:
    python3 -m src.example --option 1
"""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path

from resource_pulse import Config, run_analysis, snapshot_from_json
from resource_pulse.client import ResourcePulseClient
from resource_pulse.generate.sample import sample_summary
from resource_pulse.ingest import Snapshot
from resource_pulse.main import MinimalProgress, Reporter, default_snapshot_builder
from resource_pulse.models import (
    Allocation,
    MarketTrend,
    Project,
    Resource,
    RoleRequirement,
)
from resource_pulse.repository import (
    ProjectRepository,
    ResourceRepository,
    SkillsRepository,
    session_snapshot,
)

cfg = Config(
    AS_OF=date(2024, 1, 1),
    ENDING_SOON_DAYS=14,
    CRITICAL_DEMAND_PCT=50.0,
    HIGH_DEMAND_PCT=25.0,
    DEFAULT_TIMEFRAME="3months",
    TIME_LIMIT_SEC=10.0,
    NUM_PARALLEL_WORKERS=4,
    LOG_SOLUTIONS_FREQUENCY_SECONDS=5.0,
    SEED=3,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run resource-pulse examples.")
    parser.add_argument(
        "--option",
        type=int,
        default=3,
        choices=(1, 2, 3, 4),
        help="Example scenario to run (default: 3).",
    )
    parser.add_argument(
        "--timeframe",
        default=None,
        help="Recommendation timeframe: 1month, 3months, 6months or 1year.",
    )
    return parser.parse_args()


def _code_snapshot() -> Snapshot:
    bridge = Project(
        id=1,
        name="Harbour Bridge",
        client="Acme",
        required_skills=["CAD", "Welding", "PLC"],
        required_roles=[RoleRequirement(role_id=2, name="Engineer", count=2)],
    )
    portal = Project(
        id=2,
        name="Client Portal",
        client="Globex",
        required_skills=["Python", "TypeScript"],
        required_roles=[
            RoleRequirement(role_id=1, name="Developer", count=2),
            RoleRequirement(role_id=3, name="Designer", count=1),
        ],
    )
    resources = [
        Resource(
            id=1,
            name="Ada Costa",
            role="Engineer",
            role_id=2,
            skills=["CAD", "PLC"],
            allocations=[Allocation(1, 60, end_date="2024-01-10")],
        ),
        Resource(
            id=2,
            name="Bruno Diaz",
            role="Developer",
            role_id=1,
            skills=["Python", "SQL"],
            allocations=[Allocation(2, 50), Allocation(1, 60)],
        ),
        Resource(id=3, name="Chloe Ito", role="Engineer", role_id=2, skills=["CAD"]),
        Resource(id=4, name="Dev Khan", role="Developer", role_id=1, skills=["Go"]),
    ]
    trends = [MarketTrend("Rust", "Programming", demand_score=80, growth_rate=35)]
    return Snapshot(resources=resources, projects=[bridge, portal], trends=trends)


def _live_snapshot(config: Config) -> Snapshot:
    with ResourcePulseClient(config=config) as client:
        skills = SkillsRepository(client)
        resources = ResourceRepository(client)
        projects = ProjectRepository(client)
        for repo in (skills, resources, projects):
            repo.refresh(fail_silently=True)
        for repo in (skills, resources, projects):
            if repo.last_error is not None:
                print(f"{type(repo).__name__} unavailable: {repo.last_error}")
        return session_snapshot(skills, resources, projects)


def run_option(option: int, timeframe: str | None = None) -> None:
    print(f"Running example code with option {option}")

    # Synthetic snapshot, full pipeline including the staffing plan.
    if option == 1:
        snapshot = default_snapshot_builder(cfg)
        summary = sample_summary(snapshot)
        print(
            f"Generated {summary['resources']} resources and "
            f"{summary['projects']} projects | "
            f"allocated {summary['allocated_pct']:.0%} | "
            f"over-allocated {summary['over_allocated_pct']:.0%} | "
            f"avg skills {summary['avg_skills']:.1f}"
        )

        # The parameters below are defaults, with the exception of config,
        # snapshot and plan, they can be omitted i.e. the below is equivalent to:
        # run_analysis(cfg, snapshot=snapshot, plan=True)
        run_analysis(
            config=cfg,
            validate_config=True,
            snapshot=snapshot,
            reporter=Reporter(cfg),
            enable_reporting=True,
            timeframe=timeframe,
            plan=True,
            progress_cb=MinimalProgress(
                cfg.TIME_LIMIT_SEC, cfg.LOG_SOLUTIONS_FREQUENCY_SECONDS
            ),
        )

    # Snapshot defined via code.
    elif option == 2:
        run_analysis(cfg, snapshot=_code_snapshot(), timeframe=timeframe, plan=True)

    # Snapshot defined via JSON. Typical offline use.
    elif option == 3:
        snapshot = snapshot_from_json(Path("src/example_snapshot.json"))
        run_analysis(cfg, snapshot=snapshot, timeframe=timeframe or "1month")

    # Live backend.
    elif option == 4:
        live_cfg = Config(SEED=cfg.SEED)
        run_analysis(live_cfg, snapshot=_live_snapshot(live_cfg), timeframe=timeframe)
    else:
        raise SystemExit(f"Unknown option {option}")


def main() -> None:
    args = parse_args()
    run_option(args.option, args.timeframe)


if __name__ == "__main__":
    main()

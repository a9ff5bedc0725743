from __future__ import annotations

from datetime import date
from unittest.mock import patch

from resource_pulse.config import Config
from resource_pulse.models import Allocation, Project, Resource, RoleRequirement
from resource_pulse.planner import (
    ASSIGNMENT_COLUMNS,
    UNFILLED_COLUMNS,
    open_slots,
    plan_staffing,
)
from resource_pulse.progress import MinimalProgress

AS_OF = date(2024, 1, 1)


def make_cfg() -> Config:
    return Config(
        AS_OF=AS_OF,
        PLAN_ALLOCATION_PCT=50,
        TIME_LIMIT_SEC=2.0,
        NUM_PARALLEL_WORKERS=1,
        SEED=0,
    )


def project(pid: int, count: int = 1, skills=("CAD",)) -> Project:
    return Project(
        id=pid,
        name=f"P{pid}",
        required_skills=list(skills),
        required_roles=[RoleRequirement(role_id=1, name="Engineer", count=count)],
    )


def engineer(rid: int, skills=("CAD",), util: int = 0) -> Resource:
    allocs = [Allocation(project_id=99, utilization=util)] if util else []
    return Resource(
        id=rid, name=f"E{rid}", role="Engineer", skills=list(skills), allocations=allocs
    )


def test_open_slots_subtracts_existing_allocations():
    p = project(1, count=3)
    on_it = Resource(id=7, name="On", role="Engineer", allocations=[Allocation(1, 50)])
    slots = open_slots([p], [on_it])
    assert [(s.role, s.seat) for s in slots] == [("Engineer", 0), ("Engineer", 1)]


def test_resource_fills_at_most_one_seat_per_project_and_respects_capacity():
    plan = plan_staffing(
        [project(1, count=2)], [engineer(1), engineer(2, util=60)], config=make_cfg()
    )
    assert plan.status_name == "OPTIMAL"
    assert list(plan.df_assignments.columns) == ASSIGNMENT_COLUMNS
    assert list(plan.df_unfilled.columns) == UNFILLED_COLUMNS
    assert plan.df_assignments["resource_name"].tolist() == ["E1"]
    assert len(plan.df_unfilled) == 1


def test_capacity_limits_seats_across_projects():
    plan = plan_staffing(
        [project(1), project(2), project(3)], [engineer(1)], config=make_cfg()
    )
    assert len(plan.df_assignments) == 2
    assert len(plan.df_unfilled) == 1


def test_best_candidate_wins_the_slot():
    p = project(1, skills=("CAD", "Welding"))
    plan = plan_staffing(
        [p],
        [engineer(1, skills=("CAD",)), engineer(2, skills=("CAD", "Welding"))],
        config=make_cfg(),
    )
    assert plan.df_assignments["resource_name"].tolist() == ["E2"]
    assert plan.objective_value == 100.0
    assert plan.df_unfilled.empty


def test_no_open_slots_yields_empty_plan():
    plan = plan_staffing([Project(id=1, name="P")], [engineer(1)], config=make_cfg())
    assert plan.status_name == "OPTIMAL"
    assert plan.df_assignments.empty
    assert plan.df_unfilled.empty


def test_progress_history_is_attached():
    cb = MinimalProgress(time_limit_sec=2.0, log_every_sec=0.0)
    with patch("resource_pulse.progress.print"):
        plan = plan_staffing(
            [project(1)], [engineer(1), engineer(2)], config=make_cfg(), progress_cb=cb
        )
    assert plan.progress_history is not None
    assert len(plan.progress_history) >= 1
    assert plan.progress_history[-1][1] == plan.objective_value


def test_role_matched_by_id_fills_and_closes_seats():
    p = project(1, count=2)
    seated = Resource(
        id=7, name="Seated", role="Eng.", role_id=1, allocations=[Allocation(1, 50)]
    )
    by_id = Resource(id=8, name="ById", role="Eng.", role_id=1, skills=["CAD"])
    designer = Resource(id=9, name="Des", role="Designer", skills=["CAD"])

    assert len(open_slots([p], [seated, by_id, designer])) == 1
    plan = plan_staffing([p], [seated, by_id, designer], config=make_cfg())
    assert plan.df_assignments["resource_name"].tolist() == ["ById"]
    assert plan.df_unfilled.empty

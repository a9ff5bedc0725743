# resource_pulse/planner.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Tuple

import pandas as pd
from ortools.sat.python import cp_model

from resource_pulse.config import Config, cfg
from resource_pulse.matching import (
    allocated_role_counts,
    matching_requirement_index,
    open_seats_per_requirement,
    score_resource,
)
from resource_pulse.models import Project, Resource
from resource_pulse.result_types import StaffingPlan
from resource_pulse.utilization import total_utilization

RS = Tuple[int, int]  # (resource index, slot index)

ASSIGNMENT_COLUMNS = [
    "project_id",
    "project_name",
    "role",
    "seat",
    "resource_id",
    "resource_name",
    "match_score",
]
UNFILLED_COLUMNS = ["project_id", "project_name", "role", "seat"]


@dataclass(frozen=True)
class RoleSlot:
    """One open seat of a required role on a project."""

    project_idx: int
    project_id: object
    project_name: str
    role: str
    seat: int
    req_idx: int = 0  # index into the project's required_roles


def open_slots(
    projects: Sequence[Project], resources: Sequence[Resource]
) -> list[RoleSlot]:
    """One slot per role seat not yet covered by an existing allocation."""
    slots: list[RoleSlot] = []
    for pi, p in enumerate(projects):
        open_seats = open_seats_per_requirement(p, resources)
        for qi, (req, remaining) in enumerate(zip(p.required_roles, open_seats)):
            for seat in range(remaining):
                slots.append(RoleSlot(pi, p.id, p.name, req.name, seat, qi))
    return slots


class PlanContext:
    """Holds the CP-SAT model and decision variables for a staffing plan."""

    def __init__(
        self,
        cfg: Config,
        projects: Sequence[Project],
        resources: Sequence[Resource],
        as_of: date,
    ) -> None:
        self.cfg: Config = cfg
        self.projects = list(projects)
        self.resources = list(resources)
        self.as_of = as_of
        self.m: cp_model.CpModel = cp_model.CpModel()

        self.slots: list[RoleSlot] = []
        self.x: dict[RS, cp_model.IntVar] = {}  # resource fills slot
        self.score: dict[RS, float] = {}
        self.capacity: dict[int, int] = {}  # max new seats per resource


def _seat_capacity(resource: Resource, config: Config) -> int:
    free = config.MAX_UTILIZATION - total_utilization(resource)
    return max(0, free // int(config.PLAN_ALLOCATION_PCT))


def build_plan_model(
    projects: Sequence[Project],
    resources: Sequence[Resource],
    as_of: date,
    config: Config = cfg,
) -> PlanContext:
    """
    Build the assignment model:
      - x[r, s] = 1 when resource r fills slot s (role match and score > 0 only)
      - each slot takes at most one resource
      - a resource fills at most one seat per project
      - existing utilization + PLAN_ALLOCATION_PCT per new seat <= MAX_UTILIZATION
      - maximise the summed (integer) match score
    """
    ctx = PlanContext(config, projects, resources, as_of)
    ctx.slots = open_slots(ctx.projects, ctx.resources)
    m = ctx.m

    allocated = [allocated_role_counts(p, ctx.resources) for p in ctx.projects]
    for ri, r in enumerate(ctx.resources):
        ctx.capacity[ri] = _seat_capacity(r, config)
        if ctx.capacity[ri] == 0:
            continue
        for si, slot in enumerate(ctx.slots):
            p = ctx.projects[slot.project_idx]
            if matching_requirement_index(r, p) != slot.req_idx:
                continue
            if any(a.project_id == p.id for a in r.allocations):
                continue
            res = score_resource(p, r, as_of, config, allocated[slot.project_idx])
            if res.match_score <= 0:
                continue
            ctx.x[(ri, si)] = m.NewBoolVar(f"x_r{ri}_s{si}")
            ctx.score[(ri, si)] = res.match_score

    for si in range(len(ctx.slots)):
        vars_s = [v for (ri, sj), v in ctx.x.items() if sj == si]
        if vars_s:
            m.AddAtMostOne(vars_s)

    for ri in range(len(ctx.resources)):
        mine = {sj: v for (rj, sj), v in ctx.x.items() if rj == ri}
        if not mine:
            continue
        for pi in range(len(ctx.projects)):
            per_project = [
                v for sj, v in mine.items() if ctx.slots[sj].project_idx == pi
            ]
            if len(per_project) > 1:
                m.AddAtMostOne(per_project)
        m.Add(sum(mine.values()) <= ctx.capacity[ri])

    if ctx.x:
        m.Maximize(sum(int(round(ctx.score[k])) * v for k, v in ctx.x.items()))
    return ctx


def setup_solver(config: Config) -> cp_model.CpSolver:
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = config.TIME_LIMIT_SEC
    solver.parameters.num_search_workers = config.NUM_PARALLEL_WORKERS
    solver.parameters.log_search_progress = False
    if config.SEED is not None:
        solver.parameters.random_seed = int(config.SEED)
    return solver


def extract_plan(
    ctx: PlanContext, solver: cp_model.CpSolver, status: int
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return (assignments, unfilled) dataframes from a solved model."""
    rows: list[dict] = []
    filled: set[int] = set()
    if status in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        for (ri, si), v in ctx.x.items():
            if solver.Value(v) != 1:
                continue
            r, slot = ctx.resources[ri], ctx.slots[si]
            filled.add(si)
            rows.append(
                {
                    "project_id": slot.project_id,
                    "project_name": slot.project_name,
                    "role": slot.role,
                    "seat": slot.seat,
                    "resource_id": r.id,
                    "resource_name": r.name,
                    "match_score": ctx.score[(ri, si)],
                }
            )

    df_assign = pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)
    if not df_assign.empty:
        df_assign = df_assign.sort_values(
            ["project_name", "role", "seat"], kind="mergesort"
        ).reset_index(drop=True)

    df_unfilled = pd.DataFrame(
        [
            {
                "project_id": s.project_id,
                "project_name": s.project_name,
                "role": s.role,
                "seat": s.seat,
            }
            for si, s in enumerate(ctx.slots)
            if si not in filled
        ],
        columns=UNFILLED_COLUMNS,
    )
    return df_assign, df_unfilled


def plan_staffing(
    projects: Sequence[Project],
    resources: Sequence[Resource],
    as_of: Optional[date] = None,
    config: Config = cfg,
    progress_cb: Optional[cp_model.CpSolverSolutionCallback] = None,
) -> StaffingPlan:
    """
    Propose resource-to-seat assignments for every open role seat.

    Returns a StaffingPlan with the solver status, the objective and two
    frames: proposed assignments and seats left unfilled.
    """
    ctx = build_plan_model(projects, resources, as_of or config.as_of(), config)
    solver = setup_solver(config)
    if progress_cb is not None:
        status = solver.SolveWithSolutionCallback(ctx.m, progress_cb)
    else:
        status = solver.Solve(ctx.m)

    df_assign, df_unfilled = extract_plan(ctx, solver, status)
    objective = (
        float(solver.ObjectiveValue())
        if status in (cp_model.OPTIMAL, cp_model.FEASIBLE)
        else None
    )
    history = None
    if progress_cb is not None and hasattr(progress_cb, "solution_history"):
        history = progress_cb.solution_history()

    return StaffingPlan(
        status_name=solver.StatusName(status),
        objective_value=objective,
        df_assignments=df_assign,
        df_unfilled=df_unfilled,
        progress_history=history,
    )

# sample.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Tuple

import numpy as np

from resource_pulse.ingest import Snapshot
from resource_pulse.models import (
    Allocation,
    MarketTrend,
    Project,
    Resource,
    RoleRequirement,
    Skill,
)
from resource_pulse.utilization import total_utilization

# fmt: off
FIRST_NAMES: Tuple[str, ...] = (
    "Ada", "Bruno", "Chloe", "Dev", "Elif", "Femi", "Greta", "Hiro", "Ines", "Jonas",
    "Kira", "Luca", "Maya", "Noor", "Omar", "Priya", "Quinn", "Rosa", "Sami", "Tara",
)
LAST_NAMES: Tuple[str, ...] = (
    "Adams", "Berg", "Costa", "Diaz", "Evans", "Fischer", "Garcia", "Haddad",
    "Ito", "Jensen", "Khan", "Lopez", "Moreau", "Nakamura", "Okafor", "Silva",
)
# fmt: on
CLIENTS: Tuple[str, ...] = ("Acme", "Globex", "Initech", "Umbrella", "Stark", "Wayne")


# ----------------------------
# Configuration container
# ----------------------------
@dataclass(slots=True)
class SampleGenConfig:
    """
    Configuration for generation of a synthetic resource/project snapshot.
    """

    n_resources: int = 40
    n_projects: int = 12

    roles: Tuple[str, ...] = (
        "Developer",
        "Designer",
        "Engineer",
        "Analyst",
        "Manager",
    )
    role_probs: Tuple[float, ...] = (0.40, 0.15, 0.20, 0.15, 0.10)

    # category -> skills
    catalog: dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: {
            "Programming": ("Python", "TypeScript", "Go", "SQL"),
            "Engineering": ("CAD", "Welding", "PLC"),
            "Design": ("Figma", "UX Research"),
            "Data": ("Pandas", "Machine Learning", "Tableau"),
        }
    )

    skills_per_resource: Tuple[int, int] = (1, 4)
    skills_per_project: Tuple[int, int] = (1, 3)
    roles_per_project: Tuple[int, int] = (1, 2)
    seats_per_role: Tuple[int, int] = (1, 3)

    proficiency_levels: Tuple[str, ...] = (
        "Beginner",
        "Intermediate",
        "Advanced",
        "Expert",
    )
    proficiency_probs: Tuple[float, ...] = (0.20, 0.40, 0.30, 0.10)

    # Share of resources holding at least one allocation, and per-allocation sizes
    allocated_pct: float = 0.70
    max_allocations: int = 2
    utilization_choices: Tuple[int, ...] = (25, 50, 75, 100)
    utilization_weights: Tuple[float, ...] = (0.2, 0.4, 0.2, 0.2)
    open_ended_pct: float = 0.10

    # Skills (not necessarily in the catalog) with external growth signals
    trend_skills: Tuple[str, ...] = ("Rust", "Machine Learning", "PLC")

    as_of: date = field(default_factory=date.today)
    seed: Optional[int] = 7

    def validate(self) -> None:
        if self.n_resources <= 0:
            raise ValueError("n_resources must be > 0.")
        if self.n_projects < 0:
            raise ValueError("n_projects must be >= 0.")
        if len(self.roles) != len(self.role_probs):
            raise ValueError("roles and role_probs must be same length.")
        if not np.isclose(sum(self.role_probs), 1.0, atol=1e-9):
            raise ValueError("role_probs must sum to 1.0")
        if len(self.proficiency_levels) != len(self.proficiency_probs):
            raise ValueError(
                "proficiency_levels and proficiency_probs must be same length."
            )
        if not np.isclose(sum(self.proficiency_probs), 1.0, atol=1e-9):
            raise ValueError("proficiency_probs must sum to 1.0")
        if len(self.utilization_choices) != len(self.utilization_weights):
            raise ValueError(
                "utilization_choices and utilization_weights must be same length."
            )
        if not np.isclose(sum(self.utilization_weights), 1.0, atol=1e-9):
            raise ValueError("utilization_weights must sum to 1.0")
        for name in (
            "skills_per_resource",
            "skills_per_project",
            "roles_per_project",
            "seats_per_role",
        ):
            lo, hi = getattr(self, name)
            if not (0 <= lo <= hi):
                raise ValueError(f"{name} must satisfy 0 <= min <= max.")
        for x in (self.allocated_pct, self.open_ended_pct):
            if not (0.0 <= x <= 1.0):
                raise ValueError("allocated_pct and open_ended_pct must be in [0,1].")
        if self.max_allocations < 1:
            raise ValueError("max_allocations must be >= 1.")
        if len(FIRST_NAMES) * len(LAST_NAMES) < self.n_resources:
            raise ValueError("Not enough name combinations for n_resources.")


# ----------------------------
# Generation helpers
# ----------------------------
def _rng(seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(seed) if seed is not None else np.random.default_rng()


def _deterministic_counts(n: int, probs: np.ndarray) -> np.ndarray:
    """
    Turn probabilities into integer counts that sum to n with minimal rounding error.
    """
    expected = probs * n
    floors = np.floor(expected).astype(int)
    shortfall = n - floors.sum()
    if shortfall > 0:
        remainders = expected - floors
        bump_idx = np.argsort(remainders)[::-1][:shortfall]
        floors[bump_idx] += 1
    return floors


def _all_skills(cfg: SampleGenConfig) -> list[str]:
    return [s for skills in cfg.catalog.values() for s in skills]


def _pick(
    g: np.random.Generator, pool: list[str], bounds: Tuple[int, int]
) -> list[str]:
    lo, hi = bounds
    k = min(len(pool), int(g.integers(lo, hi + 1)))
    return [str(s) for s in g.choice(pool, size=k, replace=False)] if k else []


# ----------------------------
# Core API
# ----------------------------
def create_skills(cfg: SampleGenConfig) -> list[Skill]:
    out: list[Skill] = []
    for category, names in cfg.catalog.items():
        for name in names:
            out.append(Skill(id=len(out) + 1, name=name, category=category))
    return out


def create_projects(cfg: SampleGenConfig, g: np.random.Generator) -> list[Project]:
    pool = _all_skills(cfg)
    role_pool = list(cfg.roles)
    projects: list[Project] = []
    for i in range(cfg.n_projects):
        start = cfg.as_of - timedelta(days=int(g.integers(0, 90)))
        roles = _pick(g, role_pool, cfg.roles_per_project)
        skills = _pick(g, pool, cfg.skills_per_project)
        lo, hi = cfg.seats_per_role
        projects.append(
            Project(
                id=i + 1,
                name=f"Project {i + 1:02d}",
                client=str(g.choice(CLIENTS)),
                required_skills=skills,
                required_roles=[
                    RoleRequirement(
                        role_id=role_pool.index(r) + 1,
                        name=r,
                        count=int(g.integers(max(lo, 1), hi + 1)),
                    )
                    for r in roles
                ],
                start_date=start,
                end_date=start + timedelta(days=int(g.integers(60, 240))),
                required_proficiency={
                    s: str(g.choice(cfg.proficiency_levels, p=cfg.proficiency_probs))
                    for s in skills
                },
            )
        )
    return projects


def create_resources(
    cfg: SampleGenConfig, projects: list[Project], g: np.random.Generator
) -> list[Resource]:
    pool = _all_skills(cfg)
    probs = np.array(cfg.role_probs, dtype=float)
    counts = _deterministic_counts(cfg.n_resources, probs)
    role_values = np.concatenate(
        [np.full(c, idx, dtype=int) for idx, c in enumerate(counts)]
    )
    g.shuffle(role_values)

    names = [f"{first} {last}" for last in LAST_NAMES for first in FIRST_NAMES]
    allocated_flags = g.random(cfg.n_resources) < cfg.allocated_pct

    resources: list[Resource] = []
    for i in range(cfg.n_resources):
        skills = _pick(g, pool, cfg.skills_per_resource)
        allocations: list[Allocation] = []
        if allocated_flags[i] and projects:
            n_alloc = int(g.integers(1, cfg.max_allocations + 1))
            chosen = g.choice(
                len(projects), size=min(n_alloc, len(projects)), replace=False
            )
            for pi in chosen:
                p = projects[int(pi)]
                open_ended = bool(g.random() < cfg.open_ended_pct)
                allocations.append(
                    Allocation(
                        project_id=p.id,
                        utilization=int(
                            g.choice(cfg.utilization_choices, p=cfg.utilization_weights)
                        ),
                        start_date=p.start_date,
                        end_date=None
                        if open_ended
                        else cfg.as_of + timedelta(days=int(g.integers(1, 120))),
                    )
                )
        role_idx = int(role_values[i])
        resources.append(
            Resource(
                id=i + 1,
                name=names[i],
                role=cfg.roles[role_idx],
                role_id=role_idx + 1,
                skills=skills,
                allocations=allocations,
                proficiency={
                    s: str(g.choice(cfg.proficiency_levels, p=cfg.proficiency_probs))
                    for s in skills
                },
            )
        )
    return resources


def create_trends(cfg: SampleGenConfig, g: np.random.Generator) -> list[MarketTrend]:
    category = {s: c for c, names in cfg.catalog.items() for s in names}
    return [
        MarketTrend(
            name=name,
            category=category.get(name),
            demand_score=round(float(g.uniform(40, 95)), 1),
            growth_rate=round(float(g.uniform(5, 40)), 1),
        )
        for name in cfg.trend_skills
    ]


def build_sample_snapshot(cfg: SampleGenConfig | None = None) -> Snapshot:
    """Generate a full synthetic Snapshot (skills, projects, resources, trends)."""
    cfg = cfg or SampleGenConfig()
    cfg.validate()
    g = _rng(cfg.seed)
    skills = create_skills(cfg)
    projects = create_projects(cfg, g)
    resources = create_resources(cfg, projects, g)
    trends = create_trends(cfg, g)
    return Snapshot(
        resources=resources, projects=projects, skills=skills, trends=trends
    )


def sample_summary(snapshot: Snapshot) -> dict:
    n = len(snapshot.resources)
    roles = Counter(r.role for r in snapshot.resources)
    totals = [total_utilization(r) for r in snapshot.resources]
    return {
        "resources": n,
        "projects": len(snapshot.projects),
        "roles": roles,
        "allocated_pct": sum(t > 0 for t in totals) / n if n else 0.0,
        "over_allocated_pct": sum(t > 100 for t in totals) / n if n else 0.0,
        "avg_skills": (
            float(np.mean([len(r.skills) for r in snapshot.resources])) if n else 0.0
        ),
    }

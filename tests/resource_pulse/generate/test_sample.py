from __future__ import annotations

from datetime import date

import numpy as np
import pytest

from resource_pulse.generate.sample import (
    SampleGenConfig,
    _deterministic_counts,
    build_sample_snapshot,
    create_projects,
    create_skills,
    sample_summary,
)

AS_OF = date(2024, 1, 1)


def test_deterministic_counts_respects_total_and_rounding():
    probs = np.array([0.2, 0.3, 0.5])
    counts = _deterministic_counts(7, probs)
    assert counts.sum() == 7
    assert np.all(np.abs(counts - probs * 7) <= 1.0)


def test_config_validation_detects_invalid_probabilities():
    cfg = SampleGenConfig(role_probs=(0.5, 0.5, 0.5, 0.0, 0.0))
    with pytest.raises(ValueError, match="role_probs must sum to 1.0"):
        cfg.validate()
    with pytest.raises(ValueError, match="Not enough name combinations"):
        SampleGenConfig(n_resources=10_000).validate()


def test_create_skills_follows_catalog():
    cfg = SampleGenConfig(catalog={"Data": ("SQL", "Pandas"), "Design": ("Figma",)})
    skills = create_skills(cfg)
    assert [(s.id, s.name, s.category) for s in skills] == [
        (1, "SQL", "Data"),
        (2, "Pandas", "Data"),
        (3, "Figma", "Design"),
    ]


def test_projects_respect_bounds():
    cfg = SampleGenConfig(n_projects=20, as_of=AS_OF, seed=1)
    projects = create_projects(cfg, np.random.default_rng(1))
    assert len(projects) == 20
    for p in projects:
        assert 1 <= len(p.required_skills) <= 3
        assert 1 <= len(p.required_roles) <= 2
        assert all(1 <= r.count <= 3 for r in p.required_roles)
        assert set(p.required_proficiency) == set(p.required_skills)
        assert p.start_date <= AS_OF
        assert p.start_date < p.end_date


def test_snapshot_is_reproducible_for_a_seed():
    a = build_sample_snapshot(SampleGenConfig(seed=11, as_of=AS_OF))
    b = build_sample_snapshot(SampleGenConfig(seed=11, as_of=AS_OF))
    assert a.resources == b.resources
    assert [p.required_skills for p in a.projects] == [
        p.required_skills for p in b.projects
    ]


def test_snapshot_contents():
    cfg = SampleGenConfig(n_resources=30, n_projects=8, as_of=AS_OF, seed=5)
    snap = build_sample_snapshot(cfg)
    assert len(snap.resources) == 30
    assert len({r.name for r in snap.resources}) == 30
    assert snap.skill_categories["CAD"] == "Engineering"
    assert [t.name for t in snap.trends] == list(cfg.trend_skills)
    project_ids = {p.id for p in snap.projects}
    for r in snap.resources:
        assert r.role in cfg.roles
        assert all(a.project_id in project_ids for a in r.allocations)
        assert len(r.allocations) <= cfg.max_allocations

    summary = sample_summary(snap)
    assert summary["resources"] == 30
    assert sum(summary["roles"].values()) == 30
    assert 0.0 <= summary["allocated_pct"] <= 1.0

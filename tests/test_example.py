"""Smoke tests for the example entry points shipped next to the package."""

from __future__ import annotations

import shutil
from pathlib import Path

import example


def test_example_option_three_reads_json(project_root: Path, capsys) -> None:
    src = Path("src")
    src.mkdir()
    shutil.copy(project_root / "src" / "example_snapshot.json", src)
    example.run_option(3)
    out = capsys.readouterr().out
    assert "Input: 5 resources | 3 projects | 5 skills | 3 market trends" in out
    assert "Recommendations for the next month" in out
    assert Path("outputs/report.txt").exists()


def test_example_option_two_builds_plan(capsys) -> None:
    example.run_option(2)
    out = capsys.readouterr().out
    assert "Staffing plan solver status:" in out


def test_example_option_one_summarises_generated_data(monkeypatch, capsys) -> None:
    calls = []
    monkeypatch.setattr(example, "run_analysis", lambda **kw: calls.append(kw))
    example.run_option(1)
    out = capsys.readouterr().out
    assert "Generated " in out and " resources and " in out
    assert "avg skills" in out
    assert calls[0]["plan"] is True
    assert calls[0]["snapshot"].resources

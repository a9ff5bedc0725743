# tests/resource_pulse/test_progress.py
import re
from unittest.mock import patch

import pytest
from ortools.sat.python import cp_model

from resource_pulse.progress import MinimalProgress


@pytest.fixture
def solver():
    """CpSolver with a short time limit so the test runs fast."""
    s = cp_model.CpSolver()
    s.parameters.max_time_in_seconds = 0.2
    s.parameters.log_search_progress = False
    return s


@pytest.fixture
def callback():
    """
    MinimalProgress that logs on the first solution.
    Set log_every_sec=0 so the first solution triggers a print immediately.
    """
    return MinimalProgress(time_limit_sec=0.2, log_every_sec=0.0)


@pytest.fixture
def mock_print():
    """Patch print in the progress module to capture output."""
    with patch("resource_pulse.progress.print") as m:
        yield m


def build_tiny_model():
    """
    Small assignment-like model: pick at most two of four scored candidates.
    """
    m = cp_model.CpModel()
    picks = [m.NewBoolVar(f"x{i}") for i in range(4)]
    m.Add(sum(picks) <= 2)
    m.Maximize(sum(score * x for score, x in zip((40, 80, 60, 100), picks)))
    return m


def test_progress_callback_is_called(solver, callback, mock_print):
    model = build_tiny_model()

    status = solver.SolveWithSolutionCallback(model, callback)

    assert status in (cp_model.OPTIMAL, cp_model.FEASIBLE)
    assert mock_print.call_count >= 2, "Expected a legend and a progress line"

    args, _ = mock_print.call_args  # last call
    line = args[0] if args else ""
    assert "score=" in line
    assert "bound=" in line
    assert "ratio=" in line
    assert "sols=" in line
    assert re.match(r"^\[\s*\d+(\.\d+)?s\]\s", line)


def test_history_records_every_solution(solver, callback, mock_print):
    solver.SolveWithSolutionCallback(build_tiny_model(), callback)

    history = callback.solution_history()
    assert len(history) == callback.sols
    assert history[-1][1] == 180
    # returned list is a copy
    history.clear()
    assert callback.history

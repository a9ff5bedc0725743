from ortools.sat.python import cp_model


class MinimalProgress(cp_model.CpSolverSolutionCallback):
    """
    Solution callback that prints how the staffing plan's total match score
    improves while CP-SAT searches, throttled to one line per `log_every_sec`.
    """

    def __init__(self, time_limit_sec: float, log_every_sec: float = 5.0):
        super().__init__()
        self.time_limit = (
            float(time_limit_sec) if time_limit_sec and time_limit_sec > 0 else None
        )
        self.log_every = float(log_every_sec)
        self.last_time = -1.0
        self.last_logged_score: float | None = None
        self.sols = 0
        self._width = 0
        self.history: list[tuple[float, float, float]] = []

    def _legend(self) -> None:
        print(
            "\nscore: total match score of the best plan found so far\n"
            "bound: upper bound on the achievable total score\n"
            "ratio: score / bound (1.00 means proven optimal)\n"
        )

    def OnSolutionCallback(self):
        if self.sols == 0:
            self._legend()

        self.sols += 1
        now = self.WallTime()
        score = self.ObjectiveValue()
        bound = self.BestObjectiveBound()
        self.history.append((now, score, bound))

        if self.last_time >= 0 and (now - self.last_time) < self.log_every:
            return

        score_str = f"{score:,.0f}"
        self._width = max(self._width, len(score_str))
        ratio = f"{score / bound:,.2f}" if abs(bound) > 1e-9 else "n/a"
        delta = (
            ""
            if self.last_logged_score is None
            else f" (+{score - self.last_logged_score:,.0f})"
        )
        if self.time_limit:
            used = f"{min(100.0, 100.0 * now / self.time_limit):6.2f}%"
        else:
            used = "  n/a "
        print(
            f"[{now:5.1f}s] time used={used} "
            f"| score={score_str.ljust(self._width)}{delta} "
            f"| bound={bound:,.0f} | ratio={ratio} | sols={self.sols}",
            flush=True,
        )
        self.last_time = now
        self.last_logged_score = score

    def solution_history(self) -> list[tuple[float, float, float]]:
        """Return collected (wall_time, score, bound) tuples."""
        return list(self.history)

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.patches import Patch

from .data_models import BandSlice
from .metrics import BAND_COLORS, SHORTAGE_COLOR, SURPLUS_COLOR
from .text_report import get_active_report


def _save_and_show(fig: plt.Figure, filename: str) -> None:
    """Persist the plot under outputs/ and show it."""
    out_dir = Path("outputs")
    out_dir.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_dir / filename, dpi=fig.dpi, bbox_inches="tight")
    plt.show()


def _register(filename: str) -> None:
    report = get_active_report()
    if report is not None:
        report.add_figure(filename)


def show_gap_chart(
    df_chart: pd.DataFrame,
    title: str = "Skills gap (available - required)",
    filename: str = "skills_gap_chart.png",
) -> None:
    """
    Horizontal bars of gap per skill, largest shortage at the top.

    `df_chart` is the output of metrics.gap_chart_frame.
    """
    if df_chart.empty:
        return

    n = len(df_chart)
    fig, ax = plt.subplots(figsize=(7.5, 1.5 + 0.35 * n), dpi=150)
    y = list(range(n))[::-1]
    ax.barh(
        y,
        df_chart["gap"].astype(float),
        color=list(df_chart["color"]),
        height=0.7,
        edgecolor="none",
        zorder=3,
    )
    ax.set_yticks(y, list(df_chart["skill_name"]))
    ax.axvline(0, color="0.3", linewidth=0.8, zorder=2)
    ax.set_xlabel("Available resources - requiring projects")
    ax.set_title(title, pad=30)

    for yi, (_, row) in zip(y, df_chart.iterrows()):
        label = f"{int(row['available'])}/{int(row['required'])}"
        gap = float(row["gap"])
        ax.text(
            gap + (0.1 if gap >= 0 else -0.1),
            yi,
            label,
            va="center",
            ha="left" if gap >= 0 else "right",
            fontsize=7,
            color="0.25",
        )

    lo = min(0.0, float(df_chart["gap"].min())) - 1
    hi = max(0.0, float(df_chart["gap"].max())) + 1
    ax.set_xlim(lo, hi)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(axis="x", alpha=0.3, zorder=0)
    ax.legend(
        handles=[
            Patch(facecolor=SHORTAGE_COLOR, label="Shortage"),
            Patch(facecolor=SURPLUS_COLOR, label="Covered / surplus"),
        ],
        loc="upper center",
        bbox_to_anchor=(0.5, 1.08),
        ncol=2,
        frameon=False,
    )
    fig.tight_layout()
    _save_and_show(fig, filename)
    _register(filename)


def show_utilization_pie(slices: Sequence[BandSlice]) -> None:
    """Pie of the resource pool by utilization band."""
    if not slices:
        return
    fig, ax = plt.subplots(figsize=(5.5, 4.5), dpi=150)
    ax.pie(
        [s.count for s in slices],
        labels=[f"{s.band}\n{s.count} ({s.percentage:.0f}%)" for s in slices],
        colors=[BAND_COLORS.get(s.band, "#cbd5e1") for s in slices],
        startangle=90,
        counterclock=False,
        wedgeprops={"linewidth": 1, "edgecolor": "white"},
        textprops={"fontsize": 8},
    )
    ax.set_title("Resource utilization")
    ax.axis("equal")
    fig.tight_layout()
    _save_and_show(fig, "utilization_bands.png")
    _register("utilization_bands.png")


def show_category_scores(df_categories: pd.DataFrame) -> None:
    """Bar chart of per-category gap score (0 = covered, 1 = no supply)."""
    if df_categories.empty:
        return
    df = df_categories.sort_values("gap_score", ascending=True)
    fig, ax = plt.subplots(figsize=(7.5, 1.5 + 0.35 * len(df)), dpi=150)
    colors = ["#94a3b8" if o else SHORTAGE_COLOR for o in df["oversupply"]]
    ax.barh(list(df["category"]), list(df["gap_score"]), color=colors, zorder=3)
    ax.set_xlim(0, 1)
    ax.set_xlabel("Gap score")
    ax.set_title("Gap score by skill category")
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(axis="x", alpha=0.3, zorder=0)
    fig.tight_layout()
    _save_and_show(fig, "category_gap_scores.png")
    _register("category_gap_scores.png")


def show_solution_progress(history: Sequence[tuple[float, float, float]]) -> None:
    """
    Step plot of the staffing plan's total match score against solver time,
    with the proven upper bound and the remaining gap shaded between them.

    history entries are (wall_time_sec, score, bound).
    """
    if not history:
        return
    times = [pt[0] for pt in history]
    scores = [pt[1] for pt in history]
    bounds = [pt[2] for pt in history]

    fig, ax = plt.subplots(figsize=(7.5, 4), dpi=150)
    ax.step(times, scores, where="post", color="tab:blue", label="Total match score")
    ax.step(
        times,
        bounds,
        where="post",
        color="tab:red",
        linestyle="--",
        linewidth=1.25,
        label="Upper bound",
    )
    ax.fill_between(
        times, scores, bounds, step="post", color="tab:red", alpha=0.08, zorder=0
    )
    for t, s in zip(times, scores):
        ax.plot(t, s, marker="o", markersize=3, color="tab:blue")

    ax.set_xlabel("Solver time (seconds)")
    ax.set_ylabel("Total match score")
    ax.set_title(
        f"Staffing plan search: {len(history)} solution(s), best={max(scores):,.0f}",
        pad=30,
    )
    ax.set_xlim(*_expand_limits(times, axis_padding=0.02))
    ax.set_ylim(*_expand_limits(scores + bounds))
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.legend(loc="upper center", bbox_to_anchor=(0.5, 1.12), ncol=2, frameon=False)
    ax.grid(alpha=0.3)
    fig.tight_layout()
    _save_and_show(fig, "plan_progress.png")
    _register("plan_progress.png")


def _expand_limits(
    values: Sequence[float], axis_padding: float = 0.05
) -> tuple[float, float]:
    lo = min(values)
    hi = max(values)
    if lo == hi:
        delta = max(abs(lo), 1.0) * max(axis_padding, 0.05)
        return lo - delta, hi + delta
    span = hi - lo
    pad = span * axis_padding
    return lo - pad, hi + pad

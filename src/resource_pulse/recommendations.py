from __future__ import annotations

from typing import Iterable, NamedTuple, Optional, Sequence

from resource_pulse.config import TIMEFRAME_LABELS, Config, cfg, validate_timeframe
from resource_pulse.gaps import estimate_overall_gap_score
from resource_pulse.models import MarketTrend
from resource_pulse.result_types import (
    CategoryGapScore,
    GapEntry,
    RecommendationItem,
    RecommendationReport,
    RecommendationSummary,
    RoleGap,
)

CRITICAL = "critical"
HIGH_DEMAND = "high_demand"
EMERGING = "emerging"

BUCKET_PRIORITY = {CRITICAL: "High", HIGH_DEMAND: "Medium", EMERGING: "Low"}


class Action(NamedTuple):
    action: str
    training_type: str
    hiring_timeframe: str


# (priority, timeframe) -> what to do about it
ACTION_TABLE: dict[tuple[str, str], Action] = {
    ("High", "1month"): Action("hire", "External hire", "Immediate (within 2 weeks)"),
    ("High", "3months"): Action("hire", "Intensive bootcamp", "Within 1 month"),
    ("High", "6months"): Action("train", "Certification program", "Within 3 months"),
    ("High", "1year"): Action("train", "Internal academy", "Within 6 months"),
    ("Medium", "1month"): Action("hire", "Contract hire", "Within 1 month"),
    ("Medium", "3months"): Action("train", "Online courses", "Within 3 months"),
    ("Medium", "6months"): Action("train", "Certification program", "Within 6 months"),
    ("Medium", "1year"): Action("train", "Mentoring", "Within 12 months"),
    ("Low", "1month"): Action("monitor", "Self-paced learning", "Not required"),
    ("Low", "3months"): Action("monitor", "Self-paced learning", "Not required"),
    ("Low", "6months"): Action("monitor", "Online courses", "Review in 6 months"),
    ("Low", "1year"): Action("plan", "Long-term development plan", "Within 12 months"),
}

# demand is high but current supply already covers it
COVERED_ACTION = Action("monitor", "Cross-training", "Not required")


def lookup_action(priority: str, timeframe: str) -> Action:
    validate_timeframe(timeframe)
    try:
        return ACTION_TABLE[(priority, timeframe)]
    except KeyError as exc:
        raise ValueError(f"Unknown priority {priority!r}") from exc


def demand_percentage(required: int, total_projects: int) -> float:
    return round(100.0 * required / total_projects, 2) if total_projects else 0.0


def _bucket(
    gap: int,
    required: int,
    available: int,
    demand_pct: float,
    growth: Optional[float],
    config: Config,
) -> Optional[str]:
    shortage = required > 0 and gap < 0
    if shortage and demand_pct > config.CRITICAL_DEMAND_PCT:
        return CRITICAL
    if demand_pct > config.HIGH_DEMAND_PCT:
        return HIGH_DEMAND
    if (
        growth is not None
        and available <= config.EMERGING_MAX_AVAILABLE
        and growth > config.EMERGING_MIN_GROWTH
    ):
        return EMERGING
    return None


def _item(
    name: str,
    kind: str,
    category: Optional[str],
    bucket: str,
    timeframe: str,
    available: int,
    required: int,
    demand_pct: float,
    growth: Optional[float],
) -> RecommendationItem:
    priority = BUCKET_PRIORITY[bucket]
    act = lookup_action(priority, timeframe)
    headcount = max(0, required - available)
    if act.action == "hire" and headcount == 0:
        act = COVERED_ACTION
    return RecommendationItem(
        name=name,
        kind=kind,
        category=category,
        bucket=bucket,
        priority=priority,
        action=act.action,
        recommended_training_type=act.training_type,
        hiring_timeframe=act.hiring_timeframe,
        available=available,
        required=required,
        demand_percentage=demand_pct,
        growth_rate=growth,
        headcount=headcount,
    )


def _sort_items(items: list[RecommendationItem]) -> list[RecommendationItem]:
    return sorted(items, key=lambda i: (-i.headcount, -i.demand_percentage, i.name))


def _by_growth(item: RecommendationItem) -> tuple[float, str]:
    return (-(item.growth_rate or 0.0), item.name)


def build_recommendations(
    gaps: Sequence[GapEntry],
    total_projects: int,
    timeframe: Optional[str] = None,
    config: Config = cfg,
    trends: Iterable[MarketTrend] = (),
    role_gaps: Sequence[RoleGap] = (),
    overall_gap_score: Optional[float] = None,
    category_scores: Sequence[CategoryGapScore] = (),
) -> RecommendationReport:
    """
    Bucket skills and roles into critical / high-demand / emerging tiers and
    attach an action from ACTION_TABLE.

    Parameters:
    gaps: per-skill gap report (see gaps.compute_gaps)
    total_projects (int): denominator for demand percentages
    timeframe (str): one of config.TIMEFRAMES; defaults to config.DEFAULT_TIMEFRAME
    trends: external growth signals, routed to skills or roles by `kind`
    role_gaps: per-role gap report (see gaps.compute_role_gaps)
    overall_gap_score (float, optional): upstream value; estimated from
        `category_scores` when omitted

    Returns:
    RecommendationReport

    The timeframe only selects labels from ACTION_TABLE; it never changes
    which skills land in which bucket.
    """
    tf = validate_timeframe(timeframe or config.DEFAULT_TIMEFRAME)

    skill_trends: dict[str, MarketTrend] = {}
    role_trends: dict[str, MarketTrend] = {}
    for t in trends:
        (role_trends if t.kind == "role" else skill_trends)[t.name] = t

    critical: list[RecommendationItem] = []
    high: list[RecommendationItem] = []
    emerging: list[RecommendationItem] = []

    seen: set[str] = set()
    for g in gaps:
        seen.add(g.skill_name)
        trend = skill_trends.get(g.skill_name)
        growth = trend.growth_rate if trend is not None else None
        pct = demand_percentage(g.required, total_projects)
        bucket = _bucket(g.gap, g.required, g.available, pct, growth, config)
        if bucket is None:
            continue
        item = _item(
            g.skill_name,
            "skill",
            g.category or (trend.category if trend else None),
            bucket,
            tf,
            g.available,
            g.required,
            pct,
            growth,
        )
        {CRITICAL: critical, HIGH_DEMAND: high, EMERGING: emerging}[bucket].append(item)

    # trending skills nobody holds or requires yet
    for name, trend in skill_trends.items():
        if name in seen:
            continue
        bucket = _bucket(0, 0, 0, 0.0, trend.growth_rate, config)
        if bucket == EMERGING:
            emerging.append(
                _item(
                    name,
                    "skill",
                    trend.category,
                    bucket,
                    tf,
                    0,
                    0,
                    0.0,
                    trend.growth_rate,
                )
            )

    high_roles: list[RecommendationItem] = []
    emerging_roles: list[RecommendationItem] = []
    for rg in role_gaps:
        trend = role_trends.get(rg.role_name)
        growth = trend.growth_rate if trend is not None else None
        bucket = _bucket(
            rg.gap, rg.required, rg.available, rg.demand_percentage, growth, config
        )
        if bucket is None:
            continue
        item = _item(
            rg.role_name,
            "role",
            None,
            bucket,
            tf,
            rg.available,
            rg.required,
            rg.demand_percentage,
            growth,
        )
        (emerging_roles if bucket == EMERGING else high_roles).append(item)

    if overall_gap_score is None:
        score = estimate_overall_gap_score(category_scores)
        estimated = True
    else:
        score = float(overall_gap_score)
        estimated = False

    all_items = critical + high + emerging + high_roles + emerging_roles
    summary = RecommendationSummary(
        timeframe=tf,
        timeframe_label=TIMEFRAME_LABELS[tf],
        critical_count=len(critical),
        high_demand_count=len(high) + len(high_roles),
        emerging_count=len(emerging) + len(emerging_roles),
        total_hiring_headcount=sum(
            i.headcount for i in all_items if i.action == "hire"
        ),
        training_needed=sum(1 for i in all_items if i.action == "train"),
        skills_covered=sum(1 for g in gaps if g.required > 0 and g.gap >= 0),
        overall_gap_score=round(score, 4),
        overall_gap_score_estimated=estimated,
    )

    return RecommendationReport(
        critical_skills=_sort_items(critical),
        high_demand_skills=_sort_items(high),
        emerging_skills=sorted(emerging, key=_by_growth),
        high_demand_roles=_sort_items(high_roles),
        emerging_roles=sorted(emerging_roles, key=_by_growth),
        summary=summary,
    )

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from resource_pulse.config import Config, cfg
from resource_pulse.models import Resource
from resource_pulse.result_types import (
    EndingSoonEntry,
    UtilizationBand,
    UtilizationSummary,
)


FULL_ALLOCATION_PCT = 100


def total_utilization(resource: Resource) -> int:
    """
    Sum of `utilization` over every allocation attached to the resource.

    Expired allocations are included; no date filtering is applied.
    """
    return int(round(sum(float(a.utilization or 0) for a in resource.allocations)))


def utilization_band(total: float) -> UtilizationBand:
    """Bands are fixed at 100%; MAX_UTILIZATION only governs availability."""
    if total <= 0:
        return UtilizationBand.UNALLOCATED
    if total < FULL_ALLOCATION_PCT:
        return UtilizationBand.PARTIAL
    if total == FULL_ALLOCATION_PCT:
        return UtilizationBand.FULL
    return UtilizationBand.OVER


def summarize_utilization(resources: Sequence[Resource]) -> UtilizationSummary:
    """Band counts over the pool. Counts always sum to len(resources)."""
    counts = {band: 0 for band in UtilizationBand}
    totals = [total_utilization(r) for r in resources]
    for t in totals:
        counts[utilization_band(t)] += 1

    n = len(resources)
    percentages = {
        band: (round(100.0 * c / n, 2) if n else 0.0) for band, c in counts.items()
    }
    avg = round(sum(totals) / n, 2) if n else 0.0
    return UtilizationSummary(
        total_resources=n,
        counts=counts,
        percentages=percentages,
        average_utilization=avg,
    )


def days_until_available(resource: Resource, as_of: date) -> Optional[int]:
    """Days until the nearest-ending in-progress allocation ends, None if none ends."""
    remaining = [
        (a.end_date - as_of).days
        for a in resource.allocations
        if a.end_date is not None and a.is_in_progress(as_of)
    ]
    return min(remaining) if remaining else None


def ending_soon(
    resources: Iterable[Resource],
    days: Optional[int] = None,
    as_of: Optional[date] = None,
    config: Config = cfg,
) -> list[EndingSoonEntry]:
    """
    Allocations ending within `days` of `as_of` (inclusive), soonest first.

    Open-ended allocations never appear.
    """
    window = config.ENDING_SOON_DAYS if days is None else int(days)
    if window < 0:
        raise ValueError("days must be non-negative.")
    today = as_of or config.as_of()
    limit = today + timedelta(days=window)

    out: list[EndingSoonEntry] = []
    for r in resources:
        for a in r.allocations:
            if a.end_date is None or not (today <= a.end_date <= limit):
                continue
            out.append(
                EndingSoonEntry(
                    resource_id=r.id,
                    resource_name=r.name,
                    role=r.role,
                    project_id=a.project_id,
                    utilization=a.utilization,
                    end_date=a.end_date,
                    days_left=(a.end_date - today).days,
                )
            )
    out.sort(key=lambda e: (e.end_date, e.resource_name, str(e.resource_id)))
    return out


def overallocated(resources: Iterable[Resource]) -> list[tuple[Resource, int]]:
    """Resources above 100% (the Over-allocated band), most overloaded first."""
    hits = [(r, total_utilization(r)) for r in resources]
    hits = [(r, t) for r, t in hits if t > FULL_ALLOCATION_PCT]
    hits.sort(key=lambda rt: (-rt[1], rt[0].name))
    return hits


def unallocated(resources: Iterable[Resource]) -> list[Resource]:
    return [r for r in resources if total_utilization(r) <= 0]

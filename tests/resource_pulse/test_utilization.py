from __future__ import annotations

from datetime import date

import pytest

from resource_pulse.config import Config
from resource_pulse.matching import score_resource
from resource_pulse.models import Allocation, Project, Resource
from resource_pulse.result_types import UtilizationBand
from resource_pulse.utilization import (
    days_until_available,
    ending_soon,
    overallocated,
    summarize_utilization,
    total_utilization,
    unallocated,
    utilization_band,
)

AS_OF = date(2024, 1, 1)


def make_cfg() -> Config:
    return Config(AS_OF=AS_OF, ENDING_SOON_DAYS=14)


def make_resource(rid: int, *allocs: tuple[float, str | None]) -> Resource:
    return Resource(
        id=rid,
        name=f"R{rid}",
        role="Developer",
        allocations=[
            Allocation(project_id=i, utilization=u, end_date=end)
            for i, (u, end) in enumerate(allocs)
        ],
    )


def test_total_utilization_sums_all_allocations():
    r = make_resource(1, (60, "2024-01-10"), (50, None))
    assert total_utilization(r) == 110
    assert utilization_band(total_utilization(r)) == UtilizationBand.OVER


@pytest.mark.parametrize(
    "total, band",
    [
        (0, UtilizationBand.UNALLOCATED),
        (1, UtilizationBand.PARTIAL),
        (99, UtilizationBand.PARTIAL),
        (100, UtilizationBand.FULL),
        (101, UtilizationBand.OVER),
    ],
)
def test_utilization_band_boundaries(total, band):
    assert utilization_band(total) == band


def test_summary_counts_sum_to_pool_size():
    pool = [
        make_resource(1),
        make_resource(2, (50, None)),
        make_resource(3, (100, None)),
        make_resource(4, (60, None), (50, None)),
    ]
    s = summarize_utilization(pool)
    assert s.total_resources == 4
    assert sum(s.counts.values()) == 4
    assert all(c == 1 for c in s.counts.values())
    assert s.percentages[UtilizationBand.FULL] == 25.0
    assert s.average_utilization == 65.0


def test_summary_of_empty_pool():
    s = summarize_utilization([])
    assert s.total_resources == 0
    assert s.average_utilization == 0.0
    assert set(s.percentages.values()) == {0.0}


def test_bands_stay_at_100_when_max_utilization_is_raised():
    pool = [make_resource(1, (100, None)), make_resource(2, (60, None), (50, None))]
    s = summarize_utilization(pool)
    assert s.counts[UtilizationBand.FULL] == 1
    assert s.counts[UtilizationBand.OVER] == 1
    assert [r.id for r, _ in overallocated(pool)] == [2]

    # a higher ceiling only changes availability
    c = Config(AS_OF=AS_OF, MAX_UTILIZATION=120, PLAN_ALLOCATION_PCT=20)
    p = Project(id=5, name="P", required_skills=["Go"])
    m = score_resource(p, pool[1], AS_OF, c)
    assert m.availability_status == "available"
    assert utilization_band(m.total_utilization) == UtilizationBand.OVER


def test_ending_soon_window_is_inclusive_and_skips_open_ended():
    pool = [
        make_resource(1, (50, "2024-01-15")),  # exactly 14 days
        make_resource(2, (50, "2024-01-16")),  # outside
        make_resource(3, (50, None)),  # open-ended
        make_resource(4, (25, "2024-01-01")),  # today
        make_resource(5, (25, "2023-12-31")),  # already ended
    ]
    hits = ending_soon(pool, as_of=AS_OF, config=make_cfg())
    assert [e.resource_name for e in hits] == ["R4", "R1"]
    assert [e.days_left for e in hits] == [0, 14]


def test_ending_soon_rejects_negative_window():
    with pytest.raises(ValueError):
        ending_soon([], days=-1, as_of=AS_OF)


def test_days_until_available_uses_nearest_in_progress_end():
    r = make_resource(1, (50, "2024-01-20"), (50, "2024-01-05"), (10, "2023-12-01"))
    assert days_until_available(r, AS_OF) == 4
    assert days_until_available(make_resource(2, (100, None)), AS_OF) is None


def test_overallocated_and_unallocated():
    a = make_resource(1, (80, None), (80, None))
    b = make_resource(2, (70, None), (40, None))
    c = make_resource(3)
    assert [(r.id, t) for r, t in overallocated([b, a, c])] == [(1, 160), (2, 110)]
    assert unallocated([a, b, c]) == [c]

import os
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

TIMEFRAMES: tuple[str, ...] = ("1month", "3months", "6months", "1year")

TIMEFRAME_LABELS: dict[str, str] = {
    "1month": "next month",
    "3months": "next 3 months",
    "6months": "next 6 months",
    "1year": "next year",
}


@dataclass
class Config:

    # Reference date for availability / ending-soon calculations (None = today)
    AS_OF: Optional[date] = None

    ### UTILIZATION ###

    # A resource at or above this total is no longer "available"
    MAX_UTILIZATION: int = 100
    ENDING_SOON_DAYS: int = 14

    ### MATCHING ###

    # Score weights; SKILL_WEIGHT + ROLE_WEIGHT must equal 100
    SKILL_WEIGHT: float = 60.0
    ROLE_WEIGHT: float = 40.0

    # Share of ROLE_WEIGHT granted when the role matches but its seats are filled
    ROLE_FILLED_FACTOR: float = 0.5

    # Max candidates kept per project by find_resource_matches (None = all)
    MATCH_LIMIT: Optional[int] = 10

    ### RECOMMENDATIONS ###

    CRITICAL_DEMAND_PCT: float = 50.0
    HIGH_DEMAND_PCT: float = 25.0
    EMERGING_MAX_AVAILABLE: int = 2
    EMERGING_MIN_GROWTH: float = 15.0

    # Unrequired skills held by more than this share of resources count as oversupply
    OVERSUPPLY_COVERAGE_PCT: float = 30.0

    DEFAULT_TIMEFRAME: str = "6months"

    ### STAFFING PLANNER ###

    # Utilization consumed by each proposed assignment
    PLAN_ALLOCATION_PCT: int = 50
    TIME_LIMIT_SEC: float = 10.0
    NUM_PARALLEL_WORKERS: int = 4
    LOG_SOLUTIONS_FREQUENCY_SECONDS: float = 5.0

    ### BACKEND API ###

    API_BASE_URL: str = field(
        default_factory=lambda: os.getenv(
            "RESOURCE_PULSE_API_URL", "http://localhost:8000/api"
        )
    )
    API_TIMEOUT_SEC: float = 10.0

    # RANDOM SEED (synthetic data)
    SEED: Optional[int] = None

    def validate(self):
        """
        Validate the Config object has sensible values before running an analysis.
        """
        if self.MAX_UTILIZATION <= 0:
            raise ValueError("MAX_UTILIZATION must be > 0.")
        if self.ENDING_SOON_DAYS < 0:
            raise ValueError("ENDING_SOON_DAYS must be non-negative.")
        if self.SKILL_WEIGHT < 0 or self.ROLE_WEIGHT < 0:
            raise ValueError("SKILL_WEIGHT and ROLE_WEIGHT must be non-negative.")
        if abs(self.SKILL_WEIGHT + self.ROLE_WEIGHT - 100.0) > 1e-9:
            raise ValueError("SKILL_WEIGHT + ROLE_WEIGHT must equal 100.")
        if not (0.0 <= self.ROLE_FILLED_FACTOR <= 1.0):
            raise ValueError("ROLE_FILLED_FACTOR must be within [0, 1].")
        if self.MATCH_LIMIT is not None and self.MATCH_LIMIT <= 0:
            raise ValueError("MATCH_LIMIT must be > 0 or None.")
        if not (0.0 <= self.HIGH_DEMAND_PCT <= self.CRITICAL_DEMAND_PCT <= 100.0):
            raise ValueError(
                "Require 0 <= HIGH_DEMAND_PCT <= CRITICAL_DEMAND_PCT <= 100."
            )
        if self.EMERGING_MAX_AVAILABLE < 0:
            raise ValueError("EMERGING_MAX_AVAILABLE must be non-negative.")
        if not (0.0 <= self.OVERSUPPLY_COVERAGE_PCT <= 100.0):
            raise ValueError("OVERSUPPLY_COVERAGE_PCT must be within [0, 100].")
        if self.DEFAULT_TIMEFRAME not in TIMEFRAMES:
            raise ValueError(f"DEFAULT_TIMEFRAME must be one of {TIMEFRAMES}.")
        if not (0 < self.PLAN_ALLOCATION_PCT <= self.MAX_UTILIZATION):
            raise ValueError("Require 0 < PLAN_ALLOCATION_PCT <= MAX_UTILIZATION.")
        if self.TIME_LIMIT_SEC <= 0.0:
            raise ValueError("TIME_LIMIT_SEC must be > 0.")
        if self.NUM_PARALLEL_WORKERS <= 0:
            raise ValueError("NUM_PARALLEL_WORKERS must be > 0.")
        if self.API_TIMEOUT_SEC <= 0.0:
            raise ValueError("API_TIMEOUT_SEC must be > 0.")

    def as_of(self) -> date:
        """Reference date for date-relative calculations."""
        return self.AS_OF or date.today()


def validate_timeframe(timeframe: str) -> str:
    if timeframe not in TIMEFRAMES:
        raise ValueError(
            f"Unknown timeframe {timeframe!r}; expected one of {', '.join(TIMEFRAMES)}."
        )
    return timeframe


cfg = Config(
    MAX_UTILIZATION=100,
    ENDING_SOON_DAYS=14,
    CRITICAL_DEMAND_PCT=50.0,
    HIGH_DEMAND_PCT=25.0,
    DEFAULT_TIMEFRAME="6months",
    TIME_LIMIT_SEC=10.0,
    NUM_PARALLEL_WORKERS=4,
    SEED=3,
)

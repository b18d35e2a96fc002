"""Progress report models."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from macro_tracker.domain.goals import WeightEntry
from macro_tracker.domain.nutrition import MacroProfile

DEFAULT_CALORIE_GOAL = 2000
DEFAULT_PROTEIN_GOAL = 150
DEFAULT_CARBS_GOAL = 200
DEFAULT_FATS_GOAL = 80


class ReportPeriod(StrEnum):
    """How far back a progress report looks."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class DailyProgress:
    """One day's logged totals next to the goals in force."""

    day: date
    totals: MacroProfile
    calorie_goal: int
    protein_goal: int
    carbs_goal: int
    fats_goal: int

    @property
    def calorie_percent(self) -> float:
        """Share of the calorie goal eaten, capped at 150 for charting."""
        if self.calorie_goal <= 0:
            return 0.0
        return round(min(self.totals.calories / self.calorie_goal * 100, 150.0), 1)


@dataclass(frozen=True)
class ProgressReport:
    """Per-day macro progress and the weight series for a date range."""

    start: date
    end: date
    days: list[DailyProgress] = field(default_factory=list)
    weights: list[WeightEntry] = field(default_factory=list)

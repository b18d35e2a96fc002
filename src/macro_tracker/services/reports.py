"""Progress reports over logged meals and weights."""

import calendar
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta

from macro_tracker.domain.reports import (
    DEFAULT_CALORIE_GOAL,
    DEFAULT_CARBS_GOAL,
    DEFAULT_FATS_GOAL,
    DEFAULT_PROTEIN_GOAL,
    DailyProgress,
    ProgressReport,
    ReportPeriod,
)
from macro_tracker.services.goals import ProfileRepository, WeightLogRepository
from macro_tracker.services.meals import MealLogService

_logger = logging.getLogger(__name__)


def period_start(period: ReportPeriod, today: date) -> date:
    """First day covered by a report ending today.

    The cutoff is one week, calendar month or calendar year back; the cutoff
    day itself is excluded, so a week report spans seven days.
    """
    if period is ReportPeriod.WEEK:
        cutoff = today - timedelta(days=7)
    elif period is ReportPeriod.MONTH:
        cutoff = _shift_months(today, -1)
    else:
        cutoff = _shift_months(today, -12)
    return cutoff + timedelta(days=1)


def _shift_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 + months
    year, month = divmod(month_index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def _goal_value(profile: Mapping[str, object], key: str, default: int) -> int:
    raw = profile.get(key)
    if isinstance(raw, bool) or raw is None:
        return default
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return int(value)


@dataclass
class ReportService:
    """Builds per-day progress against goals plus the weight trend."""

    meal_log_service: MealLogService
    profile_repository: ProfileRepository
    weight_repository: WeightLogRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def report(self, user_id: str, start: date, end: date) -> ProgressReport:
        """Report every day with logged meals between start and end inclusive."""
        if end < start:
            raise ValueError("Report end must not be before its start")
        profile = self.profile_repository.get_profile(user_id) or {}
        calorie_goal = _goal_value(profile, "calorieGoal", DEFAULT_CALORIE_GOAL)
        protein_goal = _goal_value(profile, "protein", DEFAULT_PROTEIN_GOAL)
        carbs_goal = _goal_value(profile, "carbs", DEFAULT_CARBS_GOAL)
        fats_goal = _goal_value(profile, "fats", DEFAULT_FATS_GOAL)

        days = [
            DailyProgress(
                day=day,
                totals=totals,
                calorie_goal=calorie_goal,
                protein_goal=protein_goal,
                carbs_goal=carbs_goal,
                fats_goal=fats_goal,
            )
            for day, totals in self.meal_log_service.totals_by_day(
                user_id, start, end
            ).items()
        ]
        weights = self.weight_repository.list_weight_entries_between(
            user_id,
            datetime.combine(start, time.min, tzinfo=UTC),
            datetime.combine(end, time.min, tzinfo=UTC) + timedelta(days=1),
        )
        _logger.info(
            "Progress report: user=%s start=%s end=%s days=%s weights=%s",
            user_id,
            start,
            end,
            len(days),
            len(weights),
        )
        return ProgressReport(start=start, end=end, days=days, weights=weights)

    def report_for_period(
        self, user_id: str, period: ReportPeriod
    ) -> ProgressReport:
        """Report the last week, month or year up to today (UTC)."""
        today = self.clock().astimezone(UTC).date()
        return self.report(user_id, period_start(period, today), today)

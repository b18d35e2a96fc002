"""Tests for the goal service and weight helpers."""

import pytest

from macro_tracker.services.goals import (
    GoalService,
    ProfileNotFoundError,
    clamp_weight,
    convert_weight,
    parse_weight_input,
)
from tests.conftest import (
    FIXED_NOW,
    InMemoryProfileRepository,
    InMemoryWeightRepository,
)


def _service(
    profile_repository: InMemoryProfileRepository,
) -> tuple[GoalService, InMemoryWeightRepository]:
    weights = InMemoryWeightRepository()
    service = GoalService(
        profile_repository=profile_repository,
        weight_repository=weights,
        clock=lambda: FIXED_NOW,
    )
    return service, weights


def test_recalculate_persists_goal_fields(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, _ = _service(profile_repository)

    goals = service.recalculate("user-1")

    assert goals.calorie_goal == 2044
    assert profile_repository.updates == [
        ("user-1", {"calorieGoal": 2044, "protein": 153, "fats": 68, "carbs": 204})
    ]


def test_log_weight_records_entry_and_recomputes(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, weights = _service(profile_repository)

    entry, goals = service.log_weight("user-1", 80)

    assert entry.weight_kg == 80
    assert entry.logged_at == FIXED_NOW
    assert weights.entries == [entry]
    stored = profile_repository.profiles["user-1"]
    assert stored["weight"] == 80
    assert stored["calorieGoal"] == goals.calorie_goal
    # 10 extra kg add 100 kcal of BMR before activity and deficit
    assert goals.calorie_goal == round(1748.75 * 1.55 * 0.8)


def test_log_weight_converts_pounds(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, _ = _service(profile_repository)

    entry, _ = service.log_weight("user-1", 154.3234, unit="lb")

    assert entry.weight_kg == pytest.approx(70.0, abs=1e-4)


def test_log_weight_clamps_and_rounds(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, weights = _service(profile_repository)

    heavy, goals = service.log_weight("user-1", 1000)
    light, _ = service.log_weight("user-1", 20.04, unit="lb")
    precise, _ = service.log_weight("user-1", 72.46)

    assert heavy.weight_kg == 200.0
    assert profile_repository.profiles["user-1"]["weight"] == 72.5
    assert goals.calorie_goal == round(2948.75 * 1.55 * 0.8)
    assert light.weight_kg == 29.9
    assert precise.weight_kg == 72.5
    assert len(weights.entries) == 3


def test_log_weight_rejects_unknown_unit(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, weights = _service(profile_repository)

    with pytest.raises(ValueError):
        service.log_weight("user-1", 11, unit="stone")

    assert weights.entries == []


def test_log_weight_without_profile_stores_nothing() -> None:
    repository = InMemoryProfileRepository()
    service, weights = _service(repository)

    with pytest.raises(ProfileNotFoundError):
        service.log_weight("ghost", 70)

    assert weights.entries == []
    assert repository.updates == []


def test_update_profile_merges_changes_with_goals(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, _ = _service(profile_repository)

    goals = service.update_profile("user-1", {"goal": "maintain weight"})

    assert goals.calorie_goal == 2556
    user_id, changes = profile_repository.updates[-1]
    assert user_id == "user-1"
    assert changes["goal"] == "maintain weight"
    assert changes["calorieGoal"] == 2556
    assert profile_repository.profiles["user-1"]["height"] == 175


def test_weight_history_is_newest_first(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service, weights = _service(profile_repository)
    service.log_weight("user-1", 71)
    service.clock = lambda: FIXED_NOW.replace(day=20)
    service.log_weight("user-1", 72)

    history = service.weight_history("user-1", limit=5)

    assert [entry.weight_kg for entry in history] == [72, 71]


def test_parse_weight_input() -> None:
    assert parse_weight_input("72,46") == 72.5
    assert parse_weight_input(" 80 ") == 80.0
    assert parse_weight_input("10") == 30.0
    assert parse_weight_input("500", unit="lb") == 440.0
    assert parse_weight_input("heavy") is None
    assert parse_weight_input("nan") is None


def test_convert_weight() -> None:
    assert convert_weight(70, "kg", "lb") == 154.3
    assert convert_weight(154.3, "lb", "kg") == 70.0
    assert convert_weight(70.04, "kg", "kg") == 70.0
    with pytest.raises(ValueError):
        convert_weight(70, "kg", "stone")


def test_clamp_weight() -> None:
    assert clamp_weight(1000) == 200.0
    assert clamp_weight(10, "lb") == 66.0
    assert clamp_weight(80.04) == 80.0
    with pytest.raises(ValueError):
        clamp_weight(80, "stone")

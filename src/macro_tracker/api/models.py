"""Pydantic models for API request and response payloads."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from macro_tracker.domain.goals import GoalBreakdown, NutritionGoals, WeightEntry
from macro_tracker.domain.nutrition import (
    CustomFood,
    MacroProfile,
    MealEntry,
    NutritionRecord,
)
from macro_tracker.domain.reports import DailyProgress, ProgressReport


class BiometricsPayload(BaseModel):
    """Raw biometrics; missing or malformed values fall back to defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    age: float | str | None = None
    weight: float | str | None = None
    height: float | str | None = None
    gender: str | None = None
    activity_level: str | None = Field(default=None, alias="activityLevel")
    goal: str | None = None

    def to_profile(self) -> dict[str, object]:
        """Return the fields that were provided, keyed like the profile."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GoalsResponse(BaseModel):
    """Daily calorie and macro targets."""

    model_config = ConfigDict(populate_by_name=True)

    calorie_goal: int = Field(alias="calorieGoal")
    protein: int
    fats: int
    carbs: int

    @classmethod
    def from_goals(cls, goals: NutritionGoals) -> "GoalsResponse":
        return cls(
            calorie_goal=goals.calorie_goal,
            protein=goals.protein,
            fats=goals.fats,
            carbs=goals.carbs,
        )


class GoalBreakdownResponse(GoalsResponse):
    """Goals plus the energy figures they came from."""

    bmr: float
    tdee: float
    multiplier: float

    @classmethod
    def from_breakdown(cls, breakdown: GoalBreakdown) -> "GoalBreakdownResponse":
        return cls(
            calorie_goal=breakdown.goals.calorie_goal,
            protein=breakdown.goals.protein,
            fats=breakdown.goals.fats,
            carbs=breakdown.goals.carbs,
            bmr=round(breakdown.bmr, 2),
            tdee=round(breakdown.tdee, 2),
            multiplier=breakdown.multiplier,
        )


class WeightLogRequest(BaseModel):
    """A weight reading in kg or lb."""

    weight: float = Field(gt=0)
    unit: Literal["kg", "lb"] = "kg"


class WeightLogResponse(BaseModel):
    """The stored weight and the goals recomputed from it."""

    weight_kg: float
    logged_at: str
    goals: GoalsResponse


class MacrosPayload(BaseModel):
    """Calories and macro grams."""

    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0

    @classmethod
    def from_macros(cls, macros: MacroProfile) -> "MacrosPayload":
        return cls(
            calories=macros.calories,
            protein=macros.protein,
            fat=macros.fat,
            carbs=macros.carbs,
        )

    def to_macros(self) -> MacroProfile:
        return MacroProfile(
            calories=self.calories,
            protein=self.protein,
            fat=self.fat,
            carbs=self.carbs,
        )


class FoodPayload(BaseModel):
    """A food record as returned by search and sent back for logging."""

    name: str
    brand: str | None = None
    macros: MacrosPayload
    serving_qty: float = 1.0
    serving_unit: str = "serving"
    base_grams: float = Field(default=100.0, gt=0)
    image_url: str | None = None
    source: str | None = None

    @classmethod
    def from_record(cls, record: NutritionRecord) -> "FoodPayload":
        return cls(
            name=record.name,
            brand=record.brand,
            macros=MacrosPayload.from_macros(record.macros),
            serving_qty=record.serving_qty,
            serving_unit=record.serving_unit,
            base_grams=record.base_grams,
            image_url=record.image_url,
            source=record.source,
        )

    def to_record(self) -> NutritionRecord:
        return NutritionRecord(
            name=self.name,
            brand=self.brand,
            macros=self.macros.to_macros(),
            serving_qty=self.serving_qty,
            serving_unit=self.serving_unit,
            base_grams=self.base_grams,
            image_url=self.image_url,
            source=self.source,
        )


class ServingRequest(BaseModel):
    """A food and the portion chosen for it."""

    food: FoodPayload
    serving_count: int = Field(default=1, ge=1)
    grams: str | float | None = "100"


class ServingResponse(BaseModel):
    """Adjusted macros for a portion."""

    macros: MacrosPayload
    serving: str


class MealResponse(BaseModel):
    """A stored meal."""

    id: str | None
    name: str
    brand: str | None
    macros: MacrosPayload
    serving: str
    logged_at: str
    image_url: str | None

    @classmethod
    def from_entry(cls, entry: MealEntry) -> "MealResponse":
        return cls(
            id=entry.id,
            name=entry.name,
            brand=entry.brand,
            macros=MacrosPayload.from_macros(entry.macros),
            serving=entry.serving,
            logged_at=entry.logged_at.isoformat(),
            image_url=entry.image_url,
        )


class WeightEntryResponse(BaseModel):
    """One logged weight."""

    weight_kg: float
    logged_at: str

    @classmethod
    def from_entry(cls, entry: WeightEntry) -> "WeightEntryResponse":
        return cls(weight_kg=entry.weight_kg, logged_at=entry.logged_at.isoformat())


class DailyProgressResponse(BaseModel):
    """A day's totals against its goals."""

    day: str
    totals: MacrosPayload
    calorie_goal: int
    protein_goal: int
    carbs_goal: int
    fats_goal: int
    calorie_percent: float

    @classmethod
    def from_progress(cls, progress: DailyProgress) -> "DailyProgressResponse":
        return cls(
            day=progress.day.isoformat(),
            totals=MacrosPayload.from_macros(progress.totals),
            calorie_goal=progress.calorie_goal,
            protein_goal=progress.protein_goal,
            carbs_goal=progress.carbs_goal,
            fats_goal=progress.fats_goal,
            calorie_percent=progress.calorie_percent,
        )


class ProgressReportResponse(BaseModel):
    """Per-day progress and the weight series for a range."""

    start: str
    end: str
    days: list[DailyProgressResponse]
    weights: list[WeightEntryResponse]

    @classmethod
    def from_report(cls, report: ProgressReport) -> "ProgressReportResponse":
        return cls(
            start=report.start.isoformat(),
            end=report.end.isoformat(),
            days=[DailyProgressResponse.from_progress(day) for day in report.days],
            weights=[WeightEntryResponse.from_entry(w) for w in report.weights],
        )


class CustomFoodRequest(BaseModel):
    """A hand-entered food; numbers may arrive as typed text."""

    name: str = ""
    brand: str | None = None
    description: str | None = None
    serving_size: str | float | None = None
    serving_unit: str | None = None
    calories: str | float | None = None
    protein: str | float | None = None
    carbs: str | float | None = None
    fat: str | float | None = None
    image_url: str | None = None


class CustomFoodResponse(BaseModel):
    """A stored custom food."""

    id: str | None
    description: str
    food: FoodPayload

    @classmethod
    def from_custom_food(cls, food: CustomFood) -> "CustomFoodResponse":
        return cls(
            id=food.id,
            description=food.description,
            food=FoodPayload.from_record(food.record),
        )

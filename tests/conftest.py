"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

import pytest

from macro_tracker.adapters.fatsecret_client import FatSecretClient
from macro_tracker.config import Settings
from macro_tracker.containers import AppContainer
from macro_tracker.domain.goals import WeightEntry
from macro_tracker.domain.images import ImageCandidate
from macro_tracker.domain.nutrition import CustomFood, MacroProfile, MealEntry
from macro_tracker.services.cache import InMemoryKeyValueStore
from macro_tracker.services.custom_foods import CustomFoodRepository, CustomFoodService
from macro_tracker.services.foods import FoodSearchService
from macro_tracker.services.goals import (
    GoalService,
    ProfileRepository,
    WeightLogRepository,
)
from macro_tracker.services.image_cache import ImageCache, ImagePrefetcher
from macro_tracker.services.images import (
    FoodImageService,
    ImageSearchClient,
    ImageSelector,
)
from macro_tracker.services.meals import MealLogRepository, MealLogService
from macro_tracker.services.rate_limiter import RateLimiter
from macro_tracker.services.reports import ReportService

FIXED_NOW = datetime(2025, 3, 14, 12, 30, tzinfo=UTC)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[str, dict[str, object]] = field(default_factory=dict)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        profile = self.profiles.get(user_id)
        return dict(profile) if profile is not None else None

    def update_profile(self, user_id: str, changes: dict[str, object]) -> None:
        self.updates.append((user_id, dict(changes)))
        self.profiles.setdefault(user_id, {}).update(changes)


@dataclass
class InMemoryWeightRepository(WeightLogRepository):
    """In-memory weight log for tests."""

    entries: list[WeightEntry] = field(default_factory=list)

    def add_weight_entry(
        self, user_id: str, weight_kg: float, logged_at: datetime
    ) -> WeightEntry:
        entry = WeightEntry(user_id=user_id, weight_kg=weight_kg, logged_at=logged_at)
        self.entries.append(entry)
        return entry

    def list_weight_entries(self, user_id: str, limit: int) -> list[WeightEntry]:
        own = [entry for entry in self.entries if entry.user_id == user_id]
        return sorted(own, key=lambda entry: entry.logged_at, reverse=True)[:limit]

    def list_weight_entries_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[WeightEntry]:
        own = [
            entry
            for entry in self.entries
            if entry.user_id == user_id and start <= entry.logged_at < end
        ]
        return sorted(own, key=lambda entry: entry.logged_at)


@dataclass
class InMemoryMealRepository(MealLogRepository):
    """In-memory meal repository for tests."""

    meals: list[MealEntry] = field(default_factory=list)

    def add_meal(self, entry: MealEntry) -> MealEntry:
        saved = replace(entry, id=f"meal-{len(self.meals) + 1}")
        self.meals.append(saved)
        return saved

    def list_meals(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[MealEntry]:
        return [
            meal
            for meal in self.meals
            if meal.user_id == user_id and start <= meal.logged_at < end
        ]

    def update_meal(
        self, user_id: str, meal_id: str, macros: MacroProfile, serving: str
    ) -> MealEntry | None:
        for index, meal in enumerate(self.meals):
            if meal.id == meal_id and meal.user_id == user_id:
                updated = replace(meal, macros=macros, serving=serving)
                self.meals[index] = updated
                return updated
        return None

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        remaining = [
            meal
            for meal in self.meals
            if not (meal.id == meal_id and meal.user_id == user_id)
        ]
        deleted = len(remaining) != len(self.meals)
        self.meals[:] = remaining
        return deleted


@dataclass
class InMemoryCustomFoodRepository(CustomFoodRepository):
    """In-memory custom food repository for tests."""

    foods: list[CustomFood] = field(default_factory=list)

    def add_custom_food(self, food: CustomFood) -> CustomFood:
        saved = replace(food, id=f"food-{len(self.foods) + 1}")
        self.foods.append(saved)
        return saved

    def list_custom_foods(self, user_id: str) -> list[CustomFood]:
        return [food for food in reversed(self.foods) if food.user_id == user_id]


@dataclass
class FakeFatSecretClient(FatSecretClient):
    """Fake FatSecret client returning a fixed search payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": {
                "food": [
                    {
                        "food_name": "Banana",
                        "food_description": (
                            "Per 100g - Calories: 89kcal | Fat: 0.33g | "
                            "Carbs: 22.84g | Protein: 1.09g"
                        ),
                    },
                    {
                        "food_name": "Greek Yogurt",
                        "brand_name": "Fage",
                        "food_description": (
                            "Per 1 container - Calories: 150kcal | Fat: 4.00g | "
                            "Carbs: 8.00g | Protein: 20.00g"
                        ),
                    },
                ]
            }
        }
    )
    calls: list[tuple[str, int, int]] = field(default_factory=list)
    failures: int = 0

    async def search_foods(
        self, expression: str, max_results: int = 50, page_number: int = 0
    ) -> dict[str, object]:
        self.calls.append((expression, max_results, page_number))
        if self.failures:
            self.failures -= 1
            raise RuntimeError("FatSecret unavailable")
        return self.payload


@dataclass
class FakeImageSearchClient(ImageSearchClient):
    """Fake image search returning preset candidates."""

    candidates: list[ImageCandidate] = field(
        default_factory=lambda: [
            ImageCandidate(url="https://img.test/first.jpg", title="first"),
            ImageCandidate(url="https://img.test/second.jpg", title="second"),
        ]
    )
    queries: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def search_images(self, query: str, num: int = 5) -> list[ImageCandidate]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.candidates[:num]


@dataclass
class FakeImageSelector(ImageSelector):
    """Fake LLM selector with a canned reply."""

    reply: str = "BEST_IMAGE_URL: https://img.test/second.jpg"
    prompts: list[str] = field(default_factory=list)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        return self.reply


@dataclass
class RecordingPrefetcher(ImagePrefetcher):
    """Prefetcher that records URLs and can be told to fail."""

    urls: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def prefetch(self, url: str) -> bool:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return True


@dataclass
class FakeClock:
    """Manually advanced clock with an awaitable sleep."""

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def make_rate_limiter(clock: FakeClock, max_requests: int = 5) -> RateLimiter:
    return RateLimiter(
        max_requests_per_minute=max_requests,
        request_delay_seconds=1.0,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        fatsecret_consumer_key="fatsecret-key",
        fatsecret_consumer_secret="fatsecret-secret",
        openai_api_key="openai-key",
        google_search_api_key="google-key",
        google_search_engine_id="engine-id",
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository(
        profiles={
            "user-1": {
                "age": 30,
                "weight": 70,
                "height": 175,
                "gender": "male",
                "activityLevel": "moderate",
                "goal": "lose weight",
            }
        }
    )


@pytest.fixture
def container(
    settings: Settings, profile_repository: InMemoryProfileRepository
) -> AppContainer:
    clock = FakeClock()
    rate_limiter = make_rate_limiter(clock)
    weight_repository = InMemoryWeightRepository()
    goal_service = GoalService(
        profile_repository=profile_repository,
        weight_repository=weight_repository,
        clock=lambda: FIXED_NOW,
    )
    meal_log_service = MealLogService(
        InMemoryMealRepository(), clock=lambda: FIXED_NOW
    )
    report_service = ReportService(
        meal_log_service=meal_log_service,
        profile_repository=profile_repository,
        weight_repository=weight_repository,
        clock=lambda: FIXED_NOW,
    )
    custom_food_service = CustomFoodService(
        InMemoryCustomFoodRepository(), clock=lambda: FIXED_NOW
    )
    food_search_service = FoodSearchService(
        client=FakeFatSecretClient(), retry_delay_seconds=0
    )
    image_cache = ImageCache(
        store=InMemoryKeyValueStore(),
        prefetcher=RecordingPrefetcher(),
        clock=lambda: FIXED_NOW.timestamp(),
    )
    food_image_service = FoodImageService(
        cache=image_cache,
        search_client=FakeImageSearchClient(),
        rate_limiter=rate_limiter,
        selector=FakeImageSelector(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        goal_service=goal_service,
        meal_log_service=meal_log_service,
        report_service=report_service,
        custom_food_service=custom_food_service,
        food_search_service=food_search_service,
        food_image_service=food_image_service,
        rate_limiter=rate_limiter,
        close_resources=close_resources,
    )

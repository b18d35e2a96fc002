"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from macro_tracker.adapters.fatsecret_client import HttpxFatSecretClient
from macro_tracker.adapters.google_image_search_client import (
    HttpxGoogleImageSearchClient,
)
from macro_tracker.adapters.httpx_image_prefetcher import HttpxImagePrefetcher
from macro_tracker.adapters.openai_image_selector import OpenAIImageSelector
from macro_tracker.adapters.supabase_custom_food_repository import (
    SupabaseCustomFoodRepository,
)
from macro_tracker.adapters.supabase_key_value_store import SupabaseKeyValueStore
from macro_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from macro_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from macro_tracker.adapters.supabase_weight_repository import SupabaseWeightRepository
from macro_tracker.config import Settings
from macro_tracker.services.custom_foods import CustomFoodService
from macro_tracker.services.foods import FoodSearchService
from macro_tracker.services.goals import GoalService
from macro_tracker.services.image_cache import ImageCache
from macro_tracker.services.images import FoodImageService
from macro_tracker.services.meals import MealLogService
from macro_tracker.services.rate_limiter import RateLimiter
from macro_tracker.services.reports import ReportService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    goal_service: GoalService
    meal_log_service: MealLogService
    report_service: ReportService
    custom_food_service: CustomFoodService
    food_search_service: FoodSearchService
    food_image_service: FoodImageService
    rate_limiter: RateLimiter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    weight_repository = SupabaseWeightRepository(supabase_client)
    goal_service = GoalService(
        profile_repository=profile_repository,
        weight_repository=weight_repository,
    )
    meal_log_service = MealLogService(SupabaseMealRepository(supabase_client))
    report_service = ReportService(
        meal_log_service=meal_log_service,
        profile_repository=profile_repository,
        weight_repository=weight_repository,
    )
    custom_food_service = CustomFoodService(
        SupabaseCustomFoodRepository(supabase_client)
    )

    fatsecret_client = HttpxFatSecretClient.create(
        consumer_key=resolved_settings.fatsecret_consumer_key,
        consumer_secret=resolved_settings.fatsecret_consumer_secret,
        base_url=resolved_settings.fatsecret_base_url,
    )
    food_search_service = FoodSearchService(
        client=fatsecret_client,
        max_results=resolved_settings.food_search_max_results,
    )

    rate_limiter = RateLimiter(
        max_requests_per_minute=resolved_settings.llm_max_requests_per_minute,
        request_delay_seconds=resolved_settings.llm_request_delay_seconds,
    )
    prefetcher = HttpxImagePrefetcher.create()
    image_cache = ImageCache(
        store=SupabaseKeyValueStore(supabase_client),
        prefetcher=prefetcher,
        ttl_days=resolved_settings.image_cache_ttl_days,
    )
    search_client = HttpxGoogleImageSearchClient.create(
        api_key=resolved_settings.google_search_api_key,
        engine_id=resolved_settings.google_search_engine_id,
    )
    selector = OpenAIImageSelector.create(
        api_key=resolved_settings.openai_api_key,
        model=resolved_settings.openai_model,
    )
    food_image_service = FoodImageService(
        cache=image_cache,
        search_client=search_client,
        rate_limiter=rate_limiter,
        selector=selector,
    )

    async def close_resources() -> None:
        await image_cache.wait_for_prefetches()
        await fatsecret_client.close()
        await search_client.close()
        await prefetcher.close()
        await selector.close()

    return AppContainer(
        settings=resolved_settings,
        goal_service=goal_service,
        meal_log_service=meal_log_service,
        report_service=report_service,
        custom_food_service=custom_food_service,
        food_search_service=food_search_service,
        food_image_service=food_image_service,
        rate_limiter=rate_limiter,
        close_resources=close_resources,
    )

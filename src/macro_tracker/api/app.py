"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

import httpx
from fastapi import FastAPI, HTTPException, Request, Response, status

from macro_tracker.api.models import (
    BiometricsPayload,
    CustomFoodRequest,
    CustomFoodResponse,
    FoodPayload,
    GoalBreakdownResponse,
    GoalsResponse,
    MacrosPayload,
    MealResponse,
    ProgressReportResponse,
    ServingRequest,
    ServingResponse,
    WeightLogRequest,
    WeightEntryResponse,
    WeightLogResponse,
)
from macro_tracker.app_logging import configure_logging
from macro_tracker.containers import AppContainer
from macro_tracker.domain.goals import UserBiometrics
from macro_tracker.domain.reports import ReportPeriod
from macro_tracker.services.custom_foods import CustomFoodValidationError
from macro_tracker.services.goals import ProfileNotFoundError, calculate_breakdown
from macro_tracker.services.meals import MealNotFoundError
from macro_tracker.services.servings import (
    adjust_serving,
    describe_serving,
    parse_grams,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/goals/calculate")
    async def calculate_goals(payload: BiometricsPayload) -> GoalBreakdownResponse:
        """Compute goals for ad-hoc biometrics without storing anything."""
        biometrics = UserBiometrics.from_profile(payload.to_profile())
        return GoalBreakdownResponse.from_breakdown(calculate_breakdown(biometrics))

    @app.post("/users/{user_id}/goals/recalculate")
    async def recalculate_goals(user_id: str, request: Request) -> GoalsResponse:
        """Recompute and store goals from the stored profile."""
        state_container: AppContainer = request.app.state.container
        try:
            goals = state_container.goal_service.recalculate(user_id)
        except ProfileNotFoundError as exc:
            raise _profile_not_found(user_id) from exc
        return GoalsResponse.from_goals(goals)

    @app.patch("/users/{user_id}/profile")
    async def update_profile(
        user_id: str, payload: BiometricsPayload, request: Request
    ) -> GoalsResponse:
        """Store biometric edits together with recomputed goals."""
        state_container: AppContainer = request.app.state.container
        try:
            goals = state_container.goal_service.update_profile(
                user_id, payload.to_profile()
            )
        except ProfileNotFoundError as exc:
            raise _profile_not_found(user_id) from exc
        return GoalsResponse.from_goals(goals)

    @app.post("/users/{user_id}/weights")
    async def log_weight(
        user_id: str, payload: WeightLogRequest, request: Request
    ) -> WeightLogResponse:
        """Record a weight and recompute goals with it."""
        state_container: AppContainer = request.app.state.container
        try:
            entry, goals = state_container.goal_service.log_weight(
                user_id, payload.weight, payload.unit
            )
        except ProfileNotFoundError as exc:
            raise _profile_not_found(user_id) from exc
        return WeightLogResponse(
            weight_kg=round(entry.weight_kg, 1),
            logged_at=entry.logged_at.isoformat(),
            goals=GoalsResponse.from_goals(goals),
        )

    @app.get("/users/{user_id}/weights")
    async def weight_history(
        user_id: str, request: Request, limit: int = 30
    ) -> dict[str, list[WeightEntryResponse]]:
        """Recent weights, newest first."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.goal_service.weight_history(user_id, limit=limit)
        return {"weights": [WeightEntryResponse.from_entry(e) for e in entries]}

    @app.post("/servings/adjust")
    async def adjust(payload: ServingRequest) -> ServingResponse:
        """Scale a food to the chosen portion."""
        record = payload.food.to_record()
        grams = _grams_from_payload(payload.grams)
        macros = adjust_serving(record, payload.serving_count, grams)
        return ServingResponse(
            macros=MacrosPayload.from_macros(macros),
            serving=describe_serving(record, payload.serving_count, grams),
        )

    @app.post("/users/{user_id}/meals")
    async def log_meal(
        user_id: str, payload: ServingRequest, request: Request
    ) -> MealResponse:
        """Store a meal at the chosen portion."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.meal_log_service.log_meal(
            user_id,
            payload.food.to_record(),
            serving_count=payload.serving_count,
            grams_input=_grams_from_payload(payload.grams),
        )
        return MealResponse.from_entry(entry)

    @app.put("/users/{user_id}/meals/{meal_id}")
    async def update_meal(
        user_id: str, meal_id: str, payload: ServingRequest, request: Request
    ) -> MealResponse:
        """Re-portion a logged meal."""
        state_container: AppContainer = request.app.state.container
        try:
            entry = state_container.meal_log_service.update_meal(
                user_id,
                meal_id,
                payload.food.to_record(),
                serving_count=payload.serving_count,
                grams_input=_grams_from_payload(payload.grams),
            )
        except MealNotFoundError as exc:
            raise _meal_not_found(meal_id) from exc
        return MealResponse.from_entry(entry)

    @app.delete(
        "/users/{user_id}/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT
    )
    async def delete_meal(user_id: str, meal_id: str, request: Request) -> Response:
        """Remove a logged meal."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.meal_log_service.delete_meal(user_id, meal_id)
        except MealNotFoundError as exc:
            raise _meal_not_found(meal_id) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/users/{user_id}/totals")
    async def daily_totals(
        user_id: str, request: Request, day: date | None = None
    ) -> MacrosPayload:
        """Sum the macros logged on a day (UTC, default today)."""
        state_container: AppContainer = request.app.state.container
        resolved_day = day or datetime.now(tz=UTC).date()
        totals = state_container.meal_log_service.daily_totals(user_id, resolved_day)
        return MacrosPayload.from_macros(totals)

    @app.get("/users/{user_id}/report")
    async def progress_report(
        user_id: str,
        request: Request,
        period: ReportPeriod = ReportPeriod.WEEK,
        start: date | None = None,
        end: date | None = None,
    ) -> ProgressReportResponse:
        """Per-day progress for a period, or for explicit start/end dates."""
        state_container: AppContainer = request.app.state.container
        reports = state_container.report_service
        if start is None and end is None:
            return ProgressReportResponse.from_report(
                reports.report_for_period(user_id, period)
            )
        resolved_end = end or datetime.now(tz=UTC).date()
        try:
            report = reports.report(user_id, start or resolved_end, resolved_end)
        except ValueError as exc:
            raise _unprocessable(exc) from exc
        return ProgressReportResponse.from_report(report)

    @app.post("/users/{user_id}/custom-foods")
    async def create_custom_food(
        user_id: str, payload: CustomFoodRequest, request: Request
    ) -> CustomFoodResponse:
        """Store a hand-entered food."""
        state_container: AppContainer = request.app.state.container
        try:
            food = state_container.custom_food_service.create_food(
                user_id, **payload.model_dump()
            )
        except CustomFoodValidationError as exc:
            raise _unprocessable(exc) from exc
        return CustomFoodResponse.from_custom_food(food)

    @app.get("/users/{user_id}/custom-foods")
    async def list_custom_foods(
        user_id: str, request: Request, q: str = ""
    ) -> dict[str, list[CustomFoodResponse]]:
        """List the user's custom foods, optionally filtered by name or brand."""
        state_container: AppContainer = request.app.state.container
        foods = state_container.custom_food_service.list_foods(user_id, q)
        return {"foods": [CustomFoodResponse.from_custom_food(f) for f in foods]}

    @app.get("/foods/search")
    async def search_foods(
        q: str, request: Request, page: int = 0
    ) -> dict[str, list[FoodPayload]]:
        """Search the food database."""
        state_container: AppContainer = request.app.state.container
        try:
            records = await state_container.food_search_service.search(q, page=page)
        except httpx.HTTPError as exc:
            logger.exception("Food search failed: query=%s", q)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to search for foods. Please try again.",
            ) from exc
        return {"foods": [FoodPayload.from_record(record) for record in records]}

    @app.get("/foods/image")
    async def food_image(
        name: str, request: Request, brand: str | None = None
    ) -> dict[str, str | None]:
        """Return a cached or freshly found photo URL for a food."""
        state_container: AppContainer = request.app.state.container
        image_url = await state_container.food_image_service.find_image(name, brand)
        return {"image_url": image_url}

    return app


def _grams_from_payload(raw: str | float | None) -> float:
    if isinstance(raw, int | float):
        return parse_grams(str(raw))
    return parse_grams(raw)


def _profile_not_found(user_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Profile not found for user {user_id}",
    )


def _meal_not_found(meal_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Meal not found: {meal_id}",
    )


def _unprocessable(exc: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))

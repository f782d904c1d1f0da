"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_composer.adapters.food_search_client import HttpxFoodSearchClient
from meal_composer.adapters.openai_vision_client import OpenAIVisionClient
from meal_composer.adapters.supabase_custom_food_repository import (
    SupabaseCustomFoodRepository,
)
from meal_composer.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from meal_composer.config import Settings
from meal_composer.services.cache import InMemoryCache
from meal_composer.services.custom_foods import CustomFoodService
from meal_composer.services.food_search import FoodSearchService
from meal_composer.services.meals import MealLogService
from meal_composer.services.sessions import InMemorySessionStore, SessionStore
from meal_composer.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    food_search_service: FoodSearchService
    vision_service: VisionService
    meal_log_service: MealLogService
    custom_food_service: CustomFoodService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    search_client = HttpxFoodSearchClient.create(resolved_settings.food_search_base_url)
    food_search_service = FoodSearchService(
        client=search_client,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.food_search_ttl_seconds,
        debug=resolved_settings.debug,
    )
    vision_service = VisionService(
        client=OpenAIVisionClient.create(resolved_settings.openai_api_key),
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    meal_log_service = MealLogService(SupabaseMealLogRepository(supabase_client))
    custom_food_service = CustomFoodService(
        SupabaseCustomFoodRepository(supabase_client)
    )

    async def close_resources() -> None:
        await search_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_store=InMemorySessionStore(),
        food_search_service=food_search_service,
        vision_service=vision_service,
        meal_log_service=meal_log_service,
        custom_food_service=custom_food_service,
        close_resources=close_resources,
    )

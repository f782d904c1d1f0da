"""Shared test fixtures."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from meal_composer.config import Settings
from meal_composer.containers import AppContainer
from meal_composer.domain.meals import CustomFood, MealComponentRecord, MealLogRecord
from meal_composer.domain.profiles import ReferenceProfile
from meal_composer.services.cache import InMemoryCache
from meal_composer.services.custom_foods import CustomFoodRepository, CustomFoodService
from meal_composer.services.food_search import FoodSearchClient, FoodSearchService
from meal_composer.services.meals import (
    MealLogRepository,
    MealLogService,
    PersistenceError,
)
from meal_composer.services.sessions import InMemorySessionStore
from meal_composer.services.vision import VisionClient, VisionService


def make_profile(  # noqa: PLR0913
    name: str = "Chicken breast",
    reference_portion_grams: float = 100.0,
    calories: float = 165.0,
    protein_g: float = 31.0,
    carbs_g: float = 0.0,
    fat_g: float = 3.6,
    fiber_g: float = 0.0,
) -> ReferenceProfile:
    return ReferenceProfile(
        name=name,
        reference_portion_grams=reference_portion_grams,
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        fiber_g=fiber_g,
    )


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log repository for tests."""

    meals: dict[UUID, MealLogRecord] = field(default_factory=dict)
    components: dict[UUID, list[MealComponentRecord]] = field(default_factory=dict)

    def create_meal(self, record: MealLogRecord) -> UUID:
        meal_id = uuid4()
        self.meals[meal_id] = record
        return meal_id

    def create_components(
        self, meal_id: UUID, components: list[MealComponentRecord]
    ) -> None:
        self.components.setdefault(meal_id, []).extend(components)

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)
        self.components.pop(meal_id, None)


@dataclass
class FailingMealLogRepository(MealLogRepository):
    """Meal log repository whose writes always fail."""

    attempts: int = 0

    def create_meal(self, record: MealLogRecord) -> UUID:
        self.attempts += 1
        raise PersistenceError("insert rejected")

    def create_components(
        self, meal_id: UUID, components: list[MealComponentRecord]
    ) -> None:
        raise PersistenceError("insert rejected")

    def delete_meal(self, meal_id: UUID) -> None:
        return None


@dataclass
class FlakyComponentsMealLogRepository(InMemoryMealLogRepository):
    """Meal log repository whose component inserts fail a set number of times."""

    component_failures: int = 1

    def create_components(
        self, meal_id: UUID, components: list[MealComponentRecord]
    ) -> None:
        if self.component_failures > 0:
            self.component_failures -= 1
            raise PersistenceError("component insert rejected")
        super().create_components(meal_id, components)


@dataclass
class InMemoryCustomFoodRepository(CustomFoodRepository):
    """In-memory custom food repository for tests."""

    foods: list[CustomFood] = field(default_factory=list)

    def create_food(self, user_id: UUID, payload: dict[str, object]) -> CustomFood:
        food = CustomFood(
            id=uuid4(),
            user_id=user_id,
            name=str(payload["name"]),
            original_food_name=payload.get("original_food_name"),
            base_calories=float(payload["base_calories"]),
            base_protein_g=float(payload["base_protein_g"]),
            base_carbs_g=float(payload["base_carbs_g"]),
            base_fat_g=float(payload["base_fat_g"]),
            base_fiber_g=float(payload["base_fiber_g"]),
        )
        self.foods.insert(0, food)
        return food

    def list_foods(self, user_id: UUID) -> list[CustomFood]:
        return [food for food in self.foods if food.user_id == user_id]


@dataclass
class FakeFoodSearchClient(FoodSearchClient):
    """Fake food search client with a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "name": "Hamburger bun",
                    "portion": "1 bun (75g)",
                    "calories": 210,
                    "protein_g": 7,
                    "carbs_g": 38,
                    "fat_g": 3,
                    "fiber_g": 1.5,
                },
                {
                    "name": "Cooked white rice",
                    "portion": "100g",
                    "calories": 130,
                    "protein_g": 2.7,
                    "carbs_g": 28.2,
                    "fat_g": 0.3,
                    "fiber_g": None,
                },
            ]
        }
    )
    calls: list[str] = field(default_factory=list)

    async def search_foods(self, query: str) -> dict[str, object]:
        self.calls.append(query)
        return self.payload


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed meal analysis."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "meal_type": "dinner",
            "foods": [
                {
                    "name": "Grilled salmon",
                    "portion": "1 fillet (150g)",
                    "calories": 310,
                    "protein_g": 34,
                    "carbs_g": 0,
                    "fat_g": 18.5,
                    "fiber_g": 0,
                },
                {
                    "name": "Steamed broccoli",
                    "portion": "85g",
                    "calories": 30,
                    "protein_g": 2.4,
                    "carbs_g": 6,
                    "fat_g": 0.3,
                    "fiber_g": 2.6,
                },
            ],
            "recommendations": "Add a whole-grain side for more fiber.",
        }
    )
    last_prompt: str | None = None

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.last_prompt = prompt
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
        food_search_base_url="https://foods.example.com",
    )


@pytest.fixture
def meal_log_repository() -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository()


@pytest.fixture
def custom_food_repository() -> InMemoryCustomFoodRepository:
    return InMemoryCustomFoodRepository()


@pytest.fixture
def container(
    settings: Settings,
    meal_log_repository: InMemoryMealLogRepository,
    custom_food_repository: InMemoryCustomFoodRepository,
) -> AppContainer:
    food_search_service = FoodSearchService(
        client=FakeFoodSearchClient(),
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )
    vision_service = VisionService(
        client=FakeVisionClient(),
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_store=InMemorySessionStore(),
        food_search_service=food_search_service,
        vision_service=vision_service,
        meal_log_service=MealLogService(meal_log_repository),
        custom_food_service=CustomFoodService(custom_food_repository),
        close_resources=close_resources,
    )

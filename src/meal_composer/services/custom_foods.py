"""Services for the user's saved custom foods."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_composer.domain.composition import CompositionItem
from meal_composer.domain.meals import CustomFood
from meal_composer.domain.profiles import ReferenceProfile
from meal_composer.services.nutrition import CUSTOM_FOOD_BASIS_GRAMS, to_per_100g

_logger = logging.getLogger(__name__)


class CustomFoodRepository(Protocol):
    """Persistence interface for custom foods."""

    def create_food(self, user_id: UUID, payload: dict[str, object]) -> CustomFood:
        """Create a custom food and return it."""

    def list_foods(self, user_id: UUID) -> list[CustomFood]:
        """Return a user's custom foods, newest first."""


@dataclass
class CustomFoodService:
    """Application service for custom foods."""

    repository: CustomFoodRepository

    def save_from_item(
        self, user_id: UUID, item: CompositionItem, name: str | None = None
    ) -> CustomFood:
        """Save what an item currently represents as a per-100 g food."""
        normalized = to_per_100g(item)
        payload = {
            "name": (name or "").strip() or item.profile.name,
            "original_food_name": item.profile.name,
            "base_calories": normalized.calories,
            "base_protein_g": normalized.protein_g,
            "base_carbs_g": normalized.carbs_g,
            "base_fat_g": normalized.fat_g,
            "base_fiber_g": normalized.fiber_g,
        }
        food = self.repository.create_food(user_id, payload)
        _logger.info("Saved custom food %s for user %s", food.id, user_id)
        return food

    def list_profiles(self, user_id: UUID) -> list[ReferenceProfile]:
        """Return the user's custom foods as per-100 g profiles."""
        return [to_profile(food) for food in self.repository.list_foods(user_id)]


def to_profile(food: CustomFood) -> ReferenceProfile:
    """Convert a stored custom food into a reference profile."""
    return ReferenceProfile.create(
        name=food.name,
        reference_portion_grams=CUSTOM_FOOD_BASIS_GRAMS,
        calories=food.base_calories,
        protein_g=food.base_protein_g,
        carbs_g=food.base_carbs_g,
        fat_g=food.base_fat_g,
        fiber_g=food.base_fiber_g,
        source="custom",
        custom_food_id=food.id,
    )

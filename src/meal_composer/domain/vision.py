"""Models for photo analysis results."""

from pydantic import BaseModel, Field

from meal_composer.domain.meals import MealType
from meal_composer.domain.profiles import FoodRecord


class VisionAnalysis(BaseModel):
    """Structured output for a meal photo.

    Each food's nutrients are per its detected ``portion``, not per 100 g.
    """

    meal_type: MealType = MealType.LUNCH
    foods: list[FoodRecord] = Field(default_factory=list)
    recommendations: str | None = None

"""Pydantic request and response models for the HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field

from meal_composer.domain.meals import MealType
from meal_composer.domain.profiles import FoodRecord


class QuantityRequest(BaseModel):
    """Raw quantity text as typed by the user."""

    quantity: str | None = None


class NutrientsRequest(BaseModel):
    """Per-reference-portion values entered manually."""

    calories: float = Field(default=0.0, ge=0)
    protein_g: float = Field(default=0.0, ge=0)
    carbs_g: float = Field(default=0.0, ge=0)
    fat_g: float = Field(default=0.0, ge=0)
    fiber_g: float = Field(default=0.0, ge=0)


class AddFoodRequest(FoodRecord):
    """Food to add; ``quantity`` optionally rescales it right away."""

    quantity: str | None = None


class SearchAddRequest(BaseModel):
    """Search the food index and add the best match."""

    query: str
    quantity: str | None = None


class RenameRequest(BaseModel):
    """Manual display name; empty restores the automatic name."""

    name: str = ""


class SaveRequest(BaseModel):
    """Options for logging a composition."""

    user_id: UUID
    meal_type: MealType | None = None
    notes: str | None = None


class CustomFoodRequest(BaseModel):
    """Save an item as a custom food."""

    user_id: UUID
    name: str | None = None


class NutrientsView(BaseModel):
    """Calories and macros."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float


class ItemView(BaseModel):
    """One composition item."""

    id: UUID
    name: str
    reference_portion_grams: float
    reference: NutrientsView
    current_portion_grams: float
    display_quantity: str
    nutrients: NutrientsView


class TotalsView(NutrientsView):
    """Composition totals."""

    portion_grams: float


class CompositionView(BaseModel):
    """Full state of a composition session."""

    id: UUID
    status: str
    name: str
    session_multiplier: float | None
    is_compound: bool
    items: list[ItemView]
    totals: TotalsView
    meal_type: MealType | None = None
    notes: str | None = None


class ProfileView(NutrientsView):
    """A reference profile offered by a food source."""

    name: str
    reference_portion_grams: float
    source: str
    custom_food_id: UUID | None = None

"""Domain models for logged meals and custom foods."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class MealType(str, Enum):
    """Meal slot a log entry belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class MealComponentRecord:
    """Per-item row of a compound meal, stored on the reference basis."""

    component_name: str
    portion_size: float
    portion_unit: str
    reference_portion_grams: float
    base_calories: float
    base_protein_g: float
    base_carbs_g: float
    base_fat_g: float
    base_fiber_g: float


@dataclass(frozen=True)
class MealLogRecord:
    """Meal row with aggregate totals."""

    user_id: UUID
    meal_name: str
    meal_type: MealType
    total_calories: int
    total_protein_g: float
    total_carbs_g: float
    total_fat_g: float
    total_fiber_g: float
    is_compound: bool
    portion_size: float
    portion_unit: str = "g"
    is_ai_analyzed: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class SavedMeal:
    """Result of persisting a composition."""

    meal_id: UUID
    record: MealLogRecord
    components: list[MealComponentRecord]


@dataclass(frozen=True)
class CustomFood:
    """A user's saved food, always normalized per 100 g."""

    id: UUID
    user_id: UUID
    name: str
    original_food_name: str | None
    base_calories: float
    base_protein_g: float
    base_carbs_g: float
    base_fat_g: float
    base_fiber_g: float
    created_at: datetime | None = None

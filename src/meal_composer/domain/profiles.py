"""Reference nutrient profiles and food source records."""

import math
from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, field_validator

DEFAULT_REFERENCE_GRAMS = 100.0


@dataclass(frozen=True)
class NutrientValues:
    """Calories and macros for some amount of food."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float

    @classmethod
    def zero(cls) -> "NutrientValues":
        """Return an all-zero nutrient set."""
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ReferenceProfile:
    """Nutrients anchored to one reference portion.

    Database and custom foods are stored per 100 g. Photo-analyzed foods are
    stored per detected portion, so ``reference_portion_grams`` is always
    explicit and scaling never assumes a 100 g basis.
    """

    name: str
    reference_portion_grams: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    source: str = "manual"
    custom_food_id: UUID | None = None

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        name: str,
        reference_portion_grams: object,
        calories: object = 0.0,
        protein_g: object = 0.0,
        carbs_g: object = 0.0,
        fat_g: object = 0.0,
        fiber_g: object = 0.0,
        source: str = "manual",
        custom_food_id: UUID | None = None,
    ) -> "ReferenceProfile":
        """Build a profile from untrusted values, sanitizing each field."""
        grams = non_negative(reference_portion_grams)
        return cls(
            name=name,
            reference_portion_grams=grams if grams > 0 else DEFAULT_REFERENCE_GRAMS,
            calories=non_negative(calories),
            protein_g=non_negative(protein_g),
            carbs_g=non_negative(carbs_g),
            fat_g=non_negative(fat_g),
            fiber_g=non_negative(fiber_g),
            source=source,
            custom_food_id=custom_food_id,
        )

    @property
    def nutrients(self) -> NutrientValues:
        """Return the per-reference-portion values."""
        return NutrientValues(
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
            fiber_g=self.fiber_g,
        )


class FoodRecord(BaseModel):
    """Food as returned by the search index or the photo analyzer.

    ``portion`` is free text such as ``"85g"`` or ``"1 bun (75g)"``.
    """

    name: str
    portion: str | None = None
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0

    @field_validator(
        "calories", "protein_g", "carbs_g", "fat_g", "fiber_g", mode="before"
    )
    @classmethod
    def _missing_as_zero(cls, value: object) -> float:
        return non_negative(value)


def non_negative(value: object) -> float:
    """Coerce a value to a finite, non-negative float; anything else is 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number

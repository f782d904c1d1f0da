"""Portion scaling and nutrient aggregation."""

import math
from collections.abc import Iterable

from meal_composer.domain.composition import CompositionItem, CompositionTotals
from meal_composer.domain.profiles import NutrientValues, ReferenceProfile

CUSTOM_FOOD_BASIS_GRAMS = 100.0


def scale(profile: ReferenceProfile, target_portion_grams: float) -> NutrientValues:
    """Scale a profile's per-reference values to a target weight."""
    multiplier = _ratio(target_portion_grams, profile.reference_portion_grams)
    return _rounded(
        calories=profile.calories * multiplier,
        protein_g=profile.protein_g * multiplier,
        carbs_g=profile.carbs_g * multiplier,
        fat_g=profile.fat_g * multiplier,
        fiber_g=profile.fiber_g * multiplier,
    )


def aggregate(items: Iterable[CompositionItem]) -> CompositionTotals:
    """Sum nutrients and weight over items.

    ``math.fsum`` is exactly rounded, so the result does not depend on item
    order or on how many times it has been computed.
    """
    item_list = list(items)
    calories = math.fsum(_finite(item.nutrients.calories) for item in item_list)
    protein = math.fsum(_finite(item.nutrients.protein_g) for item in item_list)
    carbs = math.fsum(_finite(item.nutrients.carbs_g) for item in item_list)
    fat = math.fsum(_finite(item.nutrients.fat_g) for item in item_list)
    fiber = math.fsum(_finite(item.nutrients.fiber_g) for item in item_list)
    grams = math.fsum(_finite(item.current_portion_grams) for item in item_list)
    return CompositionTotals(
        calories=round_calories(calories),
        protein_g=round_grams(protein),
        carbs_g=round_grams(carbs),
        fat_g=round_grams(fat),
        fiber_g=round_grams(fiber),
        portion_grams=grams,
    )


def to_per_100g(item: CompositionItem) -> ReferenceProfile:
    """Normalize what the item currently represents to a per-100 g profile.

    The basis is the current portion, not the stored reference portion, since
    a custom food records "what I ate" regardless of where the food came from.
    """
    factor = _ratio(CUSTOM_FOOD_BASIS_GRAMS, item.current_portion_grams)
    current = item.nutrients
    values = _rounded(
        calories=current.calories * factor,
        protein_g=current.protein_g * factor,
        carbs_g=current.carbs_g * factor,
        fat_g=current.fat_g * factor,
        fiber_g=current.fiber_g * factor,
    )
    return ReferenceProfile.create(
        name=item.profile.name,
        reference_portion_grams=CUSTOM_FOOD_BASIS_GRAMS,
        calories=values.calories,
        protein_g=values.protein_g,
        carbs_g=values.carbs_g,
        fat_g=values.fat_g,
        fiber_g=values.fiber_g,
        source="custom",
    )


def round_calories(value: float) -> int:
    """Round calories half-up to a whole number."""
    return math.floor(value + 0.5)


def round_grams(value: float) -> float:
    """Round a gram amount half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _rounded(  # noqa: PLR0913
    *,
    calories: float,
    protein_g: float,
    carbs_g: float,
    fat_g: float,
    fiber_g: float,
) -> NutrientValues:
    return NutrientValues(
        calories=round_calories(_finite(calories)),
        protein_g=round_grams(_finite(protein_g)),
        carbs_g=round_grams(_finite(carbs_g)),
        fat_g=round_grams(_finite(fat_g)),
        fiber_g=round_grams(_finite(fiber_g)),
    )


def _ratio(numerator: float, denominator: float) -> float:
    """Divide, treating a zero or invalid denominator as a no-op ratio of 1."""
    if not math.isfinite(denominator) or denominator <= 0:
        return 1.0
    return numerator / denominator


def _finite(value: object) -> float:
    if isinstance(value, int | float) and math.isfinite(value):
        return float(value)
    return 0.0

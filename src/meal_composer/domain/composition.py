"""Domain models for meals under construction."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from meal_composer.domain.profiles import NutrientValues, ReferenceProfile


@dataclass
class CompositionItem:
    """One food line in a meal being composed.

    ``nutrients`` is derived from ``profile`` at ``current_portion_grams`` and
    is rewritten by every mutation; it is never edited directly.
    """

    profile: ReferenceProfile
    current_portion_grams: float
    display_quantity: str
    nutrients: NutrientValues
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class CompositionTotals:
    """Summed nutrients and weight of a composition."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    portion_grams: float


@dataclass(frozen=True)
class FinalizedComposition:
    """Read-only view of a composition ready to be logged."""

    name: str
    items: tuple[CompositionItem, ...]
    totals: CompositionTotals
    is_compound: bool

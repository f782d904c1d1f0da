"""Meal logging service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_composer.domain.composition import FinalizedComposition
from meal_composer.domain.meals import (
    MealComponentRecord,
    MealLogRecord,
    MealType,
    SavedMeal,
)
from meal_composer.services.composition import CompositionSession
from meal_composer.services.nutrition import round_calories, round_grams

_logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Raised when the storage backend rejects a write."""


class MealLogRepository(Protocol):
    """Persistence interface for meal logs."""

    def create_meal(self, record: MealLogRecord) -> UUID:
        """Create a meal row and return its id."""

    def create_components(
        self, meal_id: UUID, components: list[MealComponentRecord]
    ) -> None:
        """Create per-item rows for a compound meal."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal row whose components could not be written."""


@dataclass
class MealLogService:
    """Turns finalized compositions into immutable meal log entries."""

    repository: MealLogRepository

    def save_session(  # noqa: PLR0913
        self,
        user_id: UUID,
        session: CompositionSession,
        meal_type: MealType = MealType.LUNCH,
        *,
        is_ai_analyzed: bool = False,
        notes: str | None = None,
    ) -> SavedMeal:
        """Persist a session and clear it.

        On a storage error the session is left as it was so it can be
        edited and submitted again.
        """
        composition = session.finalize()
        try:
            saved = self.save(
                user_id,
                composition,
                meal_type,
                is_ai_analyzed=is_ai_analyzed,
                notes=notes,
            )
        except PersistenceError:
            _logger.exception("Failed to save meal for user %s", user_id)
            raise
        session.clear()
        return saved

    def save(  # noqa: PLR0913
        self,
        user_id: UUID,
        composition: FinalizedComposition,
        meal_type: MealType = MealType.LUNCH,
        *,
        is_ai_analyzed: bool = False,
        notes: str | None = None,
    ) -> SavedMeal:
        """Write the meal row and, for compound meals, one row per item."""
        record = build_meal_record(
            user_id, composition, meal_type, is_ai_analyzed=is_ai_analyzed, notes=notes
        )
        meal_id = self.repository.create_meal(record)
        components = build_components(composition) if composition.is_compound else []
        if components:
            try:
                self.repository.create_components(meal_id, components)
            except PersistenceError:
                self.repository.delete_meal(meal_id)
                raise
        _logger.info(
            "Saved meal %s: %s item(s), %s kcal",
            meal_id,
            len(composition.items),
            record.total_calories,
        )
        return SavedMeal(meal_id=meal_id, record=record, components=components)


def build_meal_record(  # noqa: PLR0913
    user_id: UUID,
    composition: FinalizedComposition,
    meal_type: MealType,
    *,
    is_ai_analyzed: bool = False,
    notes: str | None = None,
) -> MealLogRecord:
    """Build the aggregate meal row."""
    totals = composition.totals
    return MealLogRecord(
        user_id=user_id,
        meal_name=composition.name,
        meal_type=meal_type,
        total_calories=round_calories(totals.calories),
        total_protein_g=round_grams(totals.protein_g),
        total_carbs_g=round_grams(totals.carbs_g),
        total_fat_g=round_grams(totals.fat_g),
        total_fiber_g=round_grams(totals.fiber_g),
        is_compound=composition.is_compound,
        portion_size=totals.portion_grams,
        is_ai_analyzed=is_ai_analyzed,
        notes=notes,
    )


def build_components(composition: FinalizedComposition) -> list[MealComponentRecord]:
    """Build child rows carrying reference-basis values, not scaled ones."""
    return [
        MealComponentRecord(
            component_name=item.profile.name,
            portion_size=item.current_portion_grams,
            portion_unit="g",
            reference_portion_grams=item.profile.reference_portion_grams,
            base_calories=item.profile.calories,
            base_protein_g=item.profile.protein_g,
            base_carbs_g=item.profile.carbs_g,
            base_fat_g=item.profile.fat_g,
            base_fiber_g=item.profile.fiber_g,
        )
        for item in composition.items
    ]

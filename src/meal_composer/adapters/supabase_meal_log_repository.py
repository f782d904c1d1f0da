"""Supabase repository for meal logs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client, PostgrestAPIError

from meal_composer.domain.meals import MealComponentRecord, MealLogRecord
from meal_composer.services.meals import MealLogRepository, PersistenceError


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meal logs."""

    client: Client

    def create_meal(self, record: MealLogRecord) -> UUID:
        """Create a meal row and return its id."""
        try:
            response = (
                self.client.table("meals")
                .insert(
                    {
                        "user_id": str(record.user_id),
                        "meal_name": record.meal_name,
                        "meal_type": record.meal_type.value,
                        "total_calories": record.total_calories,
                        "total_protein_g": record.total_protein_g,
                        "total_carbs_g": record.total_carbs_g,
                        "total_fat_g": record.total_fat_g,
                        "total_fiber_g": record.total_fiber_g,
                        "is_compound": record.is_compound,
                        "portion_size": record.portion_size,
                        "portion_unit": record.portion_unit,
                        "is_ai_analyzed": record.is_ai_analyzed,
                        "notes": record.notes,
                    }
                )
                .execute()
            )
        except PostgrestAPIError as exc:
            raise PersistenceError(f"Failed to create meal: {exc}") from exc
        if not response.data:
            raise PersistenceError("Failed to create meal")
        return UUID(response.data[0]["id"])

    def create_components(
        self, meal_id: UUID, components: list[MealComponentRecord]
    ) -> None:
        """Create meal component rows."""
        payload = [
            {
                "meal_id": str(meal_id),
                "component_name": component.component_name,
                "portion_size": component.portion_size,
                "portion_unit": component.portion_unit,
                "reference_portion_grams": component.reference_portion_grams,
                "base_calories": component.base_calories,
                "base_protein_g": component.base_protein_g,
                "base_carbs_g": component.base_carbs_g,
                "base_fat_g": component.base_fat_g,
                "base_fiber_g": component.base_fiber_g,
            }
            for component in components
        ]
        if not payload:
            return
        try:
            self.client.table("meal_components").insert(payload).execute()
        except PostgrestAPIError as exc:
            raise PersistenceError(f"Failed to create meal components: {exc}") from exc

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal row."""
        try:
            self.client.table("meals").delete().eq("id", str(meal_id)).execute()
        except PostgrestAPIError as exc:
            raise PersistenceError(f"Failed to delete meal: {exc}") from exc

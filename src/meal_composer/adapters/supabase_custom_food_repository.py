"""Supabase implementation for custom foods."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client, PostgrestAPIError

from meal_composer.domain.meals import CustomFood
from meal_composer.services.custom_foods import CustomFoodRepository
from meal_composer.services.meals import PersistenceError


@dataclass
class SupabaseCustomFoodRepository(CustomFoodRepository):
    """Supabase-backed repository for ``user_foods``."""

    client: Client

    def create_food(self, user_id: UUID, payload: dict[str, object]) -> CustomFood:
        """Create a custom food and return it."""
        try:
            response = (
                self.client.table("user_foods")
                .insert({"user_id": str(user_id), **payload})
                .execute()
            )
        except PostgrestAPIError as exc:
            raise PersistenceError(f"Failed to create custom food: {exc}") from exc
        if not response.data:
            raise PersistenceError("Failed to create custom food")
        return _parse_food(response.data[0])

    def list_foods(self, user_id: UUID) -> list[CustomFood]:
        """Return a user's custom foods, newest first."""
        try:
            response = (
                self.client.table("user_foods")
                .select("*")
                .eq("user_id", str(user_id))
                .order("created_at", desc=True)
                .execute()
            )
        except PostgrestAPIError as exc:
            raise PersistenceError(f"Failed to list custom foods: {exc}") from exc
        return [_parse_food(row) for row in response.data or []]


def _parse_food(row: dict[str, object]) -> CustomFood:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None
    )
    return CustomFood(
        id=UUID(row["id"]),
        user_id=UUID(row["user_id"]),
        name=str(row.get("name", "")),
        original_food_name=row.get("original_food_name"),
        base_calories=float(row.get("base_calories") or 0.0),
        base_protein_g=float(row.get("base_protein_g") or 0.0),
        base_carbs_g=float(row.get("base_carbs_g") or 0.0),
        base_fat_g=float(row.get("base_fat_g") or 0.0),
        base_fiber_g=float(row.get("base_fiber_g") or 0.0),
        created_at=created_at,
    )

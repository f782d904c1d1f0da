"""Composition session for building a meal from scaled food items."""

import copy
import dataclasses
import logging
from enum import Enum
from uuid import UUID

from meal_composer.domain.composition import (
    CompositionItem,
    CompositionTotals,
    FinalizedComposition,
)
from meal_composer.domain.profiles import NutrientValues, ReferenceProfile
from meal_composer.services.nutrition import aggregate, scale
from meal_composer.services.portions import parse_quantity

_logger = logging.getLogger(__name__)


class UnknownItemError(LookupError):
    """Raised when an item id is not part of the session."""


class SessionStatus(str, Enum):
    """Lifecycle state of a composition session."""

    AWAITING_FIRST_ITEM = "AWAITING_FIRST_ITEM"
    COMPOSING = "COMPOSING"


def set_quantity(item: CompositionItem, raw: str | None) -> CompositionItem:
    """Apply a quantity expression to an item and re-derive its nutrients."""
    target = parse_quantity(raw, item.profile.reference_portion_grams)
    item.current_portion_grams = target
    item.display_quantity = raw if raw is not None else ""
    item.nutrients = scale(item.profile, target)
    return item


def edit_nutrients(item: CompositionItem, values: NutrientValues) -> CompositionItem:
    """Rewrite the item's per-reference values, keeping its current weight."""
    edited = ReferenceProfile.create(
        name=item.profile.name,
        reference_portion_grams=item.profile.reference_portion_grams,
        calories=values.calories,
        protein_g=values.protein_g,
        carbs_g=values.carbs_g,
        fat_g=values.fat_g,
        fiber_g=values.fiber_g,
        source=item.profile.source,
        custom_food_id=item.profile.custom_food_id,
    )
    item.profile = edited
    item.nutrients = scale(edited, item.current_portion_grams)
    return item


def replace_profile(
    item: CompositionItem, profile: ReferenceProfile
) -> CompositionItem:
    """Swap the item's food for another one at the same weight."""
    item.profile = profile
    item.nutrients = scale(profile, item.current_portion_grams)
    return item


def new_item(profile: ReferenceProfile) -> CompositionItem:
    """Create an item representing one reference portion of a food."""
    return CompositionItem(
        profile=profile,
        current_portion_grams=profile.reference_portion_grams,
        display_quantity="1",
        nutrients=scale(profile, profile.reference_portion_grams),
    )


class CompositionSession:
    """Ordered food items with an original snapshot and a session multiplier.

    Every snapshot entry is an independent deep copy of an item as it was
    first computed. The session multiplier is always applied to the snapshot,
    never to the live items, so repeated multiplier edits do not compound.
    """

    def __init__(self) -> None:
        self.items: list[CompositionItem] = []
        self.original_snapshot: list[CompositionItem] = []
        self.session_multiplier: float | None = None
        self.name_override: str | None = None
        self.display_name = ""

    @classmethod
    def from_profiles(cls, profiles: list[ReferenceProfile]) -> "CompositionSession":
        """Start a session with one reference portion of each profile."""
        session = cls()
        for profile in profiles:
            session.add_item(profile)
        return session

    @property
    def status(self) -> SessionStatus:
        """Return whether the session is waiting for its first item."""
        if not self.items:
            return SessionStatus.AWAITING_FIRST_ITEM
        return SessionStatus.COMPOSING

    @property
    def totals(self) -> CompositionTotals:
        """Return totals summed over the current items."""
        return aggregate(self.items)

    def get_item(self, item_id: UUID) -> CompositionItem:
        """Return a live item by id."""
        for item in self.items:
            if item.id == item_id:
                return item
        raise UnknownItemError(str(item_id))

    def add_item(self, profile: ReferenceProfile) -> CompositionItem:
        """Append one reference portion of a food.

        Under an active session multiplier the item enters scaled by it; its
        snapshot entry stays at one reference portion.
        """
        item = new_item(profile)
        self.items.append(item)
        self.original_snapshot.append(copy.deepcopy(item))
        if self.session_multiplier is not None and self.session_multiplier != 1:
            _apply_multiplier(item, item.current_portion_grams, self.session_multiplier)
        self._refresh()
        return item

    def remove_item(self, item_id: UUID) -> None:
        """Remove an item; an emptied session starts over."""
        item = self.get_item(item_id)
        self.items.remove(item)
        self.original_snapshot = [
            original for original in self.original_snapshot if original.id != item_id
        ]
        if not self.items:
            self.clear()
            return
        self._refresh()

    def set_item_quantity(self, item_id: UUID, raw: str | None) -> CompositionItem:
        """Apply a quantity expression to one item."""
        item = set_quantity(self.get_item(item_id), raw)
        self._refresh()
        return item

    def edit_item_nutrients(
        self, item_id: UUID, values: NutrientValues
    ) -> CompositionItem:
        """Manually rewrite one item's per-reference nutrient values."""
        item = edit_nutrients(self.get_item(item_id), values)
        self._refresh()
        return item

    def replace_item(
        self, item_id: UUID, profile: ReferenceProfile
    ) -> CompositionItem:
        """Replace one item's food, keeping its portion weight."""
        item = replace_profile(self.get_item(item_id), profile)
        self._refresh()
        return item

    def set_session_multiplier(self, raw: str | None) -> float:
        """Scale every item relative to the original total weight."""
        original_total = sum(
            original.current_portion_grams for original in self.original_snapshot
        )
        if original_total > 0:
            multiplier = parse_quantity(raw, original_total) / original_total
        else:
            multiplier = 1.0
        originals = {original.id: original for original in self.original_snapshot}
        for item in self.items:
            original = originals.get(item.id)
            if original is None:
                continue
            _apply_multiplier(item, original.current_portion_grams, multiplier)
        self.session_multiplier = multiplier
        _logger.debug(
            "Session multiplier %s applied to original total %sg",
            multiplier,
            original_total,
        )
        self._refresh()
        return multiplier

    def reset_to_original(self) -> None:
        """Restore every item to its first-computed state."""
        self.items = copy.deepcopy(self.original_snapshot)
        self.session_multiplier = 1.0
        self._refresh()

    def rename(self, name: str) -> None:
        """Set a display name that item edits will not overwrite."""
        self.name_override = name.strip() or None
        self._refresh()

    def clear(self) -> None:
        """Return the session to the awaiting-first-item state."""
        self.items = []
        self.original_snapshot = []
        self.session_multiplier = None
        self.name_override = None
        self.display_name = ""

    def finalize(self) -> FinalizedComposition:
        """Return a read-only view of the composition for persistence."""
        return FinalizedComposition(
            name=self.display_name,
            items=tuple(dataclasses.replace(item) for item in self.items),
            totals=self.totals,
            is_compound=len(self.items) > 1,
        )

    def _refresh(self) -> None:
        if self.name_override is not None:
            self.display_name = self.name_override
            return
        names = ", ".join(item.profile.name for item in self.items)
        multiplier = self.session_multiplier
        if names and multiplier is not None and multiplier != 1:
            names = f"{names} ({multiplier:g}x)"
        self.display_name = names


def _apply_multiplier(
    item: CompositionItem, original_grams: float, multiplier: float
) -> None:
    grams = original_grams * multiplier
    item.current_portion_grams = grams
    item.display_quantity = f"{grams:g}g"
    item.nutrients = scale(item.profile, grams)

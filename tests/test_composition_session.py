"""Tests for the composition session."""

from uuid import uuid4

import pytest

from meal_composer.domain.profiles import NutrientValues
from meal_composer.services.composition import (
    CompositionSession,
    SessionStatus,
    UnknownItemError,
)
from tests.conftest import make_profile


def _two_item_session() -> CompositionSession:
    session = CompositionSession()
    session.add_item(make_profile(name="A", calories=200, protein_g=20, fat_g=0))
    session.add_item(
        make_profile(
            name="B", reference_portion_grams=50, calories=80, protein_g=5, fat_g=0
        )
    )
    return session


def test_add_item_defaults_to_one_reference_portion() -> None:
    session = CompositionSession()
    assert session.status is SessionStatus.AWAITING_FIRST_ITEM

    item = session.add_item(make_profile(reference_portion_grams=75, calories=210))

    assert session.status is SessionStatus.COMPOSING
    assert item.current_portion_grams == 75
    assert item.display_quantity == "1"
    assert item.nutrients.calories == 210


def test_end_to_end_edit_and_reset() -> None:
    session = _two_item_session()
    a = session.items[0]

    assert session.totals.calories == 280
    assert session.totals.protein_g == 25

    session.set_item_quantity(a.id, "2")

    assert a.current_portion_grams == 200
    assert a.nutrients.calories == 400
    assert session.totals.calories == 480
    assert session.totals.protein_g == 45

    session.reset_to_original()

    assert session.totals.calories == 280
    assert session.totals.protein_g == 25


def test_set_quantity_keeps_raw_text() -> None:
    session = _two_item_session()
    a = session.items[0]

    session.set_item_quantity(a.id, "")

    assert a.display_quantity == ""
    assert a.current_portion_grams == 0
    assert a.nutrients == NutrientValues.zero()
    assert len(session.items) == 2

    session.set_item_quantity(a.id, "150g")

    assert a.display_quantity == "150g"
    assert a.nutrients.calories == 300


def test_session_multiplier_does_not_compound() -> None:
    session = _two_item_session()

    session.set_session_multiplier("2")
    session.set_session_multiplier("2")

    assert [item.current_portion_grams for item in session.items] == [200, 100]
    assert session.totals.calories == 560
    assert session.totals.portion_grams == 300
    assert session.session_multiplier == 2


def test_session_multiplier_ignores_prior_item_edits() -> None:
    session = _two_item_session()
    a = session.items[0]
    session.set_item_quantity(a.id, "3")

    session.set_session_multiplier("0.5")

    assert a.current_portion_grams == 50
    assert a.nutrients.calories == 100


def test_session_multiplier_accepts_total_grams() -> None:
    session = _two_item_session()

    multiplier = session.set_session_multiplier("300g")

    assert multiplier == 2
    assert session.totals.portion_grams == 300


def test_session_multiplier_on_empty_session_is_noop() -> None:
    session = CompositionSession()

    assert session.set_session_multiplier("3") == 1


def test_reset_is_idempotent_and_exact() -> None:
    session = _two_item_session()
    original = session.finalize()

    session.set_item_quantity(session.items[0].id, "3")
    session.set_session_multiplier("1.7")
    session.edit_item_nutrients(
        session.items[1].id, NutrientValues(999, 99, 99, 99, 99)
    )
    session.set_item_quantity(session.items[1].id, "33g")
    session.reset_to_original()
    first = session.finalize()
    session.reset_to_original()
    second = session.finalize()

    assert first.totals == original.totals
    assert second.totals == original.totals
    assert [item.nutrients for item in second.items] == [
        item.nutrients for item in original.items
    ]
    assert [item.profile for item in second.items] == [
        item.profile for item in original.items
    ]
    assert session.session_multiplier == 1


def test_reset_returns_independent_copies() -> None:
    session = _two_item_session()
    session.reset_to_original()

    session.set_item_quantity(session.items[0].id, "5")
    session.reset_to_original()

    assert session.items[0].current_portion_grams == 100
    assert session.items[0] is not session.original_snapshot[0]


def test_edit_nutrients_keeps_portion() -> None:
    session = CompositionSession()
    item = session.add_item(make_profile(reference_portion_grams=100, calories=100))
    session.set_item_quantity(item.id, "250g")

    session.edit_item_nutrients(item.id, NutrientValues(120, 10, 5, 2, 1))

    assert item.current_portion_grams == 250
    assert item.profile.reference_portion_grams == 100
    assert item.profile.calories == 120
    assert item.nutrients.calories == 300
    assert item.nutrients.protein_g == 25


def test_replace_item_keeps_portion() -> None:
    session = CompositionSession()
    item = session.add_item(make_profile(name="Rice", calories=130))
    session.set_item_quantity(item.id, "200g")

    session.replace_item(item.id, make_profile(name="Quinoa", calories=120))

    assert item.current_portion_grams == 200
    assert item.display_quantity == "200g"
    assert item.nutrients.calories == 240
    assert session.display_name == "Quinoa"


def test_remove_last_item_returns_to_awaiting() -> None:
    session = _two_item_session()
    session.set_session_multiplier("2")

    for item in list(session.items):
        session.remove_item(item.id)

    assert session.status is SessionStatus.AWAITING_FIRST_ITEM
    assert session.original_snapshot == []
    assert session.session_multiplier is None
    assert session.display_name == ""


def test_remove_item_recomputes_totals() -> None:
    session = _two_item_session()

    session.remove_item(session.items[1].id)

    assert session.totals.calories == 200
    assert session.display_name == "A"


def test_unknown_item_raises() -> None:
    session = _two_item_session()

    with pytest.raises(UnknownItemError):
        session.set_item_quantity(uuid4(), "2")


def test_display_name_follows_items_and_multiplier() -> None:
    session = _two_item_session()
    assert session.display_name == "A, B"

    session.set_session_multiplier("2")
    assert session.display_name == "A, B (2x)"

    session.reset_to_original()
    assert session.display_name == "A, B"


def test_manual_name_wins_until_cleared() -> None:
    session = _two_item_session()
    session.rename("Lunch bowl")

    session.add_item(make_profile(name="C"))
    assert session.display_name == "Lunch bowl"

    session.rename("")
    assert session.display_name == "A, B, C"


def test_finalize_is_read_only_view() -> None:
    session = _two_item_session()

    finalized = session.finalize()
    finalized.items[0].current_portion_grams = 999

    assert session.items[0].current_portion_grams == 100
    assert finalized.is_compound is True
    assert finalized.name == "A, B"


def test_single_item_totals_match_item() -> None:
    session = CompositionSession()
    item = session.add_item(
        make_profile(reference_portion_grams=85, calories=30, protein_g=2.4)
    )
    session.set_item_quantity(item.id, "1.3")

    totals = session.finalize().totals

    assert session.finalize().is_compound is False
    assert totals.calories == item.nutrients.calories
    assert totals.protein_g == item.nutrients.protein_g
    assert totals.portion_grams == item.current_portion_grams


def test_from_profiles_snapshots_every_item() -> None:
    session = CompositionSession.from_profiles(
        [make_profile(name="X"), make_profile(name="Y", reference_portion_grams=40)]
    )

    assert len(session.original_snapshot) == 2
    assert session.totals.portion_grams == 140


def test_item_added_under_multiplier_is_scaled() -> None:
    session = _two_item_session()
    session.set_session_multiplier("2")

    c = session.add_item(make_profile(name="C", calories=50, protein_g=0, fat_g=0))

    assert c.current_portion_grams == 200
    assert c.nutrients.calories == 100
    assert session.original_snapshot[2].current_portion_grams == 100
    assert session.display_name == "A, B, C (2x)"
    assert session.totals.calories == 660

    session.set_session_multiplier("2")
    assert c.current_portion_grams == 200

    session.reset_to_original()
    assert session.items[2].current_portion_grams == 100
    assert session.totals.calories == 330

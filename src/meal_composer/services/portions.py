"""Quantity expressions and reference-portion parsing."""

import math
import re

from meal_composer.domain.profiles import (
    DEFAULT_REFERENCE_GRAMS,
    FoodRecord,
    ReferenceProfile,
)

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)")
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")
_PARENTHESIZED_GRAMS = re.compile(r"\(\s*(\d+(?:\.\d+)?)\s*g", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_quantity(raw: str | None, reference_portion_grams: float) -> float:
    """Turn user input into a target portion weight in grams.

    ``"150g"`` (any letter present) is an absolute gram amount, ``"2"`` is a
    multiple of the reference portion and an empty field means 0 g. Anything
    unparseable falls back to one reference portion; this never raises.
    """
    if raw is None:
        return 0.0
    text = raw.strip()
    if not text:
        return 0.0

    if any(char.isalpha() for char in text):
        match = _LEADING_NUMBER.match(text)
        if match is None:
            return reference_portion_grams
        return _or_fallback(float(match.group(0)), reference_portion_grams)

    if _DECIMAL.fullmatch(text) is None:
        return reference_portion_grams
    return _or_fallback(float(text) * reference_portion_grams, reference_portion_grams)


def extract_reference_grams(portion: str | None) -> float:
    """Extract the gram weight a food source's values refer to."""
    if not portion:
        return DEFAULT_REFERENCE_GRAMS
    match = _PARENTHESIZED_GRAMS.search(portion)
    if match:
        grams = float(match.group(1))
        if grams > 0:
            return grams
    stripped = _NON_NUMERIC.sub("", portion)
    try:
        grams = float(stripped)
    except ValueError:
        return DEFAULT_REFERENCE_GRAMS
    if not math.isfinite(grams) or grams <= 0:
        return DEFAULT_REFERENCE_GRAMS
    return grams


def profile_from_record(
    record: FoodRecord, source: str = "search"
) -> ReferenceProfile:
    """Convert a food source record into a reference profile."""
    return ReferenceProfile.create(
        name=record.name,
        reference_portion_grams=extract_reference_grams(record.portion),
        calories=record.calories,
        protein_g=record.protein_g,
        carbs_g=record.carbs_g,
        fat_g=record.fat_g,
        fiber_g=record.fiber_g,
        source=source,
    )


def _or_fallback(grams: float, fallback: float) -> float:
    if not math.isfinite(grams) or grams < 0:
        return fallback
    return grams

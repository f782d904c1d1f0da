"""Meal photo analysis using LLMs."""

import base64
from dataclasses import dataclass
from typing import Protocol

from meal_composer.domain.meals import MealType
from meal_composer.domain.vision import VisionAnalysis
from meal_composer.services.composition import CompositionSession
from meal_composer.services.portions import profile_from_record

_NUMBER = {"type": "number", "minimum": 0}

VISION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meal_type": {"type": "string", "enum": [item.value for item in MealType]},
        "foods": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "portion": {"type": "string"},
                    "calories": _NUMBER,
                    "protein_g": _NUMBER,
                    "carbs_g": _NUMBER,
                    "fat_g": _NUMBER,
                    "fiber_g": _NUMBER,
                },
                "required": [
                    "name",
                    "portion",
                    "calories",
                    "protein_g",
                    "carbs_g",
                    "fat_g",
                    "fiber_g",
                ],
                "additionalProperties": False,
            },
        },
        "recommendations": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": ["meal_type", "foods", "recommendations"],
    "additionalProperties": False,
}

_PROMPT = (
    "Identify each food in this meal photo. For every food return a short name, "
    "the estimated portion as text including grams in parentheses, e.g. "
    "'1 bun (75g)', and calories, protein, carbs, fat and fiber for that "
    "portion. Also classify the meal type and give one short recommendation."
)


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured vision extraction data."""


@dataclass(frozen=True)
class PhotoComposition:
    """A composition session started from a photo."""

    session: CompositionSession
    meal_type: MealType
    notes: str | None


@dataclass
class VisionService:
    """Service that prepares vision prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, image_bytes: bytes) -> VisionAnalysis:
        """Analyze a meal photo via the configured client."""
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=VISION_SCHEMA,
            prompt=_PROMPT,
        )
        return VisionAnalysis.model_validate(raw)

    async def compose(self, image_bytes: bytes) -> PhotoComposition:
        """Analyze a photo and start a composition from the detected foods."""
        analysis = await self.analyze(image_bytes)
        return compose_from_analysis(analysis)


def compose_from_analysis(analysis: VisionAnalysis) -> PhotoComposition:
    """Start a session whose items are anchored at their detected portions."""
    profiles = [profile_from_record(food, source="vision") for food in analysis.foods]
    return PhotoComposition(
        session=CompositionSession.from_profiles(profiles),
        meal_type=analysis.meal_type,
        notes=analysis.recommendations,
    )


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"

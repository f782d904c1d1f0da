"""OpenAI Responses API client for meal photo analysis."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from meal_composer.services.vision import VisionClient


class EmptyAnalysisError(RuntimeError):
    """Raised when the model returns no structured output."""


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    schema_name: str = "meal_analysis"

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create an OpenAI vision client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Request a meal analysis that must match ``schema``."""
        content = [
            {"type": "input_text", "text": prompt},
            {"type": "input_image", "image_url": image_data_url, "detail": "high"},
        ]
        request: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": self.schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request)
        if not response.output_text:
            raise EmptyAnalysisError("OpenAI returned an empty meal analysis")
        return json.loads(response.output_text)

"""Food search service returning reference profiles."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from meal_composer.domain.profiles import FoodRecord, ReferenceProfile
from meal_composer.services.cache import Cache
from meal_composer.services.portions import profile_from_record

MIN_QUERY_LENGTH = 2

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class FoodSearchClient(Protocol):
    """Interface for the food search index."""

    async def search_foods(self, query: str) -> dict[str, object]:
        """Search foods by query and return the raw payload."""


@dataclass
class FoodSearchService:
    """Searches the food index with caching and a short retry."""

    client: FoodSearchClient
    cache: Cache
    ttl_seconds: int = 3600
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, limit: int = 10) -> list[ReferenceProfile]:
        """Return reference profiles matching a query."""
        cleaned = query.strip()
        if len(cleaned) < MIN_QUERY_LENGTH:
            return []
        cache_key = f"search:{cleaned.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached[:limit]

        payload = await self._call_with_retry(
            lambda: self.client.search_foods(cleaned), action="search"
        )
        profiles = _profiles_from_payload(payload)
        self.cache.set(cache_key, profiles, ttl_seconds=self.ttl_seconds)
        if self.debug:
            _logger.info("Food search: query=%s results=%s", cleaned, len(profiles))
        return profiles[:limit]

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                if self.debug:
                    _logger.warning(
                        "Food %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        _status_code_from_exception(exc),
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _profiles_from_payload(payload: dict[str, object]) -> list[ReferenceProfile]:
    """Convert raw search results, skipping records without a usable name."""
    foods = payload.get("foods") or []
    profiles: list[ReferenceProfile] = []
    if not isinstance(foods, list):
        return profiles
    for raw in foods:
        try:
            record = FoodRecord.model_validate(raw)
        except ValidationError:
            _logger.warning("Skipping malformed food record: %s", raw)
            continue
        profiles.append(profile_from_record(record, source="search"))
    return profiles


def _status_code_from_exception(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"

"""HTTP client for the food search index."""

from dataclasses import dataclass

import httpx

from meal_composer.services.food_search import FoodSearchClient


@dataclass
class HttpxFoodSearchClient(FoodSearchClient):
    """HTTPX-backed food search client."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxFoodSearchClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def search_foods(self, query: str) -> dict[str, object]:
        """Search foods by query."""
        response = await self.http_client.get(
            f"{self.base_url}/api/search-food",
            params={"query": query},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

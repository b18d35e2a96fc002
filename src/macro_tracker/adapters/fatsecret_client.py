"""FatSecret Platform REST API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from macro_tracker.services.signing import RequestSigner


class FatSecretClient(Protocol):
    """Interface for FatSecret API interactions."""

    async def search_foods(
        self, expression: str, max_results: int = 50, page_number: int = 0
    ) -> dict[str, object]:
        """Search foods by expression and return raw API data."""


@dataclass
class HttpxFatSecretClient(FatSecretClient):
    """HTTPX-backed FatSecret client signing every call with OAuth 1.0a."""

    base_url: str
    signer: RequestSigner
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, consumer_key: str, consumer_secret: str, base_url: str
    ) -> "HttpxFatSecretClient":
        """Create a FatSecret client with a managed httpx session."""
        return cls(
            base_url=base_url,
            signer=RequestSigner(consumer_key, consumer_secret),
            http_client=httpx.AsyncClient(),
        )

    async def search_foods(
        self, expression: str, max_results: int = 50, page_number: int = 0
    ) -> dict[str, object]:
        """Run a signed foods.search call."""
        params = {
            "method": "foods.search",
            "search_expression": expression,
            "format": "json",
            "max_results": max_results,
            "page_number": page_number,
        }
        response = await self.http_client.get(
            self.base_url,
            params=self.signer.sign("GET", self.base_url, params),
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

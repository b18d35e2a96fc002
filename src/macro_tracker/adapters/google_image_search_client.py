"""Google Custom Search client for food photos."""

from dataclasses import dataclass

import httpx

from macro_tracker.domain.images import ImageCandidate
from macro_tracker.services.images import ImageSearchClient

GOOGLE_CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


@dataclass
class HttpxGoogleImageSearchClient(ImageSearchClient):
    """HTTPX-backed image search using the Custom Search JSON API."""

    api_key: str
    engine_id: str
    http_client: httpx.AsyncClient
    base_url: str = GOOGLE_CUSTOM_SEARCH_URL

    @classmethod
    def create(cls, api_key: str, engine_id: str) -> "HttpxGoogleImageSearchClient":
        """Create a search client with a managed httpx session."""
        return cls(
            api_key=api_key, engine_id=engine_id, http_client=httpx.AsyncClient()
        )

    async def search_images(self, query: str, num: int = 5) -> list[ImageCandidate]:
        """Return medium-size, safe-search image results."""
        response = await self.http_client.get(
            self.base_url,
            params={
                "key": self.api_key,
                "cx": self.engine_id,
                "q": query,
                "searchType": "image",
                "num": num,
                "imgSize": "medium",
                "safe": "active",
            },
            timeout=15,
        )
        response.raise_for_status()
        items = response.json().get("items") or []
        return [
            ImageCandidate(
                url=item["link"],
                title=item.get("title") or "",
                snippet=item.get("snippet") or "",
                context_link=(item.get("image") or {}).get("contextLink") or "",
            )
            for item in items
            if item.get("link")
        ]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

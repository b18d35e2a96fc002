"""Image prefetching over HTTP."""

from dataclasses import dataclass

import httpx

from macro_tracker.services.image_cache import ImagePrefetcher


@dataclass
class HttpxImagePrefetcher(ImagePrefetcher):
    """Downloads an image once so intermediate caches hold it."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImagePrefetcher":
        """Create a prefetcher with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def prefetch(self, url: str) -> bool:
        """Fetch the URL; True when it answered with an image."""
        if not url:
            return False
        response = await self.http_client.get(url, timeout=15)
        response.raise_for_status()
        return response.headers.get("content-type", "").startswith("image/")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

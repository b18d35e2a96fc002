"""Food image lookup: cache first, then a rate-limited search and LLM pick."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from macro_tracker.domain.images import ImageCandidate
from macro_tracker.services.image_cache import ImageCache
from macro_tracker.services.rate_limiter import RateLimiter

BEST_IMAGE_PATTERN = re.compile(r"BEST_IMAGE_URL: (https?://[^\s\"]+)")

SELECTION_SYSTEM_PROMPT = (
    "You are an expert food photographer assistant. "
    "Your task is to select the most appetizing and accurate image for "
    "a specific food item."
)

_logger = logging.getLogger(__name__)


class ImageSearchClient(Protocol):
    """Interface for an image search engine."""

    async def search_images(self, query: str, num: int = 5) -> list[ImageCandidate]:
        """Return image candidates for a query."""


class ImageSelector(Protocol):
    """Interface for an LLM that picks the best candidate."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's text reply."""


@dataclass
class FoodImageService:
    """Finds and caches a representative photo for a food."""

    cache: ImageCache
    search_client: ImageSearchClient
    rate_limiter: RateLimiter
    selector: ImageSelector | None = None
    candidate_count: int = 5

    async def find_image(
        self, food_name: str, brand_name: str | None = None
    ) -> str | None:
        """Return an image URL for the food, or None when none was found."""
        cached = self.cache.get(food_name, brand_name)
        if cached:
            return cached

        query = build_image_query(food_name, brand_name)
        try:
            candidates = await self.rate_limiter.schedule(
                lambda: self.search_client.search_images(
                    query, num=self.candidate_count
                )
            )
            if not candidates:
                _logger.info("No images found: query=%s", query)
                return None
            image_url = await self._select(query, candidates)
        except Exception:
            _logger.exception("Image lookup failed: query=%s", query)
            return None

        await self.cache.put(food_name, brand_name, image_url)
        return image_url

    async def _select(self, query: str, candidates: list[ImageCandidate]) -> str:
        fallback = candidates[0].url
        selector = self.selector
        if selector is None or len(candidates) == 1:
            return fallback
        prompt = build_selection_prompt(query, candidates)
        try:
            reply = await self.rate_limiter.schedule(
                lambda: selector.complete(SELECTION_SYSTEM_PROMPT, prompt)
            )
        except Exception:
            _logger.exception("Image selection failed, using first result")
            return fallback
        return parse_best_image_url(reply) or fallback


def build_image_query(food_name: str, brand_name: str | None = None) -> str:
    """Search query for a food photo."""
    parts = [food_name.strip()]
    if brand_name and brand_name.strip():
        parts.append(brand_name.strip())
    parts.append("food photo")
    return " ".join(parts)


def build_selection_prompt(query: str, candidates: list[ImageCandidate]) -> str:
    """Ask the model to choose one candidate and answer in a fixed format."""
    listing = "\n".join(
        f"{index}. {candidate.model_dump_json()}"
        for index, candidate in enumerate(candidates, start=1)
    )
    return (
        f'I\'m looking for the best image of "{query}". Please analyze these '
        "images and select the BEST ONE based on:\n"
        "1. Visual appeal (appetizing, well-lit, professional quality)\n"
        "2. Accuracy (most closely matches the food item)\n"
        "3. Clear presentation (food is clearly visible, not obscured)\n"
        "4. Neutral background (professional food photography style)\n\n"
        f"Here are the candidate images:\n{listing}\n\n"
        "Return ONLY the URL of the best image in this exact format:\n"
        "BEST_IMAGE_URL: [url]"
    )


def parse_best_image_url(reply: str | None) -> str | None:
    """Pull the chosen URL out of the model reply."""
    if not reply:
        return None
    match = BEST_IMAGE_PATTERN.search(reply)
    return match.group(1) if match else None

"""Food image URL cache with expiry and background prefetch."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from macro_tracker.domain.images import ImageCacheEntry
from macro_tracker.services.cache import KeyValueStore

CACHE_KEY_PREFIX = "food_image_cache_"
DEFAULT_TTL_DAYS = 30
_MS_PER_DAY = 24 * 60 * 60 * 1000

_logger = logging.getLogger(__name__)


class ImagePrefetcher(Protocol):
    """Warms an image URL so later loads are fast."""

    async def prefetch(self, url: str) -> bool:
        """Fetch the image; return True when it loaded."""


def cache_key(food_name: str, brand_name: str | None = None) -> str:
    """Build the normalized storage key for a food and optional brand."""
    food = food_name.strip().lower()
    brand = brand_name.strip().lower() if brand_name else ""
    return f"{CACHE_KEY_PREFIX}{brand}_{food}"


@dataclass
class ImageCache:
    """Maps foods to image URLs for a limited number of days."""

    store: KeyValueStore
    prefetcher: ImagePrefetcher | None = None
    ttl_days: int = DEFAULT_TTL_DAYS
    clock: Callable[[], float] = time.time
    _prefetches: set[asyncio.Task[bool]] = field(default_factory=set, repr=False)

    @property
    def ttl_ms(self) -> int:
        return self.ttl_days * _MS_PER_DAY

    def get(self, food_name: str, brand_name: str | None = None) -> str | None:
        """Return a cached URL, evicting it if it has expired."""
        key = cache_key(food_name, brand_name)
        try:
            raw = self.store.get_item(key)
        except Exception:
            _logger.exception("Image cache read failed: key=%s", key)
            return None
        if raw is None:
            return None

        try:
            entry = ImageCacheEntry.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding malformed image cache entry: key=%s", key)
            self._remove(key)
            return None

        if self._now_ms() - entry.timestamp < self.ttl_ms:
            return entry.image_url
        self._remove(key)
        return None

    async def put(
        self, food_name: str, brand_name: str | None, image_url: str
    ) -> None:
        """Store a URL and start prefetching it without waiting."""
        key = cache_key(food_name, brand_name)
        entry = ImageCacheEntry(image_url=image_url, timestamp=self._now_ms())
        try:
            self.store.set_item(key, entry.model_dump_json(by_alias=True))
        except Exception:
            _logger.exception("Image cache write failed: key=%s", key)
            return
        self._start_prefetch(image_url)

    async def wait_for_prefetches(self) -> None:
        """Await every prefetch still in flight."""
        if self._prefetches:
            await asyncio.gather(*self._prefetches, return_exceptions=True)

    def _start_prefetch(self, url: str) -> None:
        if self.prefetcher is None or not url:
            return
        task = asyncio.create_task(self.prefetcher.prefetch(url))
        self._prefetches.add(task)
        task.add_done_callback(self._prefetch_done)

    def _prefetch_done(self, task: "asyncio.Task[bool]") -> None:
        self._prefetches.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Image prefetch failed: %s", exc)
        elif not task.result():
            _logger.info("Image prefetch returned no image")

    def _remove(self, key: str) -> None:
        try:
            self.store.remove_item(key)
        except Exception:
            _logger.exception("Image cache eviction failed: key=%s", key)

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

"""FIFO rate limiter for calls to rate-capped external APIs."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")

WINDOW_SECONDS = 60.0
WINDOW_BUFFER_SECONDS = 0.1

_logger = logging.getLogger(__name__)


@dataclass
class _Job:
    task: Callable[[], Awaitable[Any]]
    future: "asyncio.Future[Any]"


@dataclass
class RateLimiter:
    """Runs scheduled tasks one at a time, capped per rolling minute.

    Tasks run strictly in the order they were scheduled. The start times of
    the last ``max_requests_per_minute`` tasks are kept; when the oldest of
    them is less than a minute old the drain loop sleeps until it ages out.
    After every task it pauses for ``request_delay_seconds``. A failing task
    rejects its own future and the queue carries on.
    """

    max_requests_per_minute: int = 5
    request_delay_seconds: float = 1.0
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _queue: deque[_Job] = field(default_factory=deque, repr=False)
    _recent_starts: deque[float] = field(default_factory=deque, repr=False)
    _drain_task: "asyncio.Task[None] | None" = field(default=None, repr=False)

    @property
    def is_processing(self) -> bool:
        return self._drain_task is not None and not self._drain_task.done()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def schedule(self, task: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """Queue a task and return a future for its result."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()
        self._queue.append(_Job(task=task, future=future))
        drain_task = self._drain_task
        if not self.is_processing or (
            drain_task is not None and drain_task.get_loop() is not loop
        ):
            self._drain_task = loop.create_task(self._drain())
        return future

    async def join(self) -> None:
        """Wait until the queue has been drained."""
        while self._drain_task is not None and not self._drain_task.done():
            await asyncio.shield(self._drain_task)

    async def _drain(self) -> None:
        try:
            while self._queue:
                await self._wait_for_slot()
                job = self._queue.popleft()
                self._record_start(self.clock())
                await self._run(job)
                await self.sleep(self.request_delay_seconds)
        except asyncio.CancelledError:
            self._abandon_queue()
            raise

    async def _wait_for_slot(self) -> None:
        if len(self._recent_starts) < self.max_requests_per_minute:
            return
        elapsed = self.clock() - self._recent_starts[0]
        if elapsed >= WINDOW_SECONDS:
            return
        wait = WINDOW_SECONDS - elapsed + WINDOW_BUFFER_SECONDS
        _logger.info("Rate limit reached, waiting %.1fs", wait)
        await self.sleep(wait)

    def _record_start(self, started_at: float) -> None:
        self._recent_starts.append(started_at)
        while len(self._recent_starts) > self.max_requests_per_minute:
            self._recent_starts.popleft()

    async def _run(self, job: _Job) -> None:
        try:
            result = await job.task()
        except asyncio.CancelledError:
            job.future.cancel()
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            _logger.warning("Rate limited task was cancelled")
            return
        except Exception as exc:
            _logger.error("Rate limited task failed: %s", exc)
            if not job.future.done():
                job.future.set_exception(exc)
            return
        if not job.future.done():
            job.future.set_result(result)

    def _abandon_queue(self) -> None:
        while self._queue:
            self._queue.popleft().future.cancel()

"""
Fixed-interval poller.

Mirrors a query with ``refetchInterval``: fetch, deliver, sleep, repeat.
``invalidate()`` cuts the sleep short so the next fetch happens now. A failed
fetch is recorded and reported; the loop simply waits for the next tick.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Poller(Generic[T]):
    """Polls ``fetch`` every ``interval_seconds`` on the running event loop."""

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        interval_seconds: float,
        on_data: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = float(interval_seconds)
        self._fetch = fetch
        self._on_data = on_data
        self._on_error = on_error
        self._wake = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        self.data: Optional[T] = None
        self.last_error: Optional[Exception] = None
        self.fetch_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_loading(self) -> bool:
        """True until the first fetch has completed, successfully or not."""
        return self.fetch_count == 0

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"poller:{self.name}")
        logger.debug("[Poller:%s] started (every %.1fs)", self.name, self.interval_seconds)

    def invalidate(self) -> None:
        """Force the next fetch to happen immediately."""
        self._wake.set()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("[Poller:%s] stopped", self.name)

    def cancel(self) -> None:
        """Synchronous stop for use inside timer callbacks."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def poll_once(self) -> Optional[T]:
        """Fetch once and deliver the result; errors are recorded, not raised."""
        self.fetch_count += 1
        try:
            data = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_error = exc
            logger.warning("[Poller:%s] fetch failed: %s", self.name, exc)
            if self._on_error:
                self._on_error(exc)
            return None

        self.last_error = None
        self.data = data
        if self._on_data:
            self._on_data(data)
        return data

    async def _run(self) -> None:
        while True:
            self._wake.clear()
            await self.poll_once()
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._wake.wait(), timeout=self.interval_seconds)

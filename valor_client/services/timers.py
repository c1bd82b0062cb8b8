"""
定时器工具

Cooperative fixed-delay timers on the running event loop. Components take a
``Scheduler`` so that tests can drive time by hand.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Default scheduler: ``call_later`` on the running loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


class TimerGroup:
    """
    A set of pending one-shot timers that can be cancelled together.

    ``on_drained`` fires after the last pending timer has run.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        on_drained: Optional[Callable[[], None]] = None,
    ) -> None:
        self._scheduler: Scheduler = scheduler or loop_scheduler
        self._pending: Set[Any] = set()
        self._on_drained = on_drained

    def later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle: Any = None

        def _fire() -> None:
            self._pending.discard(handle)
            callback()
            if not self._pending and self._on_drained:
                self._on_drained()

        handle = self._scheduler(delay, _fire)
        self._pending.add(handle)
        return handle

    @property
    def pending(self) -> int:
        return len(self._pending)

    def cancel_all(self) -> None:
        for handle in list(self._pending):
            handle.cancel()
        if self._pending:
            logger.debug("[Timers] cancelled %d pending timers", len(self._pending))
        self._pending.clear()

"""
World clock, weather and HUD energy.

Both are background polls whose failures are ignored: the last good value
stays on screen.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from valor_client.config import settings
from valor_client.models.account import EnergyStatus
from valor_client.models.world import WorldTime
from valor_client.services.api_client import ValorApiClient
from valor_client.services.poller import Poller
from valor_client.services.timers import Scheduler, TimerGroup

logger = logging.getLogger(__name__)


class LightningTicker:
    """While active, rolls for a short lightning flash on a fixed cadence."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        on_change: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._timers = TimerGroup(scheduler)
        self._rng = rng or random.Random()
        self._on_change = on_change
        self.active = False
        self.flashing = False
        self.flash_count = 0

    def set_active(self, active: bool) -> None:
        if active == self.active:
            return
        self.active = active
        if active:
            self._schedule_roll()
        else:
            self._timers.cancel_all()
            self._set_flashing(False)

    def _schedule_roll(self) -> None:
        self._timers.later(settings.lightning_check_seconds, self._roll)

    def _roll(self) -> None:
        if not self.active:
            return
        if self._rng.random() < settings.lightning_chance:
            self.flash_count += 1
            self._set_flashing(True)
            self._timers.later(
                settings.lightning_flash_seconds, lambda: self._set_flashing(False)
            )
        self._schedule_roll()

    def _set_flashing(self, value: bool) -> None:
        if self.flashing == value:
            return
        self.flashing = value
        if self._on_change:
            self._on_change(value)

    def stop(self) -> None:
        self.set_active(False)


class WorldClock:
    """世界时间/天气轮询（15 秒）"""

    def __init__(
        self,
        api: ValorApiClient,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        poll_interval_seconds: Optional[float] = None,
    ) -> None:
        self.api = api
        self.lightning = LightningTicker(scheduler=scheduler, rng=rng)
        self.poller: Poller[WorldTime] = Poller(
            name="world-time",
            fetch=self.api.get_world_time,
            interval_seconds=poll_interval_seconds or settings.world_time_poll_seconds,
            on_data=self._on_world_time,
        )

    @property
    def world_time(self) -> Optional[WorldTime]:
        return self.poller.data

    def _on_world_time(self, world_time: WorldTime) -> None:
        self.lightning.set_active(world_time.has_thunderstorm)

    def start(self) -> None:
        self.poller.start()

    async def refresh(self) -> Optional[WorldTime]:
        await self.poller.poll_once()
        return self.world_time

    async def stop(self) -> None:
        await self.poller.stop()
        self.lightning.stop()


class EnergyMonitor:
    """HUD 体力轮询（30 秒）"""

    def __init__(
        self,
        api: ValorApiClient,
        account_id: str,
        poll_interval_seconds: Optional[float] = None,
    ) -> None:
        self.api = api
        self.account_id = account_id
        self.poller: Poller[EnergyStatus] = Poller(
            name=f"energy:{account_id}",
            fetch=lambda: self.api.get_energy(account_id),
            interval_seconds=poll_interval_seconds or settings.energy_poll_seconds,
        )

    @property
    def energy(self) -> Optional[EnergyStatus]:
        return self.poller.data

    def start(self) -> None:
        self.poller.start()

    async def refresh(self) -> Optional[EnergyStatus]:
        await self.poller.poll_once()
        return self.energy

    async def stop(self) -> None:
        await self.poller.stop()

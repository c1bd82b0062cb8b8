"""
Combat effect dispatcher.

Owns the transient view state of a duel (floating numbers, shakes, crit
flash, hit spark, fainted sides, result overlay) and clears each piece with
a fixed timeout.
"""
from __future__ import annotations

import itertools
import logging
import random
from typing import Callable, Iterable, List, Optional, Set

from valor_client.combat.palette import (
    CRIT_COLOR,
    DAMAGE_TAKEN_COLOR,
    DEFAULT_ELEMENT,
    ENEMY_HIT_COLOR,
    FLOAT_BASE_X,
    FLOAT_BASE_Y,
    FLOAT_JITTER,
    HEAL_COLOR,
    SPARK_X,
    SPARK_Y,
)
from valor_client.config import settings
from valor_client.models.visual import (
    FloatingNumber,
    HitSpark,
    ResultScreen,
    Side,
    VisualEvent,
    VisualEventType,
)
from valor_client.services.timers import Scheduler, TimerGroup

logger = logging.getLogger(__name__)


class EffectDispatcher:
    """Turns visual events into timed view state."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        on_idle: Optional[Callable[[], None]] = None,
    ) -> None:
        self._timers = TimerGroup(scheduler, on_drained=on_idle)
        self._rng = rng or random.Random()
        self._ids = itertools.count(1)

        # ===== 视觉状态 =====
        self.floating_numbers: List[FloatingNumber] = []
        self.shaking: Set[Side] = set()
        self.crit_flash = False
        self.hit_spark: Optional[HitSpark] = None
        self.defeated: Set[Side] = set()
        self.result: Optional[ResultScreen] = None

    @property
    def busy(self) -> bool:
        return self._timers.pending > 0

    def dispatch(self, events: Iterable[VisualEvent]) -> None:
        for event in events:
            if event.type == VisualEventType.DAMAGE:
                self._on_damage(event)
            elif event.type == VisualEventType.CRIT:
                self.flash_crit()
            elif event.type == VisualEventType.HEAL:
                self.spawn_floating_number(f"+{event.amount}", event.side, HEAL_COLOR)
            elif event.type == VisualEventType.FAINT:
                self.defeated.add(event.side)
            elif event.type == VisualEventType.FINISHED:
                self._timers.later(
                    settings.finish_reveal_delay_seconds,
                    lambda victory=bool(event.victory): self.show_result(victory),
                )

    def _on_damage(self, event: VisualEvent) -> None:
        side = event.side
        self.shake(side)
        if side == Side.PLAYER:
            color = DAMAGE_TAKEN_COLOR
        else:
            color = CRIT_COLOR if event.is_crit else ENEMY_HIT_COLOR
        self.spawn_floating_number(f"-{event.amount}", side, color, event.is_crit)
        self.trigger_hit_spark(side, event.element or DEFAULT_ELEMENT)

    # ==================== 单项效果 ====================

    def spawn_floating_number(
        self,
        value: str,
        side: Side,
        color: str,
        is_crit: bool = False,
    ) -> FloatingNumber:
        number = FloatingNumber(
            id=next(self._ids),
            value=value,
            x=FLOAT_BASE_X[side] + (self._rng.random() - 0.5) * FLOAT_JITTER,
            y=FLOAT_BASE_Y + (self._rng.random() - 0.5) * FLOAT_JITTER,
            color=color,
            is_crit=is_crit,
            side=side,
        )
        self.floating_numbers.append(number)
        self._timers.later(
            settings.floating_number_ttl_seconds,
            lambda: self._remove_floating_number(number.id),
        )
        return number

    def _remove_floating_number(self, number_id: int) -> None:
        self.floating_numbers = [n for n in self.floating_numbers if n.id != number_id]

    def shake(self, side: Side) -> None:
        self.shaking.add(side)
        self._timers.later(settings.shake_seconds, lambda: self.shaking.discard(side))

    def flash_crit(self) -> None:
        self.crit_flash = True
        self._timers.later(settings.crit_flash_seconds, self._clear_crit_flash)

    def _clear_crit_flash(self) -> None:
        self.crit_flash = False

    def trigger_hit_spark(self, side: Side, element: str) -> None:
        spark = HitSpark(x=SPARK_X[side], y=SPARK_Y, element=element)
        self.hit_spark = spark
        self._timers.later(settings.hit_spark_seconds, lambda: self._clear_hit_spark(spark))

    def _clear_hit_spark(self, spark: HitSpark) -> None:
        # 只清除自己那一次火花
        if self.hit_spark is spark:
            self.hit_spark = None

    def show_result(self, victory: bool) -> None:
        self.result = ResultScreen.VICTORY if victory else ResultScreen.DEFEAT
        logger.info("[Effects] showing %s screen", self.result.value)

    def later(self, delay: float, callback: Callable[[], None]) -> None:
        """Schedule an extra callback under the same unmount scope."""
        self._timers.later(delay, callback)

    def cancel_all(self) -> None:
        self._timers.cancel_all()

"""
对决会话

Wires the combat poller, delta reconciler, effect dispatcher and action
submitter together for one challenge. ``start()`` / ``close()`` play the
role of mounting and unmounting the combat screen.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, List, Optional, Union

from valor_client.combat.effects import EffectDispatcher
from valor_client.combat.reconciler import DeltaReconciler
from valor_client.combat.submitter import ActionSubmitter
from valor_client.config import settings
from valor_client.models.combat import CombatAction, CombatActionResponse, CombatState
from valor_client.models.visual import VisualEvent, VisualEventType
from valor_client.services.api_client import ValorApiClient
from valor_client.services.notifier import Notifier
from valor_client.services.poller import Poller
from valor_client.services.timers import Scheduler

logger = logging.getLogger(__name__)


class CombatSession:
    """
    One duel as seen by ``player_id``.

    Polled path: snapshot -> reconciler -> dispatcher; a ``finished`` snapshot
    reveals the result after a short delay.
    Mutation path: a finished combat state in the action response shows the
    result immediately. Either way the completion callback runs once, after
    the result has been on screen for ``combat_end_delay_seconds``.
    """

    def __init__(
        self,
        api: ValorApiClient,
        challenge_id: str,
        player_id: str,
        notifier: Optional[Notifier] = None,
        on_combat_end: Optional[Callable[[], None]] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        poll_interval_seconds: Optional[float] = None,
    ) -> None:
        self.api = api
        self.challenge_id = challenge_id
        self.player_id = player_id
        self.notifier = notifier or Notifier()
        self._on_combat_end = on_combat_end

        self.state: Optional[CombatState] = None
        self.reconciler = DeltaReconciler(player_id)
        self.effects = EffectDispatcher(
            scheduler=scheduler, rng=rng, on_idle=self.reconciler.settle
        )
        self.poller: Poller[Optional[CombatState]] = Poller(
            name=f"combat:{challenge_id}",
            fetch=lambda: self.api.get_combat_state(challenge_id),
            interval_seconds=poll_interval_seconds or settings.combat_poll_seconds,
            on_data=self.apply_snapshot,
        )
        self.submitter = ActionSubmitter(
            api,
            challenge_id,
            player_id,
            self.notifier,
            on_submitted=self.poller.invalidate,
            on_finished=self._finish_from_response,
        )

        self._end_scheduled = False
        self.ended = asyncio.Event()

    # ==================== 生命周期 ====================

    async def start(self) -> None:
        self.poller.start()
        logger.info("[Combat] watching challenge %s as %s", self.challenge_id, self.player_id)

    async def close(self) -> None:
        await self.poller.stop()
        self.effects.cancel_all()

    async def __aenter__(self) -> "CombatSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def wait_ended(self, timeout: Optional[float] = None) -> bool:
        try:
            await asyncio.wait_for(self.ended.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    # ==================== 状态 ====================

    @property
    def is_loading(self) -> bool:
        return self.poller.is_loading

    @property
    def last_error(self) -> Optional[Exception]:
        return self.poller.last_error

    @property
    def can_submit(self) -> bool:
        return self.submitter.can_submit(self.state)

    @property
    def waiting_for_opponent(self) -> bool:
        return self.submitter.waiting_for_opponent(self.state)

    async def refresh(self) -> Optional[CombatState]:
        return await self.poller.poll_once()

    def apply_snapshot(self, snapshot: Optional[CombatState]) -> List[VisualEvent]:
        """Reconcile a freshly polled snapshot and schedule its effects."""
        baseline = self.reconciler.previous is None
        events = self.reconciler.observe(snapshot)
        self.state = snapshot
        if baseline and snapshot is not None and snapshot.is_finished:
            # 重新进入已结束的对决：直接显示结果
            self.effects.show_result(snapshot.is_winner(self.player_id))
            self._schedule_end(settings.combat_end_delay_seconds)
        if events:
            self.effects.dispatch(events)
            self.reconciler.mark_scheduled()
            if any(event.type == VisualEventType.FINISHED for event in events):
                self._schedule_end(
                    settings.finish_reveal_delay_seconds + settings.combat_end_delay_seconds
                )
        return events

    # ==================== 行动 ====================

    async def submit_action(
        self, action: Union[CombatAction, str]
    ) -> Optional[CombatActionResponse]:
        return await self.submitter.submit(action, self.state)

    def _finish_from_response(self, final_state: CombatState) -> None:
        self.state = final_state
        self.reconciler.adopt(final_state)
        self.effects.show_result(final_state.is_winner(self.player_id))
        self._schedule_end(settings.combat_end_delay_seconds)

    def _schedule_end(self, delay: float) -> None:
        if self._end_scheduled:
            return
        self._end_scheduled = True
        self.effects.later(delay, self._end)

    def _end(self) -> None:
        self.poller.cancel()
        self.ended.set()
        logger.info("[Combat] challenge %s ended", self.challenge_id)
        if self._on_combat_end:
            self._on_combat_end()

"""
Action submitter.

Posts one action per round and keeps input disabled until the server has
resolved the round (the player's ``action`` in the next snapshot is empty
again).
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from valor_client.models.combat import CombatAction, CombatActionResponse, CombatState
from valor_client.services.api_client import RequestFailure, ValorApiClient, failure_message
from valor_client.services.notifier import Notifier

logger = logging.getLogger(__name__)


class ActionSubmitter:
    def __init__(
        self,
        api: ValorApiClient,
        challenge_id: str,
        player_id: str,
        notifier: Notifier,
        on_submitted: Optional[Callable[[], None]] = None,
        on_finished: Optional[Callable[[CombatState], None]] = None,
    ) -> None:
        self.api = api
        self.challenge_id = challenge_id
        self.player_id = player_id
        self.notifier = notifier
        self._on_submitted = on_submitted
        self._on_finished = on_finished

        self.selected_action: Optional[CombatAction] = None
        self.pending = False

    def can_submit(self, snapshot: Optional[CombatState]) -> bool:
        if self.pending or snapshot is None or snapshot.is_finished:
            return False
        mine, _ = snapshot.sides(self.player_id)
        return not mine.has_acted

    def waiting_for_opponent(self, snapshot: Optional[CombatState]) -> bool:
        if snapshot is None:
            return False
        mine, opponent = snapshot.sides(self.player_id)
        return mine.has_acted and not opponent.has_acted

    async def submit(
        self,
        action: Union[CombatAction, str],
        snapshot: Optional[CombatState],
    ) -> Optional[CombatActionResponse]:
        """
        Post ``action`` for the current round.

        Returns the server response, or ``None`` when submission is not
        allowed right now or the request failed (a toast has been raised).

        Raises:
            ValueError: ``action`` is not attack/defend/dodge/spell.
        """
        chosen = CombatAction(action)
        if not self.can_submit(snapshot):
            logger.debug("[Submitter] %s ignored: input disabled", chosen.value)
            return None

        self.selected_action = chosen
        self.pending = True
        try:
            response = await self.api.submit_combat_action(
                self.challenge_id, self.player_id, chosen
            )
        except RequestFailure as exc:
            self.selected_action = None
            logger.warning("[Submitter] %s failed: %s", chosen.value, exc)
            self.notifier.error("Action Failed", failure_message(exc))
            return None
        finally:
            self.pending = False

        self.selected_action = None
        if self._on_submitted:
            self._on_submitted()

        if response.combat_state is not None and response.combat_state.is_finished:
            if self._on_finished:
                self._on_finished(response.combat_state)
        elif response.message:
            self.notifier.info("Action Submitted", response.message)
        return response

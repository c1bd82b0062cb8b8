"""
Combat delta reconciler.

The server sends whole snapshots without structured events, so the client
infers what happened by comparing consecutive snapshots:

- hp went down  -> damage on that side
- hp went up    -> heal on that side
- hp crossed 0  -> faint
- last log line contains "crit" -> the enemy hit was a crit
- status became ``finished`` -> victory / defeat

This is a heuristic. Several hits in one round collapse into one delta per
side, and crit detection depends on the server's log wording.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from valor_client.combat.palette import DEFAULT_ELEMENT
from valor_client.models.combat import CombatState, CombatStatus
from valor_client.models.visual import Side, VisualEvent, VisualEventType

logger = logging.getLogger(__name__)


class ReconcilerPhase(str, Enum):
    """对账状态机"""

    IDLE = "idle"
    AWAITING_ROUND = "awaiting_round"
    EVENT_DETECTED = "event_detected"
    EFFECT_SCHEDULED = "effect_scheduled"


def is_crit_line(line: str) -> bool:
    return "crit" in (line or "").lower()


def diff_snapshots(
    previous: CombatState,
    current: CombatState,
    player_id: str,
) -> List[VisualEvent]:
    """Infer visual events between two snapshots seen by ``player_id``."""
    events: List[VisualEvent] = []

    if current.status == CombatStatus.RESOLVED or current.round != previous.round:
        mine, opponent = current.sides(player_id)
        prev_mine, prev_opponent = previous.sides(player_id)

        if current.round != previous.round:
            events.append(
                VisualEvent(type=VisualEventType.ROUND_ADVANCE, round=current.round)
            )

        if mine.hp < prev_mine.hp:
            events.append(
                VisualEvent(
                    type=VisualEventType.DAMAGE,
                    side=Side.PLAYER,
                    amount=prev_mine.hp - mine.hp,
                    element=opponent.element or DEFAULT_ELEMENT,
                    round=current.round,
                )
            )

        if opponent.hp < prev_opponent.hp:
            crit = is_crit_line(current.last_log_line)
            events.append(
                VisualEvent(
                    type=VisualEventType.DAMAGE,
                    side=Side.ENEMY,
                    amount=prev_opponent.hp - opponent.hp,
                    is_crit=crit,
                    element=mine.element or DEFAULT_ELEMENT,
                    round=current.round,
                )
            )
            if crit:
                events.append(
                    VisualEvent(
                        type=VisualEventType.CRIT,
                        side=Side.ENEMY,
                        is_crit=True,
                        round=current.round,
                    )
                )

        if mine.hp > prev_mine.hp:
            events.append(
                VisualEvent(
                    type=VisualEventType.HEAL,
                    side=Side.PLAYER,
                    amount=mine.hp - prev_mine.hp,
                    round=current.round,
                )
            )
        if opponent.hp > prev_opponent.hp:
            events.append(
                VisualEvent(
                    type=VisualEventType.HEAL,
                    side=Side.ENEMY,
                    amount=opponent.hp - prev_opponent.hp,
                    round=current.round,
                )
            )

        if mine.hp <= 0 < prev_mine.hp:
            events.append(
                VisualEvent(type=VisualEventType.FAINT, side=Side.PLAYER, round=current.round)
            )
        if opponent.hp <= 0 < prev_opponent.hp:
            events.append(
                VisualEvent(type=VisualEventType.FAINT, side=Side.ENEMY, round=current.round)
            )

    if current.status == CombatStatus.FINISHED and previous.status != CombatStatus.FINISHED:
        events.append(
            VisualEvent(
                type=VisualEventType.FINISHED,
                round=current.round,
                victory=current.is_winner(player_id),
            )
        )

    return events


class DeltaReconciler:
    """
    Keeps the previous snapshot and turns each new one into visual events.

    Phases: idle -> awaiting_round -> event_detected -> effect_scheduled -> idle.
    """

    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        self.phase = ReconcilerPhase.IDLE
        self._previous: Optional[CombatState] = None

    @property
    def previous(self) -> Optional[CombatState]:
        return self._previous

    def observe(self, snapshot: Optional[CombatState]) -> List[VisualEvent]:
        """Feed the latest polled snapshot; return the events it implies."""
        if snapshot is None or self._previous is None:
            # 第一个快照只作为基线
            self._previous = snapshot
            self.phase = (
                ReconcilerPhase.AWAITING_ROUND if snapshot is not None else ReconcilerPhase.IDLE
            )
            return []

        events = diff_snapshots(self._previous, snapshot, self.player_id)
        self._previous = snapshot

        if events:
            self.phase = ReconcilerPhase.EVENT_DETECTED
            logger.debug(
                "[Reconciler] round %s: %s",
                snapshot.round,
                ", ".join(event.type.value for event in events),
            )
        elif self.phase != ReconcilerPhase.EFFECT_SCHEDULED:
            self.phase = ReconcilerPhase.AWAITING_ROUND
        return events

    def adopt(self, snapshot: CombatState) -> None:
        """Take ``snapshot`` as the new baseline without emitting events."""
        self._previous = snapshot
        if self.phase == ReconcilerPhase.IDLE:
            self.phase = ReconcilerPhase.AWAITING_ROUND

    def mark_scheduled(self) -> None:
        if self.phase == ReconcilerPhase.EVENT_DETECTED:
            self.phase = ReconcilerPhase.EFFECT_SCHEDULED

    def settle(self) -> None:
        """All scheduled effects have cleared."""
        if self.phase == ReconcilerPhase.EFFECT_SCHEDULED:
            self.phase = ReconcilerPhase.IDLE

    def reset(self) -> None:
        self._previous = None
        self.phase = ReconcilerPhase.IDLE

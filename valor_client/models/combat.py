"""
战斗快照模型

Server-computed combat state received wholesale on every poll. The client
never mutates a snapshot; it only reads it to diff against the previous one.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class CombatStatus(str, Enum):
    """战斗状态"""

    WAITING = "waiting"  # 等待双方出招
    RESOLVED = "resolved"  # 本回合已结算
    FINISHED = "finished"  # 已结束


class CombatAction(str, Enum):
    """玩家可选行动"""

    ATTACK = "attack"
    DEFEND = "defend"
    DODGE = "dodge"
    SPELL = "spell"


class StatusEffect(BaseModel):
    """Displayed status effect; turns are counted server-side."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    turns_left: int = Field(
        default=0,
        validation_alias=AliasChoices("turnsLeft", "turns", "turns_left"),
    )


class PetSummary(BaseModel):
    name: str
    element: Optional[str] = None
    tier: Optional[str] = None


class CombatantState(BaseModel):
    """One side of a duel."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    hp: int
    max_hp: int = Field(alias="maxHp")
    action: Optional[str] = None
    element: Optional[str] = None
    portrait: Optional[str] = None
    race: Optional[str] = None
    gender: Optional[str] = None
    pet: Optional[PetSummary] = None
    status_effects: List[StatusEffect] = Field(default_factory=list, alias="statusEffects")

    @model_validator(mode="after")
    def _clamp_hp(self) -> "CombatantState":
        # HP ∈ [0, maxHp] 是客户端唯一保证的不变量
        if self.max_hp < 0:
            self.max_hp = 0
        self.hp = max(0, min(self.hp, self.max_hp))
        return self

    @property
    def hp_percent(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return max(0.0, min(100.0, self.hp / self.max_hp * 100))

    @property
    def is_fainted(self) -> bool:
        return self.hp <= 0

    @property
    def has_acted(self) -> bool:
        return self.action is not None


class LastAction(BaseModel):
    """Optional descriptor of the most recent action, if the server sends one."""

    model_config = ConfigDict(populate_by_name=True)

    attacker_id: str = Field(alias="attackerId")
    defender_id: str = Field(alias="defenderId")
    type: str
    damage: Optional[int] = None
    is_crit: bool = Field(default=False, alias="isCrit")
    is_aoe: bool = Field(default=False, alias="isAoE")
    element: Optional[str] = None
    healed: Optional[int] = None
    dodged: bool = False
    blocked: bool = False


class CombatState(BaseModel):
    """
    战斗快照

    One polled payload of ``GET /api/challenges/:id/combat``.
    """

    model_config = ConfigDict(populate_by_name=True)

    round: int = 1
    player1: CombatantState
    player2: CombatantState
    log: List[str] = Field(default_factory=list)
    status: CombatStatus = CombatStatus.WAITING
    winner_id: Optional[str] = Field(default=None, alias="winnerId")
    last_action: Optional[LastAction] = Field(default=None, alias="lastAction")

    def sides(self, player_id: str) -> Tuple[CombatantState, CombatantState]:
        """Return ``(mine, opponent)`` from the viewpoint of ``player_id``."""
        if self.player1.id == player_id:
            return self.player1, self.player2
        return self.player2, self.player1

    @property
    def last_log_line(self) -> str:
        return self.log[-1] if self.log else ""

    @property
    def is_finished(self) -> bool:
        return self.status == CombatStatus.FINISHED

    def is_winner(self, player_id: str) -> bool:
        return self.winner_id == player_id


class CombatActionResponse(BaseModel):
    """Response of ``POST /api/challenges/:id/combat-action``."""

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    combat_state: Optional[CombatState] = Field(default=None, alias="combatState")

"""
NPC 塔模型
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EquippedPet(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    element: Optional[str] = None


class NpcOpponent(BaseModel):
    """Payload of ``GET /api/accounts/:id/current-npc``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""
    floor: int = 1
    level: int = 1
    power: int = 0
    player_power: int = Field(default=0, alias="playerPower")
    is_boss: bool = Field(default=False, alias="isBoss")
    archetype: Optional[str] = None
    can_fight: bool = Field(default=True, alias="canFight")
    required_rank: Optional[str] = Field(default=None, alias="requiredRank")
    player_rank: Optional[str] = Field(default=None, alias="playerRank")
    immune_elements: List[str] = Field(default_factory=list, alias="immuneElements")
    equipped_pet: Optional[EquippedPet] = Field(default=None, alias="equippedPet")

    @property
    def global_level(self) -> int:
        return (self.floor - 1) * 100 + self.level

    @property
    def level_progress(self) -> float:
        return (self.level - 1) / 99 * 100

    @property
    def applies_status_effects(self) -> bool:
        return self.is_boss or self.archetype == "champion"


class BattleRewards(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    gold: int = 0
    training_points: int = Field(default=0, alias="trainingPoints")
    soul_shards: int = Field(default=0, alias="soulShards")
    pet_exp: int = Field(default=0, alias="petExp")
    runes: int = 0


class NpcBattleResult(BaseModel):
    """Payload of ``POST /api/accounts/:id/npc-battle``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    victory: bool = Field(default=False, validation_alias=AliasChoices("victory", "won"))
    message: Optional[str] = None
    npc_name: Optional[str] = Field(default=None, alias="npcName")
    npc_power: int = Field(default=0, alias="npcPower")
    player_power: int = Field(default=0, alias="playerPower")
    is_boss: bool = Field(default=False, alias="isBoss")
    floor: Optional[int] = None
    new_floor: Optional[int] = Field(default=None, alias="newFloor")
    rewards: BattleRewards = Field(default_factory=BattleRewards)

    @property
    def blocked_by_rank(self) -> bool:
        return not self.victory and "rank" in (self.message or "")

    @property
    def damage_to_player(self) -> int:
        if self.npc_power > self.player_power:
            return (self.npc_power - self.player_power) // 10
        return 10


@dataclass
class AutoFightProgress:
    """自动战斗进度"""

    current: int = 0
    total: int = 0
    wins: int = 0
    losses: int = 0

    @property
    def summary(self) -> str:
        return f"{self.wins} wins, {self.losses} losses"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
        }

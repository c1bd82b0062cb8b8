"""
账号与 HUD 模型
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Account(BaseModel):
    """Player account as returned by the accounts endpoints."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    username: str
    role: str = "player"
    race: Optional[str] = None
    gender: Optional[str] = None
    gold: int = 0
    rubies: int = 0
    valor_tokens: int = Field(default=0, alias="valorTokens")
    equipped_pet_id: Optional[str] = Field(default=None, alias="equippedPetId")

    @property
    def is_player(self) -> bool:
        return self.role == "player"


class EnergyStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    energy: int
    max_energy: int = Field(alias="maxEnergy")

    @property
    def ratio(self) -> float:
        if self.max_energy <= 0:
            return 0.0
        return max(0.0, min(1.0, self.energy / self.max_energy))


def format_compact(value: int) -> str:
    """HUD 数字缩写: 1.2M / 3.4K / 999"""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:,}"

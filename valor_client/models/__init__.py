"""Data models for the Valor client."""

from .account import Account, EnergyStatus, format_compact
from .combat import (
    CombatAction,
    CombatActionResponse,
    CombatantState,
    CombatState,
    CombatStatus,
    LastAction,
    PetSummary,
    StatusEffect,
)
from .market import (
    Auction,
    AuctionCurrency,
    AuctionDraft,
    AuctionItemType,
    BlackMarketItem,
    BlackMarketPurchase,
    BlackMarketStock,
)
from .npc import AutoFightProgress, BattleRewards, EquippedPet, NpcBattleResult, NpcOpponent
from .visual import FloatingNumber, HitSpark, ResultScreen, Side, VisualEvent, VisualEventType
from .world import DayNightState, TimeOfDay, WeatherType, WorldTime, ZoneWeather

__all__ = [
    "Account",
    "EnergyStatus",
    "format_compact",
    "CombatAction",
    "CombatActionResponse",
    "CombatantState",
    "CombatState",
    "CombatStatus",
    "LastAction",
    "PetSummary",
    "StatusEffect",
    "Auction",
    "AuctionCurrency",
    "AuctionDraft",
    "AuctionItemType",
    "BlackMarketItem",
    "BlackMarketPurchase",
    "BlackMarketStock",
    "AutoFightProgress",
    "BattleRewards",
    "EquippedPet",
    "NpcBattleResult",
    "NpcOpponent",
    "FloatingNumber",
    "HitSpark",
    "ResultScreen",
    "Side",
    "VisualEvent",
    "VisualEventType",
    "DayNightState",
    "TimeOfDay",
    "WeatherType",
    "WorldTime",
    "ZoneWeather",
]

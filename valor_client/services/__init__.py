"""Client services: REST access, polling, notifications and page flows."""

from .accounts import AccountSession
from .api_client import RaceSelectionRequired, ValorApiClient, ValorApiError
from .market import AuctionHouse, BlackMarket, format_countdown
from .notifier import Notifier, Toast, ToastVariant
from .npc_tower import AutoFighter, NpcTower, TowerEffects
from .poller import Poller
from .timers import TimerGroup, loop_scheduler
from .world_clock import EnergyMonitor, LightningTicker, WorldClock

__all__ = [
    "AccountSession",
    "AuctionHouse",
    "AutoFighter",
    "BlackMarket",
    "EnergyMonitor",
    "LightningTicker",
    "Notifier",
    "NpcTower",
    "Poller",
    "RaceSelectionRequired",
    "TimerGroup",
    "Toast",
    "ToastVariant",
    "TowerEffects",
    "ValorApiClient",
    "ValorApiError",
    "WorldClock",
    "format_countdown",
    "loop_scheduler",
]

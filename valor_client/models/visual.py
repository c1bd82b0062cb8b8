"""
客户端视觉效果实体

Pure view-layer objects: they are created from snapshot deltas and
discarded by timers. Nothing here is sent to or received from the server.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Side(str, Enum):
    """屏幕左右两侧"""

    PLAYER = "player"
    ENEMY = "enemy"


class VisualEventType(str, Enum):
    """快照差分推断出的事件类型"""

    DAMAGE = "damage"
    HEAL = "heal"
    CRIT = "crit"
    FAINT = "faint"
    ROUND_ADVANCE = "round_advance"
    FINISHED = "finished"


class ResultScreen(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"


@dataclass
class VisualEvent:
    """One semantic event inferred from two consecutive snapshots."""

    type: VisualEventType
    side: Optional[Side] = None
    amount: int = 0
    is_crit: bool = False
    element: Optional[str] = None
    round: int = 0
    victory: Optional[bool] = None


@dataclass
class FloatingNumber:
    """浮动伤害/治疗数字"""

    id: int
    value: str
    x: float
    y: float
    color: str
    is_crit: bool = False
    side: Side = Side.PLAYER


@dataclass
class HitSpark:
    x: float
    y: float
    element: str

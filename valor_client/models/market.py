"""
拍卖行与黑市模型
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuctionCurrency(str, Enum):
    """拍卖币种（对应拍卖行的标签页）"""

    GOLD = "gold"
    VALOR = "valor"


class AuctionItemType(str, Enum):
    ITEM = "item"
    SKILL = "skill"


class Auction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    seller_id: Optional[str] = Field(default=None, alias="sellerId")
    item_id: str = Field(alias="itemId")
    item_type: AuctionItemType = Field(default=AuctionItemType.ITEM, alias="itemType")
    type: AuctionCurrency = AuctionCurrency.GOLD
    current_bid: int = Field(default=0, alias="currentBid")
    min_increment: float = Field(default=1, alias="minIncrement")
    end_at: datetime = Field(alias="endAt")

    @property
    def min_bid(self) -> int:
        """Smallest acceptable bid: current bid raised by ``minIncrement`` percent."""
        return math.floor(self.current_bid * (1 + self.min_increment / 100))

    def time_left_seconds(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        end_at = self.end_at
        if end_at.tzinfo is None:
            end_at = end_at.replace(tzinfo=timezone.utc)
        return max(0.0, (end_at - now).total_seconds())

    def time_left_label(self, now: Optional[datetime] = None) -> str:
        remaining = int(self.time_left_seconds(now))
        hours, rest = divmod(remaining, 3600)
        return f"{hours}h {rest // 60}m"


class AuctionDraft(BaseModel):
    """Body of ``POST /api/auctions``."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId")
    item_type: AuctionItemType = Field(default=AuctionItemType.ITEM, alias="itemType")
    starting_price: int = Field(default=100, alias="startingPrice", ge=1)
    duration: int = Field(default=24, ge=1)  # hours
    type: AuctionCurrency = AuctionCurrency.GOLD
    min_increment: float = Field(default=1, alias="minIncrement", ge=1, le=5)  # percent

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class BlackMarketItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    type: str = "weapon"
    tier: Optional[str] = None
    ruby_price: int = Field(alias="rubyPrice")
    special: Optional[str] = None
    stats: Dict[str, Any] = Field(default_factory=dict)

    def affordable(self, rubies: int) -> bool:
        return rubies >= self.ruby_price


class BlackMarketStock(BaseModel):
    """Payload of ``GET /api/black-market``; ``refreshesAt`` is epoch milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    items: List[BlackMarketItem] = Field(default_factory=list)
    refreshes_at: Optional[int] = Field(default=None, alias="refreshesAt")


class BlackMarketPurchase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    counterfeit: bool = False
    item: Optional[BlackMarketItem] = None
    message: Optional[str] = None

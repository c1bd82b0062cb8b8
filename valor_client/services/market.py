"""
Market Service - auction house and black market.

Prices, settlement and counterfeit odds are decided by the server; this
module lists, bids, buys and reports the outcome.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional, Union

from pydantic import ValidationError

from valor_client.config import settings
from valor_client.models.market import (
    Auction,
    AuctionCurrency,
    AuctionDraft,
    AuctionItemType,
    BlackMarketPurchase,
    BlackMarketStock,
)
from valor_client.services.api_client import RequestFailure, ValorApiClient, failure_message
from valor_client.services.notifier import Notifier
from valor_client.services.poller import Poller

logger = logging.getLogger(__name__)

REFRESHING_LABEL = "Refreshing..."

AccountRefresher = Callable[[], Awaitable[object]]


class AuctionHouse:
    """拍卖行：按币种标签轮询列表，创建拍卖与出价。"""

    def __init__(
        self,
        api: ValorApiClient,
        notifier: Optional[Notifier] = None,
        currency: Union[AuctionCurrency, str] = AuctionCurrency.GOLD,
        refetch_account: Optional[AccountRefresher] = None,
        poll_interval_seconds: Optional[float] = None,
    ) -> None:
        self.api = api
        self.notifier = notifier or Notifier()
        self.currency = AuctionCurrency(currency)
        self._refetch_account = refetch_account
        self.poller: Poller[List[Auction]] = Poller(
            name="auctions",
            fetch=lambda: self.api.list_auctions(self.currency),
            interval_seconds=poll_interval_seconds or settings.auction_poll_seconds,
        )

    @property
    def auctions(self) -> List[Auction]:
        return self.poller.data or []

    def start(self) -> None:
        self.poller.start()

    async def stop(self) -> None:
        await self.poller.stop()

    async def refresh(self) -> List[Auction]:
        await self.poller.poll_once()
        return self.auctions

    def switch_tab(self, currency: Union[AuctionCurrency, str]) -> None:
        self.currency = AuctionCurrency(currency)
        self.poller.data = None
        self.poller.invalidate()

    async def _after_mutation(self) -> None:
        self.poller.invalidate()
        if self._refetch_account:
            await self._refetch_account()

    async def create(
        self,
        item_id: str,
        item_type: Union[AuctionItemType, str] = AuctionItemType.ITEM,
        starting_price: int = 100,
        duration_hours: int = 24,
        min_increment: float = 1,
    ) -> bool:
        try:
            draft = AuctionDraft(
                item_id=item_id,
                item_type=AuctionItemType(item_type),
                starting_price=starting_price,
                duration=duration_hours,
                type=self.currency,
                min_increment=min_increment,
            )
        except (ValidationError, ValueError) as exc:
            logger.info("[AuctionHouse] rejected draft: %s", exc)
            self.notifier.error("Failed to create auction", "Invalid auction details")
            return False

        try:
            await self.api.create_auction(draft)
        except RequestFailure as exc:
            self.notifier.error("Failed to create auction", failure_message(exc))
            return False

        self.notifier.info("Auction created!")
        await self._after_mutation()
        return True

    async def bid(self, auction_id: str, amount: int) -> bool:
        try:
            await self.api.place_bid(auction_id, amount)
        except RequestFailure as exc:
            self.notifier.error("Failed to place bid", failure_message(exc))
            return False

        self.notifier.info("Bid placed successfully!")
        await self._after_mutation()
        return True

    async def bid_minimum(self, auction: Auction) -> bool:
        return await self.bid(auction.id, auction.min_bid)


def format_countdown(refreshes_at_ms: int, now_ms: float) -> str:
    """``"{h}h {m}m {s}s"`` until ``refreshes_at_ms``, or the refreshing label."""
    diff = int(refreshes_at_ms - now_ms)
    if diff <= 0:
        return REFRESHING_LABEL
    hours = diff // 3_600_000
    minutes = (diff % 3_600_000) // 60_000
    seconds = (diff % 60_000) // 1000
    return f"{hours}h {minutes}m {seconds}s"


class BlackMarket:
    """黑市：每日货架、刷新倒计时、购买（可能买到假货）。"""

    def __init__(
        self,
        api: ValorApiClient,
        notifier: Optional[Notifier] = None,
        refetch_account: Optional[AccountRefresher] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.api = api
        self.notifier = notifier or Notifier()
        self._refetch_account = refetch_account
        self._clock = clock
        self.stock: Optional[BlackMarketStock] = None
        self.time_left = ""
        self._ticking = False

    async def load(self) -> BlackMarketStock:
        self.stock = await self.api.get_black_market()
        return self.stock

    def countdown(self) -> str:
        if self.stock is None or not self.stock.refreshes_at:
            return ""
        return format_countdown(self.stock.refreshes_at, self._clock() * 1000)

    async def tick(self) -> str:
        """One countdown tick; reloads the stock once the refresh time has passed."""
        label = self.countdown()
        if label == REFRESHING_LABEL:
            logger.info("[BlackMarket] stock expired, reloading")
            await self.load()
        return label

    async def run_countdown(
        self,
        on_tick: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Tick every ``black_market_tick_seconds`` until ``stop_countdown()``."""
        self._ticking = True
        while self._ticking:
            try:
                self.time_left = await self.tick()
            except RequestFailure as exc:
                logger.warning("[BlackMarket] reload failed: %s", exc)
            if on_tick:
                on_tick(self.time_left)
            await sleep(settings.black_market_tick_seconds)

    def stop_countdown(self) -> None:
        self._ticking = False

    async def purchase(self, account_id: str, item_id: str) -> Optional[BlackMarketPurchase]:
        try:
            result = await self.api.purchase_black_market(account_id, item_id)
        except RequestFailure as exc:
            self.notifier.error("Purchase failed", failure_message(exc) or "Server error")
            return None

        if result.counterfeit:
            self.notifier.error(
                "You got scammed!", "The item was a counterfeit - worthless junk."
            )
        else:
            name = result.item.name if result.item else "Item"
            self.notifier.info("Purchase successful!", f"{name} added to your inventory.")

        if self._refetch_account:
            await self._refetch_account()
        return result

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from valor_client.models.market import Auction, AuctionCurrency, BlackMarketItem
from valor_client.services.market import (
    REFRESHING_LABEL,
    AuctionHouse,
    BlackMarket,
    format_countdown,
)
from valor_client.services.notifier import Notifier, ToastVariant

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


def _auction(**overrides):
    payload = {
        "id": "x1",
        "itemId": "sword",
        "currentBid": 100,
        "minIncrement": 5,
        "endAt": (NOW + timedelta(hours=3, minutes=25, seconds=40)).isoformat(),
    }
    payload.update(overrides)
    return Auction.model_validate(payload)


# ==================== 拍卖 ====================


def test_min_bid_uses_percentage_increment():
    assert _auction().min_bid == 105
    assert _auction(currentBid=99, minIncrement=1).min_bid == 99
    assert _auction(currentBid=200, minIncrement=10).min_bid == 220


def test_time_left_label():
    auction = _auction()
    assert auction.time_left_label(NOW) == "3h 25m"
    assert auction.time_left_label(NOW + timedelta(days=1)) == "0h 0m"


@pytest.mark.asyncio
async def test_bid_success_invalidates_and_refetches_account(make_api):
    requests = []
    refetched = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    async def refetch():
        refetched.append(True)

    notifier = Notifier()
    house = AuctionHouse(make_api(handler), notifier, refetch_account=refetch)

    assert await house.bid_minimum(_auction())

    (request,) = requests
    assert request.url.path == "/api/auctions/x1/bid"
    assert json.loads(request.content) == {"amount": 105}
    assert notifier.last.title == "Bid placed successfully!"
    assert refetched == [True]
    assert house.poller._wake.is_set()


@pytest.mark.asyncio
async def test_bid_failure_shows_server_message(make_api):
    notifier = Notifier()
    house = AuctionHouse(
        make_api(lambda request: httpx.Response(400, json={"error": "Bid too low"})), notifier
    )

    assert not await house.bid("x1", 1)
    assert notifier.last.title == "Failed to place bid"
    assert notifier.last.description == "Bid too low"
    assert notifier.last.variant == ToastVariant.DESTRUCTIVE


@pytest.mark.asyncio
async def test_create_auction_posts_draft_in_current_tab(make_api):
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "new"})

    house = AuctionHouse(make_api(handler), Notifier(), currency="valor")

    assert await house.create("helm", starting_price=250, duration_hours=12, min_increment=3)
    assert bodies == [{
        "itemId": "helm",
        "itemType": "item",
        "startingPrice": 250,
        "duration": 12,
        "type": "valor",
        "minIncrement": 3.0,
    }]


@pytest.mark.asyncio
async def test_switch_tab_refetches_other_currency(make_api):
    seen_types = []

    def handler(request):
        seen_types.append(request.url.params["type"])
        return httpx.Response(200, json=[])

    house = AuctionHouse(make_api(handler), Notifier())
    await house.refresh()
    house.switch_tab(AuctionCurrency.VALOR)
    await house.refresh()

    assert seen_types == ["gold", "valor"]
    assert house.auctions == []


# ==================== 黑市 ====================


def test_format_countdown():
    assert format_countdown(3_723_000, 0) == "1h 2m 3s"
    assert format_countdown(1000, 1000) == REFRESHING_LABEL
    assert format_countdown(500, 1000) == REFRESHING_LABEL


def test_affordable():
    item = BlackMarketItem.model_validate({"id": "i1", "name": "Shadow Blade", "rubyPrice": 50})
    assert item.affordable(50)
    assert not item.affordable(49)


def _black_market_handler(purchase_body, stock_refreshes_at=10_000):
    def handler(request):
        if request.url.path == "/api/black-market":
            return httpx.Response(200, json={"items": [], "refreshesAt": stock_refreshes_at})
        return httpx.Response(200, json=purchase_body)

    return handler


@pytest.mark.asyncio
async def test_counterfeit_purchase_warns(make_api):
    notifier = Notifier()
    market = BlackMarket(make_api(_black_market_handler({"counterfeit": True})), notifier)

    result = await market.purchase("a1", "i1")

    assert result.counterfeit
    assert notifier.last.title == "You got scammed!"
    assert notifier.last.variant == ToastVariant.DESTRUCTIVE


@pytest.mark.asyncio
async def test_genuine_purchase_names_item(make_api):
    notifier = Notifier()
    body = {"counterfeit": False, "item": {"id": "i1", "name": "Shadow Blade", "rubyPrice": 50}}
    market = BlackMarket(make_api(_black_market_handler(body)), notifier)

    await market.purchase("a1", "i1")

    assert notifier.last.title == "Purchase successful!"
    assert notifier.last.description == "Shadow Blade added to your inventory."


@pytest.mark.asyncio
async def test_countdown_reloads_stock_when_expired(make_api):
    now = [0.0]
    market = BlackMarket(
        make_api(_black_market_handler({}, stock_refreshes_at=5_000)),
        Notifier(),
        clock=lambda: now[0],
    )
    assert market.countdown() == ""

    await market.load()
    assert await market.tick() == "0h 0m 5s"

    now[0] = 6.0
    assert await market.tick() == REFRESHING_LABEL
    assert market.stock.refreshes_at == 5_000


@pytest.mark.asyncio
async def test_increment_outside_range_is_rejected_locally(make_api):
    requests = []
    notifier = Notifier()
    house = AuctionHouse(
        make_api(lambda request: requests.append(request) or httpx.Response(200, json={})),
        notifier,
    )

    assert not await house.create("helm", min_increment=10)
    assert requests == []
    assert notifier.last.title == "Failed to create auction"
    assert notifier.last.variant == ToastVariant.DESTRUCTIVE


@pytest.mark.asyncio
async def test_malformed_purchase_response_toasts(make_api):
    notifier = Notifier()
    market = BlackMarket(
        make_api(_black_market_handler({"counterfeit": {"nope": 1}})), notifier
    )

    assert await market.purchase("a1", "i1") is None
    assert notifier.last.title == "Purchase failed"


@pytest.mark.asyncio
async def test_countdown_ticks_until_stopped(make_api):
    now = [0.0]
    labels = []
    sleeps = []
    market = BlackMarket(
        make_api(_black_market_handler({}, stock_refreshes_at=3_000)),
        Notifier(),
        clock=lambda: now[0],
    )
    await market.load()

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        now[0] += seconds
        if len(sleeps) == 4:
            market.stop_countdown()

    await market.run_countdown(labels.append, sleep=fake_sleep)

    assert labels == ["0h 0m 3s", "0h 0m 2s", "0h 0m 1s", REFRESHING_LABEL]
    assert sleeps == [1.0] * 4
    assert market.time_left == REFRESHING_LABEL

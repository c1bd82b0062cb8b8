import json

import httpx
import pytest

from valor_client.models.combat import CombatStatus
from valor_client.services.api_client import RaceSelectionRequired, ValorApiError


def _combat_payload():
    return {
        "round": 2,
        "player1": {"id": "p1", "name": "Aria", "hp": 80, "maxHp": 100, "action": None},
        "player2": {"id": "p2", "name": "Borin", "hp": 60, "maxHp": 100, "action": "attack"},
        "log": ["Aria attacks!"],
        "status": "waiting",
    }


@pytest.mark.asyncio
async def test_error_body_message_is_used(make_api):
    api = make_api(lambda request: httpx.Response(403, json={"error": "Not enough energy"}))

    with pytest.raises(ValorApiError) as exc_info:
        await api.get_energy("a1")

    error = exc_info.value
    assert error.status_code == 403
    assert error.message == "Not enough energy"
    assert str(error) == "403: Not enough energy"


@pytest.mark.asyncio
async def test_plain_text_error_falls_back_to_body(make_api):
    api = make_api(lambda request: httpx.Response(500, text="Internal Server Error"))

    with pytest.raises(ValorApiError) as exc_info:
        await api.get_world_time()

    assert str(exc_info.value) == "500: Internal Server Error"


@pytest.mark.asyncio
async def test_transport_error_is_wrapped(make_api):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = make_api(handler)
    with pytest.raises(ValorApiError) as exc_info:
        await api.get_black_market()

    assert exc_info.value.status_code is None
    assert "ConnectError" in exc_info.value.message


@pytest.mark.asyncio
async def test_invalid_json_is_an_error(make_api):
    api = make_api(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(ValorApiError):
        await api.get_account("a1")


@pytest.mark.asyncio
async def test_combat_state_parsed(make_api):
    api = make_api(lambda request: httpx.Response(200, json=_combat_payload()))

    state = await api.get_combat_state("c1")

    assert state.round == 2
    assert state.status == CombatStatus.WAITING
    mine, opponent = state.sides("p2")
    assert mine.name == "Borin" and mine.has_acted
    assert opponent.hp == 80


@pytest.mark.asyncio
async def test_null_combat_state_is_none(make_api):
    api = make_api(lambda request: httpx.Response(200, json=None))

    assert await api.get_combat_state("c1") is None


@pytest.mark.asyncio
async def test_login_requires_race(make_api):
    def handler(request):
        body = json.loads(request.content)
        assert body["username"] == "newbie"
        return httpx.Response(400, json={"error": "Race and gender required"})

    api = make_api(handler)
    with pytest.raises(RaceSelectionRequired):
        await api.login("newbie", "secret")


@pytest.mark.asyncio
async def test_list_auctions_sends_currency(make_api):
    def handler(request):
        assert request.url.params["type"] == "valor"
        return httpx.Response(
            200,
            json=[{"id": "x1", "itemId": "sword", "currentBid": 100, "endAt": "2030-01-01T00:00:00Z"}],
        )

    api = make_api(handler)
    (auction,) = await api.list_auctions("valor")

    assert auction.item_id == "sword"
    assert auction.current_bid == 100


@pytest.mark.asyncio
async def test_unknown_action_never_sent(make_api):
    calls = []
    api = make_api(lambda request: calls.append(request) or httpx.Response(200, json={}))

    with pytest.raises(ValueError):
        await api.submit_combat_action("c1", "p1", "taunt")
    assert calls == []

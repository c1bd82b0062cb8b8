"""
Valor API Client - typed async wrapper over the game REST API.

Every response shape here is the sole contract between this client and the
server; the game logic itself is computed server-side.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from valor_client.config import settings
from valor_client.models.account import Account, EnergyStatus
from valor_client.models.combat import CombatAction, CombatActionResponse, CombatState
from valor_client.models.market import (
    Auction,
    AuctionCurrency,
    AuctionDraft,
    BlackMarketPurchase,
    BlackMarketStock,
)
from valor_client.models.npc import NpcBattleResult, NpcOpponent
from valor_client.models.world import WorldTime

logger = logging.getLogger(__name__)

RACE_SELECTION_ERROR = "Race and gender required"


class ValorApiError(RuntimeError):
    """Raised for non-2xx responses, transport failures and undecodable bodies."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.payload = payload
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"{status_code}: {message}")


class RaceSelectionRequired(ValorApiError):
    """Login of a new account needs race and gender."""


# 变更类请求的失败：HTTP/传输错误，或 2xx 响应体结构不符
RequestFailure = (ValorApiError, ValidationError)


def failure_message(exc: Exception) -> str:
    if isinstance(exc, ValorApiError):
        return exc.message
    return "Invalid response from server"


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    payload: Any = None
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message), payload

    text = response.text.strip()
    return text or response.reason_phrase or "Request failed", payload


class ValorApiClient:
    """
    REST client for the game server.

    Features:
    - One shared ``httpx.AsyncClient`` per instance
    - Uniform error mapping to ``ValorApiError``
    - Pydantic validation of every response body
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        timeout = httpx.Timeout(
            max(0.5, float(timeout_seconds or settings.request_timeout_seconds))
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ValorApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (``None`` when empty)."""
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("[ValorAPI] %s %s failed: %s", method, path, exc)
            raise ValorApiError(f"{type(exc).__name__}: {exc}") from exc

        if response.is_error:
            message, payload = _error_message(response)
            logger.info(
                "[ValorAPI] %s %s -> %s %s", method, path, response.status_code, message
            )
            raise ValorApiError(message, status_code=response.status_code, payload=payload)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ValorApiError(
                f"Invalid JSON from {path}", status_code=response.status_code
            ) from exc

    # ==================== 账号 ====================

    async def login(
        self,
        username: str,
        password: str,
        role: str = "player",
        race: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> Account:
        body = {
            "username": username,
            "password": password,
            "role": role,
            "race": race,
            "gender": gender,
        }
        try:
            data = await self.request("POST", "/api/accounts/login", json=body)
        except ValorApiError as exc:
            if exc.status_code == 400 and isinstance(exc.payload, dict):
                if exc.payload.get("error") == RACE_SELECTION_ERROR:
                    raise RaceSelectionRequired(
                        RACE_SELECTION_ERROR, status_code=400, payload=exc.payload
                    ) from exc
            raise
        return Account.model_validate(data)

    async def get_account(self, account_id: str) -> Account:
        data = await self.request("GET", f"/api/accounts/{account_id}")
        return Account.model_validate(data)

    async def get_energy(self, account_id: str) -> EnergyStatus:
        data = await self.request("GET", f"/api/accounts/{account_id}/energy")
        return EnergyStatus.model_validate(data)

    # ==================== 对决 ====================

    async def get_combat_state(self, challenge_id: str) -> Optional[CombatState]:
        data = await self.request("GET", f"/api/challenges/{challenge_id}/combat")
        if not data:
            return None
        return CombatState.model_validate(data)

    async def submit_combat_action(
        self,
        challenge_id: str,
        player_id: str,
        action: Union[CombatAction, str],
    ) -> CombatActionResponse:
        body = {"playerId": player_id, "action": CombatAction(action).value}
        data = await self.request(
            "POST", f"/api/challenges/{challenge_id}/combat-action", json=body
        )
        return CombatActionResponse.model_validate(data or {})

    # ==================== NPC 塔 ====================

    async def get_current_npc(self, account_id: str) -> Optional[NpcOpponent]:
        data = await self.request("GET", f"/api/accounts/{account_id}/current-npc")
        if not data:
            return None
        return NpcOpponent.model_validate(data)

    async def npc_battle(self, account_id: str) -> NpcBattleResult:
        data = await self.request("POST", f"/api/accounts/{account_id}/npc-battle")
        return NpcBattleResult.model_validate(data or {})

    # ==================== 拍卖行 ====================

    async def list_auctions(
        self, auction_type: Union[AuctionCurrency, str] = AuctionCurrency.GOLD
    ) -> List[Auction]:
        currency = AuctionCurrency(auction_type)
        data = await self.request("GET", "/api/auctions", params={"type": currency.value})
        return [Auction.model_validate(item) for item in data or []]

    async def create_auction(self, draft: AuctionDraft) -> Any:
        return await self.request("POST", "/api/auctions", json=draft.to_payload())

    async def place_bid(self, auction_id: str, amount: int) -> Any:
        return await self.request(
            "POST", f"/api/auctions/{auction_id}/bid", json={"amount": int(amount)}
        )

    # ==================== 黑市 ====================

    async def get_black_market(self) -> BlackMarketStock:
        data = await self.request("GET", "/api/black-market")
        return BlackMarketStock.model_validate(data or {})

    async def purchase_black_market(self, account_id: str, item_id: str) -> BlackMarketPurchase:
        data = await self.request(
            "POST",
            "/api/black-market/purchase",
            json={"accountId": account_id, "itemId": item_id},
        )
        return BlackMarketPurchase.model_validate(data or {})

    # ==================== 世界 ====================

    async def get_world_time(self) -> WorldTime:
        data = await self.request("GET", "/api/world-time")
        return WorldTime.model_validate(data)

"""
账号会话
"""
from __future__ import annotations

import logging
from typing import Optional

from valor_client.models.account import Account
from valor_client.services.api_client import RaceSelectionRequired, ValorApiClient, ValorApiError

logger = logging.getLogger(__name__)


class AccountSession:
    """Logged-in account plus the login / refetch flows."""

    def __init__(self, api: ValorApiClient) -> None:
        self.api = api
        self.account: Optional[Account] = None
        self.needs_race_selection = False
        self.last_error: Optional[str] = None

    @property
    def account_id(self) -> Optional[str]:
        return self.account.id if self.account else None

    async def login(
        self,
        username: str,
        password: str,
        role: str = "player",
        race: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> Optional[Account]:
        """
        Log in (or register) and remember the account.

        Returns ``None`` when the server asks for race/gender first
        (``needs_race_selection`` is set) or rejects the login
        (``last_error`` holds the message).
        """
        self.needs_race_selection = False
        self.last_error = None
        try:
            self.account = await self.api.login(username, password, role, race, gender)
        except RaceSelectionRequired:
            self.needs_race_selection = True
            return None
        except ValorApiError as exc:
            self.last_error = exc.message or "Login failed"
            return None

        logger.info("[Account] logged in as %s (%s)", self.account.username, self.account.id)
        return self.account

    async def refetch(self) -> Optional[Account]:
        """Reload the account; failures keep the current copy."""
        if self.account is None:
            return None
        try:
            self.account = await self.api.get_account(self.account.id)
        except ValorApiError as exc:
            logger.error("[Account] Failed to refetch account: %s", exc)
        return self.account

    def logout(self) -> None:
        self.account = None

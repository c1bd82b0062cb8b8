from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from valor_client.models.combat import CombatState
from valor_client.services.api_client import ValorApiClient

ME = "p1"
THEM = "p2"


class FakeHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for ``loop.call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: List[FakeHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self._handles.remove(handle)
            self.now = max(self.now, handle.due)
            handle.callback()
        self.now = target


def _make_state(
    round: int = 1,
    my_hp: int = 100,
    op_hp: int = 100,
    status: str = "waiting",
    log: Optional[List[str]] = None,
    winner: Optional[str] = None,
    my_action: Optional[str] = None,
    op_action: Optional[str] = None,
    my_element: Optional[str] = "Water",
    op_element: Optional[str] = None,
    max_hp: int = 100,
) -> CombatState:
    payload: Dict[str, Any] = {
        "round": round,
        "player1": {
            "id": ME,
            "name": "Aria",
            "hp": my_hp,
            "maxHp": max_hp,
            "action": my_action,
            "element": my_element,
            "statusEffects": [],
        },
        "player2": {
            "id": THEM,
            "name": "Borin",
            "hp": op_hp,
            "maxHp": max_hp,
            "action": op_action,
            "element": op_element,
        },
        "log": log or [],
        "status": status,
    }
    if winner:
        payload["winnerId"] = winner
    return CombatState.model_validate(payload)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def make_state():
    return _make_state


@pytest.fixture
def make_api():
    """Build a client whose HTTP traffic goes to ``handler``."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> ValorApiClient:
        return ValorApiClient(base_url="http://test", transport=httpx.MockTransport(handler))

    return _factory

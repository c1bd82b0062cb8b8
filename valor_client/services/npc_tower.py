"""
NPC Tower Service.

Single battles, the sequential auto-fight loop, and the client-side tower
effects (random boss status effects, pet HP) that the battle page tracks
locally between fights.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, List, Optional

from pydantic import ValidationError

from valor_client.config import settings
from valor_client.models.combat import StatusEffect
from valor_client.models.npc import AutoFightProgress, NpcBattleResult, NpcOpponent
from valor_client.services.api_client import ValorApiClient, ValorApiError
from valor_client.services.notifier import Notifier

logger = logging.getLogger(__name__)

TOWER_STATUS_TYPES = ("stun", "freeze", "silence")
STATUS_LABELS = {
    "stun": "😵 Stunned",
    "freeze": "🧊 Frozen",
    "silence": "🔇 Silenced",
}
STATUS_CHANCE = 0.2
PET_DAMAGE_SHARE = 0.1


class TowerEffects:
    """
    塔内本地效果

    Purely presentational state carried between single battles: status
    effects rolled against bosses/champions and the equipped pet's HP.
    """

    def __init__(
        self,
        notifier: Notifier,
        rng: Optional[random.Random] = None,
        pet_max_hp: int = 100,
    ) -> None:
        self.notifier = notifier
        self._rng = rng or random.Random()
        self.status_effects: List[StatusEffect] = []
        self.pet_max_hp = pet_max_hp
        self.pet_hp = pet_max_hp
        self.pet_fainted = False

    def apply_battle(self, opponent: Optional[NpcOpponent], result: NpcBattleResult) -> None:
        self._decay_status_effects()
        if opponent is not None and opponent.applies_status_effects:
            self._maybe_apply_status()
        if opponent is not None and opponent.equipped_pet and not self.pet_fainted:
            self._damage_pet(opponent, result)

    @property
    def is_stunned(self) -> bool:
        return any(effect.type == "stun" for effect in self.status_effects)

    def pass_turn(self) -> None:
        self._decay_status_effects()

    def _decay_status_effects(self) -> None:
        for effect in self.status_effects:
            effect.turns_left -= 1
        self.status_effects = [e for e in self.status_effects if e.turns_left > 0]

    def _maybe_apply_status(self) -> None:
        if self._rng.random() >= STATUS_CHANCE:
            return
        status_type = self._rng.choice(TOWER_STATUS_TYPES)
        turns = self._rng.randint(1, 2)

        existing = next((e for e in self.status_effects if e.type == status_type), None)
        if existing is not None:
            existing.turns_left += turns
        else:
            self.status_effects.append(StatusEffect(type=status_type, turns_left=turns))

        self.notifier.error("Status Applied!", f"{STATUS_LABELS[status_type]} for {turns} turns!")

    def _damage_pet(self, opponent: NpcOpponent, result: NpcBattleResult) -> None:
        pet_damage = int(result.damage_to_player * PET_DAMAGE_SHARE)
        new_hp = max(0, self.pet_hp - pet_damage)
        if new_hp == 0 and self.pet_hp > 0:
            self.pet_fainted = True
            self.notifier.error(
                "Pet Fainted!",
                f"Your pet {opponent.equipped_pet.name} has fainted! Pet bonus removed.",
            )
        self.pet_hp = new_hp

    def revive_pet(self) -> None:
        self.pet_hp = self.pet_max_hp
        self.pet_fainted = False


class AutoFighter:
    """Runs ``count`` tower battles one after another with a fixed delay."""

    def __init__(
        self,
        api: ValorApiClient,
        account_id: str,
        notifier: Notifier,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_progress: Optional[Callable[[AutoFightProgress], None]] = None,
    ) -> None:
        self.api = api
        self.account_id = account_id
        self.notifier = notifier
        self.delay_seconds = (
            settings.auto_fight_delay_seconds if delay_seconds is None else delay_seconds
        )
        self._sleep = sleep
        self._on_progress = on_progress
        self._active = False
        self.progress = AutoFightProgress()

    @property
    def running(self) -> bool:
        return self._active

    def stop(self) -> None:
        """Stop before the next battle; the one in flight still completes."""
        self._active = False

    def _report(self, current: int) -> None:
        self.progress.current = current
        if self._on_progress:
            self._on_progress(self.progress)

    async def run(self, count: int) -> AutoFightProgress:
        if count < 1:
            raise ValueError("count must be at least 1")

        self._active = True
        self.progress = AutoFightProgress(total=count)
        logger.info("[AutoFight] %s: starting %d battles", self.account_id, count)

        try:
            for index in range(count):
                if not self._active:
                    break

                try:
                    result = await self.api.npc_battle(self.account_id)
                except (ValorApiError, ValidationError) as exc:
                    logger.warning("[AutoFight] battle %d failed: %s", index + 1, exc)
                    self.progress.losses += 1
                    self._report(index + 1)
                    continue

                if result.victory:
                    self.progress.wins += 1
                else:
                    self.progress.losses += 1
                self._report(index + 1)

                if result.blocked_by_rank:
                    self.notifier.error("Auto-Fight Stopped", "Rank requirement not met")
                    break

                await self._sleep(self.delay_seconds)
        finally:
            self._active = False

        self.notifier.info("Auto-Fight Complete", self.progress.summary)
        return self.progress


class NpcTower:
    """The tower page: current opponent, single battles and auto-fight."""

    def __init__(
        self,
        api: ValorApiClient,
        account_id: str,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_progress: Optional[Callable[[AutoFightProgress], None]] = None,
    ) -> None:
        self.api = api
        self.account_id = account_id
        self.notifier = notifier or Notifier()
        self.effects = TowerEffects(self.notifier, rng=rng)
        self.auto_fighter = AutoFighter(
            api, account_id, self.notifier, sleep=sleep, on_progress=on_progress
        )

        self.opponent: Optional[NpcOpponent] = None
        self.last_result: Optional[NpcBattleResult] = None

    async def refresh(self) -> Optional[NpcOpponent]:
        self.opponent = await self.api.get_current_npc(self.account_id)
        return self.opponent

    async def fight(self) -> Optional[NpcBattleResult]:
        """
        One battle against the current opponent.

        Refused (``None``, with a toast) while stunned or when the rank
        requirement of the current opponent is not met.
        """
        if self.effects.is_stunned:
            # 眩晕时本回合只能防御，消耗一回合效果
            self.notifier.error("Stunned!", "You are stunned and must defend!")
            self.effects.pass_turn()
            return None

        opponent = self.opponent
        if opponent is not None and not opponent.can_fight:
            self.notifier.error(
                "Rank Too Low",
                f"You need {opponent.required_rank} rank to fight level {opponent.global_level}+. "
                f"Your current rank: {opponent.player_rank}",
            )
            return None

        try:
            result = await self.api.npc_battle(self.account_id)
        except (ValorApiError, ValidationError) as exc:
            logger.warning("[Tower] battle failed: %s", exc)
            self.notifier.error("Error", "Battle failed")
            return None

        self.last_result = result
        self.effects.apply_battle(self.opponent, result)
        await self.refresh()
        return result

    async def auto_fight(self, count: Optional[int] = None) -> AutoFightProgress:
        self.last_result = None
        try:
            return await self.auto_fighter.run(count or settings.auto_fight_default_count)
        finally:
            await self.refresh()

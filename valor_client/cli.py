#!/usr/bin/env python3
"""
Legends of Valor - 终端客户端

Talks to the game REST API and renders duels, the NPC tower, the markets
and the world clock in the terminal.

使用方式:
    valor-play --user alice --password secret duel <challenge_id>
    valor-play --user alice --password secret tower --auto 10
    valor-play --user alice --password secret auctions --type gold
    valor-play --user alice --password secret black-market --buy <item_id>
    valor-play world
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from valor_client.combat.palette import ACTION_LABELS, STATUS_ICONS, element_color, hp_band
from valor_client.combat.session import CombatSession
from valor_client.config import settings, validate_config
from valor_client.models.account import Account, EnergyStatus, format_compact
from valor_client.models.combat import CombatAction, CombatantState
from valor_client.models.market import Auction, BlackMarketStock
from valor_client.models.npc import AutoFightProgress, NpcBattleResult, NpcOpponent
from valor_client.models.visual import ResultScreen, Side
from valor_client.models.world import WorldTime
from valor_client.services.accounts import AccountSession
from valor_client.services.api_client import ValorApiClient
from valor_client.services.market import AuctionHouse, BlackMarket
from valor_client.services.notifier import Notifier, Toast
from valor_client.services.npc_tower import NpcTower
from valor_client.services.world_clock import EnergyMonitor, WorldClock

logger = logging.getLogger(__name__)

# 颜色主题
COLORS = {
    "player": "bright_green",
    "enemy": "bright_red",
    "system": "bright_magenta",
    "time": "yellow",
    "error": "bright_red",
    "hint": "dim",
    "gold": "bright_yellow",
    "ruby": "magenta",
}

HP_STYLES = {"high": "green", "mid": "yellow", "low": "red"}


# ==================== 显示渲染 ====================

class GameRenderer:
    """终端渲染器"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_toast(self, toast: Toast) -> None:
        style = COLORS["error"] if toast.is_error else COLORS["system"]
        text = f"[bold]{toast.title}[/bold]"
        if toast.description:
            text += f"  {toast.description}"
        self.console.print(f"[{style}]● {text}[/{style}]")

    def print_account(self, account: Account, energy: Optional[EnergyStatus] = None) -> None:
        parts = [
            f"[cyan]{account.username}[/cyan]",
            f"[{COLORS['gold']}]Gold {format_compact(account.gold)}[/]",
            f"[{COLORS['ruby']}]Rubies {format_compact(account.rubies)}[/]",
            f"[red]Valor {format_compact(account.valor_tokens)}[/red]",
        ]
        if energy is not None:
            parts.append(f"[blue]Energy {energy.energy}/{energy.max_energy}[/blue]")
        self.console.print(" │ ".join(parts))

    # ----- 对决 -----

    def _hp_bar(self, side: CombatantState, width: int = 24) -> Text:
        percent = side.hp_percent
        filled = int(round(width * percent / 100))
        bar = Text("█" * filled, style=HP_STYLES[hp_band(percent)])
        bar.append("░" * (width - filled), style="dim")
        bar.append(f" {side.hp}/{side.max_hp}")
        return bar

    def _combatant_panel(self, side: CombatantState, role: str, shaking: bool, fainted: bool) -> Panel:
        body = Text()
        body.append_text(self._hp_bar(side))
        body.append("\n")
        if side.element:
            body.append(side.element, style=element_color(side.element))
            body.append("  ")
        if side.pet:
            body.append(f"🐾 {side.pet.name}  ", style="dim")
        for effect in side.status_effects:
            icon = STATUS_ICONS.get(effect.type, "•")
            body.append(f"{icon}{effect.turns_left} ")
        if side.has_acted:
            body.append("\n✓ action locked in", style="dim")
        title = f"[bold {COLORS[role]}]{side.name or side.id}[/]"
        if fainted:
            title += " 💀"
        border = "bright_white" if shaking else COLORS[role]
        return Panel(body, title=title, border_style=border, width=40)

    def render_combat(self, combat: CombatSession) -> None:
        state = combat.state
        if state is None:
            self.console.print("[dim]Initializing combat...[/dim]")
            return

        effects = combat.effects
        mine, opponent = state.sides(combat.player_id)
        table = Table.grid(padding=(0, 2))
        table.add_row(
            self._combatant_panel(mine, "player", Side.PLAYER in effects.shaking, Side.PLAYER in effects.defeated),
            self._combatant_panel(opponent, "enemy", Side.ENEMY in effects.shaking, Side.ENEMY in effects.defeated),
        )
        header = f"Round {state.round} · {state.status.value}"
        if effects.crit_flash:
            header += "  [bold yellow]CRITICAL![/bold yellow]"
        self.console.print(Panel(table, title=header, border_style="cyan"))

        if effects.floating_numbers:
            numbers = Text()
            for number in effects.floating_numbers:
                style = f"bold {number.color}" if number.is_crit else number.color
                numbers.append(f"{number.value} ", style=style)
            self.console.print(numbers)

        for line in state.log[-5:]:
            self.console.print(f"[dim]{line}[/dim]")

        if effects.result == ResultScreen.VICTORY:
            self.console.print(Panel(f"🏆 VICTORY 🏆\nYou defeated {opponent.name}!", border_style="yellow"))
        elif effects.result == ResultScreen.DEFEAT:
            self.console.print(Panel(f"💀 DEFEAT 💀\n{opponent.name} won this duel.", border_style="red"))
        elif combat.waiting_for_opponent:
            self.console.print(f"[{COLORS['hint']}]Waiting for opponent...[/]")

    # ----- NPC 塔 -----

    def render_opponent(self, npc: Optional[NpcOpponent]) -> None:
        if npc is None:
            self.console.print("[dim]No opponent available.[/dim]")
            return
        tags = []
        if npc.is_boss:
            tags.append("[bold red]BOSS[/bold red]")
        if npc.archetype:
            tags.append(npc.archetype)
        self.console.print(Panel(
            f"Floor {npc.floor} · Level {npc.level} (global {npc.global_level})\n"
            f"Power {npc.power:,} vs yours {npc.player_power:,}\n"
            + (" ".join(tags) if tags else ""),
            title=f"[bold]{npc.name}[/bold]",
            border_style="magenta",
        ))

    def render_battle(self, result: NpcBattleResult) -> None:
        outcome = "[green]Victory[/green]" if result.victory else "[red]Defeat[/red]"
        rewards = result.rewards
        self.console.print(
            f"{outcome}  {result.player_power:,} vs {result.npc_power:,}  "
            f"gold +{rewards.gold:,} TP +{rewards.training_points:,} "
            f"shards +{rewards.soul_shards:,}"
        )

    def render_progress(self, progress: AutoFightProgress) -> None:
        self.console.print(
            f"[dim]{progress.current}/{progress.total}[/dim]  "
            f"[green]{progress.wins}W[/green] [red]{progress.losses}L[/red]"
        )

    # ----- 市场 -----

    def render_auctions(self, auctions: List[Auction]) -> None:
        table = Table(title="Auction House", border_style="yellow")
        table.add_column("ID", style="dim")
        table.add_column("Item")
        table.add_column("Type")
        table.add_column("Current Bid", justify="right")
        table.add_column("Min Bid", justify="right")
        table.add_column("Time Left")
        for auction in auctions:
            table.add_row(
                auction.id,
                auction.item_id,
                auction.item_type.value,
                f"{auction.current_bid:,} {auction.type.value}",
                f"{auction.min_bid:,}",
                auction.time_left_label(),
            )
        self.console.print(table)

    def render_black_market(self, stock: BlackMarketStock, countdown: str, rubies: int) -> None:
        table = Table(title="Black Market", border_style="red")
        table.add_column("ID", style="dim")
        table.add_column("Item")
        table.add_column("Type/Tier")
        table.add_column("Rubies", justify="right")
        for item in stock.items:
            price_style = "magenta" if item.affordable(rubies) else "dim red"
            table.add_row(
                item.id,
                f"💀 {item.name}" + (f"\n✦ {item.special}" if item.special else ""),
                f"{item.type}/{item.tier or '-'}",
                f"[{price_style}]{item.ruby_price:,}[/]",
            )
        self.console.print(table)
        if countdown:
            self.console.print(f"[dim]Refreshes in:[/dim] [yellow]{countdown}[/yellow]")

    # ----- 世界 -----

    def render_world(self, world: WorldTime) -> None:
        day_night = world.day_night
        lines = [f"[{COLORS['time']}]{day_night.clock}[/] {day_night.time_of_day.value}"]
        for zone, weather in world.weather.items():
            lines.append(f"  {zone}: {weather.type.value}")
        flags = [
            name
            for name, on in (
                ("rain", world.has_rain),
                ("fog", world.has_fog),
                ("blizzard", world.has_blizzard),
                ("thunderstorm", world.has_thunderstorm),
            )
            if on
        ]
        if flags:
            lines.append(f"[dim]effects: {', '.join(flags)}[/dim]")
        self.console.print(Panel("\n".join(lines), title="World", border_style="blue"))


# ==================== 命令 ====================

async def _login(api: ValorApiClient, args: argparse.Namespace, renderer: GameRenderer) -> Optional[Account]:
    accounts = AccountSession(api)
    account = await accounts.login(args.user, args.password, race=args.race, gender=args.gender)
    if accounts.needs_race_selection:
        renderer.console.print("[yellow]New account: pass --race and --gender.[/yellow]")
        return None
    if account is None:
        renderer.console.print(f"[{COLORS['error']}]Login failed: {accounts.last_error}[/]")
        return None
    energy = None
    if account.is_player:
        energy = await EnergyMonitor(api, account.id).refresh()
    renderer.print_account(account, energy)
    return account


async def run_duel(api: ValorApiClient, account: Account, challenge_id: str,
                   renderer: GameRenderer, notifier: Notifier) -> None:
    prompt = PromptSession(history=InMemoryHistory())
    actions = ", ".join(ACTION_LABELS.values())
    combat = CombatSession(api, challenge_id, account.id, notifier=notifier)

    async with combat:
        last_seen = None
        while not combat.ended.is_set():
            if combat.state is not last_seen or combat.effects.busy:
                last_seen = combat.state
                renderer.render_combat(combat)

            if not combat.can_submit:
                await combat.wait_ended(timeout=settings.combat_poll_seconds)
                continue

            renderer.console.print(f"[{COLORS['hint']}]{actions}[/]")
            with patch_stdout():
                choice = (await prompt.prompt_async("action> ")).strip().lower()
            if choice in {"quit", "q", "exit"}:
                break
            if choice in {"", "refresh"}:
                await combat.refresh()
                continue
            try:
                action = CombatAction(choice)
            except ValueError:
                renderer.console.print(f"[{COLORS['error']}]Unknown action: {choice}[/]")
                continue
            await combat.submit_action(action)

        renderer.render_combat(combat)


async def run_tower(api: ValorApiClient, account: Account, auto: Optional[int],
                    renderer: GameRenderer, notifier: Notifier) -> None:
    tower = NpcTower(api, account.id, notifier=notifier, on_progress=renderer.render_progress)
    renderer.render_opponent(await tower.refresh())
    if auto:
        await tower.auto_fight(auto)
    else:
        result = await tower.fight()
        if result is not None:
            renderer.render_battle(result)
    renderer.render_opponent(tower.opponent)


async def run_auctions(api: ValorApiClient, account: Account, args: argparse.Namespace,
                       renderer: GameRenderer, notifier: Notifier) -> None:
    house = AuctionHouse(api, notifier=notifier, currency=args.type)
    if args.bid:
        auction_id, amount = args.bid
        await house.bid(auction_id, int(amount))
    renderer.render_auctions(await house.refresh())


async def run_black_market(api: ValorApiClient, account: Account, args: argparse.Namespace,
                           renderer: GameRenderer, notifier: Notifier) -> None:
    accounts = AccountSession(api)
    accounts.account = account
    market = BlackMarket(api, notifier=notifier, refetch_account=accounts.refetch)
    stock = await market.load()
    if args.buy:
        await market.purchase(account.id, args.buy)
    renderer.render_black_market(stock, await market.tick(), (accounts.account or account).rubies)

    if args.watch:
        remaining = [args.watch]

        def on_tick(label: str) -> None:
            renderer.console.print(f"[dim]Refreshes in:[/dim] [yellow]{label}[/yellow]")
            remaining[0] -= 1
            if remaining[0] <= 0:
                market.stop_countdown()

        await market.run_countdown(on_tick)


async def run_world(api: ValorApiClient, renderer: GameRenderer) -> None:
    world = await WorldClock(api).refresh()
    if world is None:
        renderer.console.print("[dim]World time unavailable.[/dim]")
        return
    renderer.render_world(world)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="valor-play", description="Legends of Valor terminal client")
    parser.add_argument("--base-url", default=None, help="API base URL (VALOR_API_BASE_URL)")
    parser.add_argument("--user", help="account username")
    parser.add_argument("--password", default="", help="account password")
    parser.add_argument("--race", default=None)
    parser.add_argument("--gender", default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    duel = sub.add_parser("duel", help="join a PvP duel")
    duel.add_argument("challenge_id")

    tower = sub.add_parser("tower", help="fight the NPC tower")
    tower.add_argument("--auto", type=int, default=None, metavar="N", help="auto-fight N battles")

    auctions = sub.add_parser("auctions", help="browse the auction house")
    auctions.add_argument("--type", choices=["gold", "valor"], default="gold")
    auctions.add_argument("--bid", nargs=2, metavar=("AUCTION_ID", "AMOUNT"))

    market = sub.add_parser("black-market", help="browse the black market")
    market.add_argument("--buy", metavar="ITEM_ID")
    market.add_argument("--watch", type=int, default=0, metavar="SECONDS", help="keep the refresh countdown running")

    sub.add_parser("world", help="show world time and weather")
    return parser


async def run(args: argparse.Namespace, console: Optional[Console] = None) -> int:
    renderer = GameRenderer(console)
    notifier = Notifier(sink=renderer.print_toast)

    async with ValorApiClient(base_url=args.base_url) as api:
        if args.command == "world":
            await run_world(api, renderer)
            return 0

        if not args.user:
            renderer.console.print(f"[{COLORS['error']}]--user is required for {args.command}[/]")
            return 2
        account = await _login(api, args, renderer)
        if account is None:
            return 1

        if args.command == "duel":
            await run_duel(api, account, args.challenge_id, renderer, notifier)
        elif args.command == "tower":
            await run_tower(api, account, args.auto, renderer, notifier)
        elif args.command == "auctions":
            await run_auctions(api, account, args, renderer, notifier)
        elif args.command == "black-market":
            await run_black_market(api, account, args, renderer, notifier)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    if not args.base_url and not validate_config():
        return 2
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())

import random

from rich.console import Console

from valor_client.cli import GameRenderer, build_parser
from valor_client.combat.session import CombatSession
from valor_client.models.market import BlackMarketStock
from valor_client.services.notifier import Toast, ToastVariant


def _renderer():
    return GameRenderer(Console(record=True, width=120))


def test_parser_subcommands():
    parser = build_parser()

    duel = parser.parse_args(["--user", "aria", "duel", "c1"])
    assert (duel.command, duel.challenge_id) == ("duel", "c1")

    tower = parser.parse_args(["--user", "aria", "tower", "--auto", "5"])
    assert tower.auto == 5

    auctions = parser.parse_args(["--user", "aria", "auctions", "--type", "valor", "--bid", "x1", "120"])
    assert auctions.type == "valor"
    assert auctions.bid == ["x1", "120"]


def test_render_combat_shows_floating_numbers_and_result(make_api, make_state, scheduler):
    renderer = _renderer()
    session = CombatSession(
        make_api(lambda request: None), "c1", "p1", scheduler=scheduler, rng=random.Random(3)
    )
    session.apply_snapshot(make_state(round=1))
    session.apply_snapshot(make_state(round=2, op_hp=70, log=["Aria lands a CRIT!"]))

    renderer.render_combat(session)
    output = renderer.console.export_text()

    assert "Round 2" in output
    assert "-30" in output
    assert "CRITICAL!" in output

    session.effects.show_result(True)
    renderer.render_combat(session)
    assert "VICTORY" in renderer.console.export_text()


def test_render_toast_and_black_market():
    renderer = _renderer()
    renderer.print_toast(Toast("You got scammed!", "junk", ToastVariant.DESTRUCTIVE))
    stock = BlackMarketStock.model_validate(
        {"items": [{"id": "i1", "name": "Shadow Blade", "rubyPrice": 500}]}
    )
    renderer.render_black_market(stock, "1h 2m 3s", rubies=10)

    output = renderer.console.export_text()
    assert "You got scammed!" in output
    assert "Shadow Blade" in output
    assert "1h 2m 3s" in output

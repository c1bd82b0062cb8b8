import random

from valor_client.combat.effects import EffectDispatcher
from valor_client.combat.palette import CRIT_COLOR, DAMAGE_TAKEN_COLOR, ENEMY_HIT_COLOR, HEAL_COLOR
from valor_client.models.visual import ResultScreen, Side, VisualEvent, VisualEventType


def _dispatcher(scheduler, **kwargs):
    return EffectDispatcher(scheduler=scheduler, rng=random.Random(7), **kwargs)


def _damage(side, amount, is_crit=False, element="Water"):
    return VisualEvent(
        type=VisualEventType.DAMAGE, side=side, amount=amount, is_crit=is_crit, element=element
    )


def test_damage_spawns_one_floating_number_with_negative_value(scheduler):
    effects = _dispatcher(scheduler)

    effects.dispatch([_damage(Side.PLAYER, 12)])

    assert len(effects.floating_numbers) == 1
    number = effects.floating_numbers[0]
    assert number.value == "-12"
    assert number.color == DAMAGE_TAKEN_COLOR
    assert 17 <= number.x <= 27
    assert 25 <= number.y <= 35
    assert Side.PLAYER in effects.shaking
    assert effects.hit_spark is not None and effects.hit_spark.x == 25


def test_floating_number_removed_after_1200ms(scheduler):
    effects = _dispatcher(scheduler)
    effects.dispatch([_damage(Side.ENEMY, 5)])

    scheduler.advance(1.19)
    assert len(effects.floating_numbers) == 1

    scheduler.advance(0.02)
    assert effects.floating_numbers == []


def test_shake_spark_and_flash_clear_on_their_own_timers(scheduler):
    effects = _dispatcher(scheduler)
    effects.dispatch([
        _damage(Side.ENEMY, 30, is_crit=True),
        VisualEvent(type=VisualEventType.CRIT, side=Side.ENEMY, is_crit=True),
    ])
    assert effects.crit_flash is True

    scheduler.advance(0.3)
    assert effects.crit_flash is False
    assert effects.hit_spark is not None

    scheduler.advance(0.1)
    assert effects.hit_spark is None
    assert Side.ENEMY in effects.shaking

    scheduler.advance(0.1)
    assert effects.shaking == set()


def test_enemy_hit_colors(scheduler):
    effects = _dispatcher(scheduler)
    effects.dispatch([_damage(Side.ENEMY, 3), _damage(Side.ENEMY, 9, is_crit=True)])

    normal, crit = effects.floating_numbers
    assert normal.color == ENEMY_HIT_COLOR and not normal.is_crit
    assert crit.color == CRIT_COLOR and crit.is_crit


def test_heal_and_faint(scheduler):
    effects = _dispatcher(scheduler)
    effects.dispatch([
        VisualEvent(type=VisualEventType.HEAL, side=Side.PLAYER, amount=8),
        VisualEvent(type=VisualEventType.FAINT, side=Side.ENEMY),
    ])

    (heal,) = effects.floating_numbers
    assert heal.value == "+8"
    assert heal.color == HEAL_COLOR
    assert effects.defeated == {Side.ENEMY}


def test_finished_reveals_result_after_800ms(scheduler):
    effects = _dispatcher(scheduler)
    effects.dispatch([VisualEvent(type=VisualEventType.FINISHED, victory=False)])

    scheduler.advance(0.79)
    assert effects.result is None

    scheduler.advance(0.02)
    assert effects.result == ResultScreen.DEFEAT


def test_cancel_all_drops_pending_timers(scheduler):
    effects = _dispatcher(scheduler)
    effects.dispatch([_damage(Side.PLAYER, 1)])
    assert effects.busy

    effects.cancel_all()
    scheduler.advance(5)

    assert not effects.busy
    # 已取消的清理不再执行
    assert len(effects.floating_numbers) == 1


def test_on_idle_fires_when_last_timer_drains(scheduler):
    drained = []
    effects = _dispatcher(scheduler, on_idle=lambda: drained.append(True))
    effects.dispatch([_damage(Side.PLAYER, 1)])

    scheduler.advance(0.5)
    assert drained == []

    scheduler.advance(1.0)
    assert drained == [True]

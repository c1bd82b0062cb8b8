import httpx
import pytest

from valor_client.models.world import WorldTime
from valor_client.services.world_clock import EnergyMonitor, LightningTicker, WorldClock


class Rolls:
    def __init__(self, *values):
        self._values = list(values)

    def random(self):
        return self._values.pop(0) if self._values else 0.99


def _world(*weather_types, time_of_day="night"):
    return {
        "dayNight": {
            "timeOfDay": time_of_day,
            "cycleProgress": 0.4,
            "inGameHour": 21,
            "inGameMinute": 5,
            "isNight": True,
        },
        "weather": {f"zone{i}": {"type": t} for i, t in enumerate(weather_types)},
    }


def test_weather_flags():
    storm = WorldTime.model_validate(_world("thunderstorm", "fog"))
    assert storm.has_thunderstorm and storm.has_rain and storm.has_fog
    assert not storm.has_blizzard
    assert storm.day_night.clock == "21:05"

    clear = WorldTime.model_validate(_world("clear"))
    assert not (clear.has_rain or clear.has_thunderstorm)


def test_lightning_flashes_on_low_roll(scheduler):
    changes = []
    ticker = LightningTicker(scheduler=scheduler, rng=Rolls(0.5, 0.1), on_change=changes.append)
    ticker.set_active(True)

    scheduler.advance(4.0)
    assert not ticker.flashing

    scheduler.advance(4.0)
    assert ticker.flashing
    scheduler.advance(0.15)
    assert not ticker.flashing
    assert changes == [True, False]
    assert ticker.flash_count == 1


def test_lightning_stops_when_storm_ends(scheduler):
    ticker = LightningTicker(scheduler=scheduler, rng=Rolls(0.0))
    ticker.set_active(True)
    scheduler.advance(4.0)
    assert ticker.flashing

    ticker.set_active(False)
    assert not ticker.flashing
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_world_clock_toggles_lightning(make_api, scheduler):
    responses = [_world("thunderstorm"), _world("clear")]
    api = make_api(lambda request: httpx.Response(200, json=responses.pop(0)))
    clock = WorldClock(api, scheduler=scheduler, rng=Rolls())

    await clock.refresh()
    assert clock.lightning.active

    await clock.refresh()
    assert not clock.lightning.active
    assert clock.world_time.weather_types[0].value == "clear"


@pytest.mark.asyncio
async def test_world_clock_keeps_last_value_on_error(make_api, scheduler):
    responses = [httpx.Response(200, json=_world("rain")), httpx.Response(500, text="down")]
    clock = WorldClock(make_api(lambda request: responses.pop(0)), scheduler=scheduler)

    await clock.refresh()
    assert await clock.refresh() is not None
    assert clock.world_time.has_rain
    assert clock.poller.last_error is not None


@pytest.mark.asyncio
async def test_energy_monitor(make_api):
    api = make_api(lambda request: httpx.Response(200, json={"energy": 30, "maxEnergy": 120}))
    monitor = EnergyMonitor(api, "a1")

    energy = await monitor.refresh()

    assert energy.energy == 30
    assert energy.ratio == 0.25

"""
世界时间与天气模型
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class WeatherType(str, Enum):
    CLEAR = "clear"
    RAIN = "rain"
    THUNDERSTORM = "thunderstorm"
    FOG = "fog"
    BLIZZARD = "blizzard"


class TimeOfDay(str, Enum):
    DAWN = "dawn"
    DAY = "day"
    DUSK = "dusk"
    NIGHT = "night"


class DayNightState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    time_of_day: TimeOfDay = Field(alias="timeOfDay")
    cycle_progress: float = Field(default=0.0, alias="cycleProgress")
    in_game_hour: int = Field(default=0, alias="inGameHour")
    in_game_minute: int = Field(default=0, alias="inGameMinute")
    is_night: bool = Field(default=False, alias="isNight")

    @property
    def clock(self) -> str:
        return f"{self.in_game_hour:02d}:{self.in_game_minute:02d}"


class ZoneWeather(BaseModel):
    type: WeatherType = WeatherType.CLEAR


class WorldTime(BaseModel):
    """Payload of ``GET /api/world-time``; weather is keyed by zone."""

    model_config = ConfigDict(populate_by_name=True)

    day_night: DayNightState = Field(alias="dayNight")
    weather: Dict[str, ZoneWeather] = Field(default_factory=dict)

    @property
    def weather_types(self) -> List[WeatherType]:
        return [zone.type for zone in self.weather.values()]

    @property
    def has_thunderstorm(self) -> bool:
        return WeatherType.THUNDERSTORM in self.weather_types

    @property
    def has_rain(self) -> bool:
        types = self.weather_types
        return WeatherType.RAIN in types or WeatherType.THUNDERSTORM in types

    @property
    def has_fog(self) -> bool:
        return WeatherType.FOG in self.weather_types

    @property
    def has_blizzard(self) -> bool:
        return WeatherType.BLIZZARD in self.weather_types

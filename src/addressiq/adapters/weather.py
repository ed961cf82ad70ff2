"""Weather and solar adapters (Open-Meteo forecast, optionally Weerlive for current weather)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from addressiq.adapters.base import ProviderContext, Target
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.models.base import HistoricalPoint
from addressiq.models.sources import SolarPotential, WeatherData

TIMEZONE = "Europe/Amsterdam"
FORECAST_HOURS = 6

# Weerlive reports wind direction as a Dutch compass point
COMPASS_POINTS = (
    "N", "NNO", "NO", "ONO", "O", "OZO", "ZO", "ZZO",
    "Z", "ZZW", "ZW", "WZW", "W", "WNW", "NW", "NNW",
)  # fmt: skip
COMPASS_DEGREES: dict[str, int] = {point: int(i * 22.5) for i, point in enumerate(COMPASS_POINTS)}


class _Loose(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _CurrentWeather(_Loose):
    temperature: float = 0.0
    windspeed: float = 0.0
    winddirection: float = 0.0
    time: str = ""


class _HourlyWeather(_Loose):
    time: list[str] = Field(default_factory=list)
    precipitation: list[float] = Field(default_factory=list)
    relativehumidity_2m: list[float] = Field(default_factory=list)
    pressure_msl: list[float] = Field(default_factory=list)


class _WeatherReply(_Loose):
    current_weather: _CurrentWeather = Field(default_factory=_CurrentWeather)
    hourly: _HourlyWeather = Field(default_factory=_HourlyWeather)


class _WeerliveForecast(_Loose):
    dag: str = ""
    neerslag: float = 0.0


class _WeerliveLive(_Loose):
    temp: float = 0.0
    samenv: str = ""
    windsnelheid: float = 0.0
    windrichting: str = ""
    luchtdruk: float = 0.0
    lv: float = 0.0
    zicht: float = 0.0
    verwachting: list[_WeerliveForecast] = Field(default_factory=list)


class _WeerliveReply(_Loose):
    liveweer: list[_WeerliveLive] = Field(default_factory=list)


class _HourlySolar(_Loose):
    time: list[str] = Field(default_factory=list)
    shortwave_radiation: list[float] = Field(default_factory=list)


class _DailySolar(_Loose):
    time: list[str] = Field(default_factory=list)
    sunshine_duration: list[float] = Field(default_factory=list)
    uv_index_max: list[float] = Field(default_factory=list)


class _SolarReply(_Loose):
    hourly: _HourlySolar = Field(default_factory=_HourlySolar)
    daily: _DailySolar = Field(default_factory=_DailySolar)


def compass_to_degrees(direction: str) -> int:
    """``"ZW"`` → 225. Unknown directions map to 0."""
    return COMPASS_DEGREES.get(direction.strip().upper(), 0)


def _first(values: list[float]) -> float:
    return values[0] if values else 0.0


async def fetch_weather(ctx: ProviderContext, target: Target) -> WeatherData:
    if ctx.settings.uses_weerlive:
        return await _fetch_weerlive(ctx, target)

    params = {
        "latitude": f"{target.lat:f}",
        "longitude": f"{target.lon:f}",
        "current_weather": "true",
        "hourly": "precipitation,relativehumidity_2m,pressure_msl",
        "timezone": TIMEZONE,
    }
    reply = await ctx.http.get_json(
        ctx.deadline, "weather", ctx.settings.knmi_weather_api_url, _WeatherReply, params=params
    )

    hourly = reply.hourly
    return WeatherData(
        temperature=reply.current_weather.temperature,
        wind_speed=reply.current_weather.windspeed,
        wind_direction=int(reply.current_weather.winddirection),
        humidity=_first(hourly.relativehumidity_2m),
        pressure=_first(hourly.pressure_msl),
        precipitation=_first(hourly.precipitation),
        last_updated=reply.current_weather.time,
        rainfall_forecast=hourly.precipitation[:FORECAST_HOURS],
        historical_rainfall=[
            HistoricalPoint(date=t, value=v)
            for t, v in zip(hourly.time[:FORECAST_HOURS], hourly.precipitation, strict=False)
        ],
    )


async def _fetch_weerlive(ctx: ProviderContext, target: Target) -> WeatherData:
    s = ctx.settings
    params = {"key": s.weerlive_api_key, "locatie": f"{target.lat:f},{target.lon:f}"}
    reply = await ctx.http.get_json(ctx.deadline, "weather", s.weerlive_api_url, _WeerliveReply, params=params)
    if not reply.liveweer:
        raise ProviderError(ErrorKind.NOT_FOUND, "weather", "no live weather for location")

    live = reply.liveweer[0]
    return WeatherData(
        temperature=live.temp,
        description=live.samenv,
        wind_speed=live.windsnelheid,
        wind_direction=compass_to_degrees(live.windrichting),
        pressure=live.luchtdruk,
        humidity=live.lv,
        visibility=live.zicht,
        rainfall_forecast=[day.neerslag for day in live.verwachting],
        historical_rainfall=[HistoricalPoint(date=day.dag, value=day.neerslag) for day in live.verwachting],
    )


async def fetch_solar(ctx: ProviderContext, target: Target) -> SolarPotential:
    params = {
        "latitude": f"{target.lat:f}",
        "longitude": f"{target.lon:f}",
        "hourly": "shortwave_radiation",
        "daily": "sunshine_duration,uv_index_max",
        "timezone": TIMEZONE,
    }
    reply = await ctx.http.get_json(
        ctx.deadline, "solarPotential", ctx.settings.knmi_solar_api_url, _SolarReply, params=params
    )

    hourly, daily = reply.hourly, reply.daily
    return SolarPotential(
        solar_radiation=_first(hourly.shortwave_radiation),
        sunshine_hours=_first(daily.sunshine_duration) / 3600.0,
        uv_index=_first(daily.uv_index_max),
        date=hourly.time[0] if hourly.time else "",
        historical=[
            HistoricalPoint(date=t, value=v)
            for t, v in zip(hourly.time[:FORECAST_HOURS], hourly.shortwave_radiation, strict=False)
        ],
    )


__all__ = ["COMPASS_DEGREES", "compass_to_degrees", "fetch_solar", "fetch_weather"]

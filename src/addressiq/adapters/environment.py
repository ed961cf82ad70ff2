"""Environmental quality adapters: air quality (Luchtmeetnet) and noise."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from addressiq.adapters.base import ProviderContext, Target, get_or_sentinel, join_url, point_params
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.models.sources import AirMeasurement, AirQuality, NoisePollution

NOISE_LIMIT_DB = 55.0
QUIET_AREA_DB = 45.0
MEASUREMENT_LIMIT = 25


class _Loose(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _Station(_Loose):
    number: str = ""
    location: str = ""


class _StationsReply(_Loose):
    data: list[_Station] = Field(default_factory=list)


class _Measurement(_Loose):
    formula: str = ""
    value: float = 0.0
    timestamp_measured: str = ""


class _MeasurementsReply(_Loose):
    data: list[_Measurement] = Field(default_factory=list)


def aqi_from_pm25(pm25: float) -> tuple[int, str]:
    """Simplified US-EPA index from a PM2.5 concentration in µg/m³."""
    if pm25 <= 12:
        return int(pm25 / 12.0 * 50), "Good"
    if pm25 <= 35.4:
        return 51 + int((pm25 - 12.1) / (35.4 - 12.1) * 49), "Moderate"
    return 101, "Unhealthy for Sensitive Groups"


def noise_category(total_db: float) -> str:
    if total_db < 50:
        return "Quiet"
    if total_db < 55:
        return "Moderate"
    if total_db < 65:
        return "Loud"
    return "Very Loud"


async def fetch_air_quality(ctx: ProviderContext, target: Target) -> AirQuality:
    """Latest measurements at the nearest monitoring station.

    Without any PM2.5 reading the index defaults to 50 / "Good". When a
    station reports several PM2.5 readings the last one in the reply wins.
    """
    base = ctx.settings.luchtmeetnet_api_url
    stations = await ctx.http.get_json(
        ctx.deadline,
        "airQuality",
        join_url(base, "stations"),
        _StationsReply,
        params={**point_params(target), "limit": "1"},
    )
    if not stations.data:
        raise ProviderError(ErrorKind.NOT_FOUND, "airQuality", "no air quality station near location")

    station = stations.data[0]
    reply = await ctx.http.get_json(
        ctx.deadline,
        "airQuality",
        join_url(base, f"stations/{station.number}/measurements"),
        _MeasurementsReply,
        params={
            "order_by": "timestamp_measured",
            "order_direction": "desc",
            "limit": str(MEASUREMENT_LIMIT),
        },
    )

    aqi, category = 50, "Good"
    for m in reply.data:
        if m.formula.upper() == "PM25" and m.value > 0:
            aqi, category = aqi_from_pm25(m.value)

    return AirQuality(
        station_id=station.number,
        station_name=station.location,
        measurements=[AirMeasurement(parameter=m.formula, value=m.value) for m in reply.data],
        aqi=aqi,
        category=category,
        last_updated=reply.data[0].timestamp_measured if reply.data else "",
    )


def _quiet_area() -> NoisePollution:
    return NoisePollution(total_noise=QUIET_AREA_DB, noise_category="Quiet", exceeds_limit=False, sources=[])


async def fetch_noise(ctx: ProviderContext, target: Target) -> NoisePollution:
    """Noise exposure in dB. An unmapped location (404) is taken to be quiet."""
    url = join_url(ctx.settings.noise_pollution_api_url, "noise")
    reply = await get_or_sentinel(
        ctx, "noisePollution", url, NoisePollution, _quiet_area, params=point_params(target)
    )
    return reply.model_copy(
        update={
            "noise_category": noise_category(reply.total_noise),
            "exceeds_limit": reply.total_noise > NOISE_LIMIT_DB,
        }
    )


__all__ = ["aqi_from_pm25", "fetch_air_quality", "fetch_noise", "noise_category"]

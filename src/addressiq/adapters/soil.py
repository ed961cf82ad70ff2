"""Soil adapters. All four providers reply in the record's own shape."""

from __future__ import annotations

from addressiq.adapters.base import ProviderContext, Target, get_or_sentinel, join_url, point_params
from addressiq.models.sources import BroSoilMap, SoilData, SoilQuality, Subsidence


async def fetch_soil(ctx: ProviderContext, target: Target) -> SoilData:
    url = join_url(ctx.settings.wur_soil_api_url, "soil")
    return await ctx.http.get_json(ctx.deadline, "soilData", url, SoilData, params=point_params(target))


async def fetch_subsidence(ctx: ProviderContext, target: Target) -> Subsidence:
    url = join_url(ctx.settings.skygeo_subsidence_api_url, "subsidence")
    return await ctx.http.get_json(ctx.deadline, "subsidence", url, Subsidence, params=point_params(target))


def _no_contamination_record() -> SoilQuality:
    return SoilQuality(contamination_level="Unknown", contaminants=[], restricted_use=False)


async def fetch_soil_quality(ctx: ProviderContext, target: Target) -> SoilQuality:
    """Soil contamination register. A location with no record (404) is reported as unknown, not failed."""
    url = join_url(ctx.settings.soil_quality_api_url, "soil-quality")
    return await get_or_sentinel(
        ctx, "soilQuality", url, SoilQuality, _no_contamination_record, params=point_params(target)
    )


async def fetch_bro_soil_map(ctx: ProviderContext, target: Target) -> BroSoilMap:
    url = join_url(ctx.settings.bro_soil_map_api_url, "bro/soil-map")
    return await ctx.http.get_json(ctx.deadline, "broSoilMap", url, BroSoilMap, params=point_params(target))


__all__ = ["fetch_bro_soil_map", "fetch_soil", "fetch_soil_quality", "fetch_subsidence"]

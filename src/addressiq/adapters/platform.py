"""Comprehensive platform adapters: PDOK platform, Stratopo environment, land use and zoning."""

from __future__ import annotations

from addressiq.adapters.base import ProviderContext, Target, bearer, join_url, point_params
from addressiq.models.sources import LandUse, PdokData, StratopoEnvironment


async def fetch_pdok_platform(ctx: ProviderContext, target: Target) -> PdokData:
    url = join_url(ctx.settings.pdok_api_url, "comprehensive")
    return await ctx.http.get_json(ctx.deadline, "pdokData", url, PdokData, params=point_params(target))


async def fetch_stratopo(ctx: ProviderContext, target: Target) -> StratopoEnvironment:
    """Stratopo environment variables. The bearer token is sent only when one is configured."""
    s = ctx.settings
    return await ctx.http.get_json(
        ctx.deadline,
        "stratopoEnvironment",
        join_url(s.stratopo_api_url, "environment"),
        StratopoEnvironment,
        headers=bearer(s.stratopo_api_key) if s.stratopo_api_key else None,
        params=point_params(target),
    )


async def fetch_land_use(ctx: ProviderContext, target: Target) -> LandUse:
    url = join_url(ctx.settings.land_use_api_url, "land-use")
    return await ctx.http.get_json(ctx.deadline, "landUse", url, LandUse, params=point_params(target))


__all__ = ["fetch_land_use", "fetch_pdok_platform", "fetch_stratopo"]

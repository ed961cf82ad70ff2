"""Energy label and sustainability adapters (Altum)."""

from __future__ import annotations

from addressiq.adapters.base import ProviderContext, Target, bearer, join_url, not_found_message
from addressiq.models.sources import EnergyClimate, Sustainability


async def fetch_energy(ctx: ProviderContext, target: Target) -> EnergyClimate:
    s = ctx.settings
    url = join_url(s.altum_energy_api_url, f"energy/{target.bag_id}")
    with not_found_message("energyClimate", f"energy data not found for BAG ID: {target.bag_id}"):
        return await ctx.http.get_json(
            ctx.deadline, "energyClimate", url, EnergyClimate, headers=bearer(s.altum_energy_api_key)
        )


async def fetch_sustainability(ctx: ProviderContext, target: Target) -> Sustainability:
    s = ctx.settings
    url = join_url(s.altum_sustainability_api_url, f"sustainability/{target.bag_id}")
    with not_found_message("sustainability", f"sustainability data not found for BAG ID: {target.bag_id}"):
        return await ctx.http.get_json(
            ctx.deadline,
            "sustainability",
            url,
            Sustainability,
            headers=bearer(s.altum_sustainability_api_key),
        )


__all__ = ["fetch_energy", "fetch_sustainability"]

"""Property and land adapters: cadastre, WOZ, market valuation, transactions, monuments."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from addressiq.adapters.base import ProviderContext, Target, bearer, get_or_sentinel, join_url, not_found_message
from addressiq.adapters.ogc import features_near
from addressiq.models.sources import (
    KadasterInfo,
    MarketValuation,
    MonumentStatus,
    TransactionHistory,
    WozData,
)

# ~50 m box; a monument point must sit on the parcel itself
MONUMENT_BBOX_DELTA = 0.0005


class _Loose(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _Owner(_Loose):
    naam: str = ""


class _Cadastre(_Loose):
    referentie: str = ""


class _Woz(_Loose):
    waarde: float = 0.0


class _Energy(_Loose):
    label: str = ""


class _Taxes(_Loose):
    gemeentelijk: float = 0.0


class _Surface(_Loose):
    wonen: float = 0.0
    perceel: float = 0.0


class _Building(_Loose):
    type: str = ""
    bouwjaar: int = 0


class _KadasterReply(_Loose):
    eigenaar: _Owner = _Owner()
    kadaster: _Cadastre = _Cadastre()
    woz: _Woz = _Woz()
    energie: _Energy = _Energy()
    belastingen: _Taxes = _Taxes()
    oppervlakte: _Surface = _Surface()
    gebouw: _Building = _Building()


async def fetch_kadaster(ctx: ProviderContext, target: Target) -> KadasterInfo:
    s = ctx.settings
    url = join_url(s.kadaster_objectinfo_api_url, f"objecten/{target.bag_id}")
    with not_found_message("kadasterInfo", f"property not found for BAG ID: {target.bag_id}"):
        reply = await ctx.http.get_json(
            ctx.deadline,
            "kadasterInfo",
            url,
            _KadasterReply,
            headers={"X-Api-Key": s.kadaster_objectinfo_api_key},
        )

    return KadasterInfo(
        owner_name=reply.eigenaar.naam,
        cadastral_reference=reply.kadaster.referentie,
        woz_value=reply.woz.waarde,
        energy_label=reply.energie.label,
        municipal_taxes=reply.belastingen.gemeentelijk,
        surface_area=reply.oppervlakte.wonen,
        plot_size=reply.oppervlakte.perceel,
        building_type=reply.gebouw.type,
        build_year=reply.gebouw.bouwjaar,
    )


async def fetch_woz(ctx: ProviderContext, target: Target) -> WozData:
    s = ctx.settings
    url = join_url(s.altum_woz_api_url, f"woz/{target.bag_id}")
    with not_found_message("wozData", f"WOZ data not found for BAG ID: {target.bag_id}"):
        return await ctx.http.get_json(
            ctx.deadline, "wozData", url, WozData, headers=bearer(s.altum_woz_api_key)
        )


async def fetch_market_valuation(ctx: ProviderContext, target: Target) -> MarketValuation:
    s = ctx.settings
    with not_found_message("marketValuation", f"property value data not found for BAG ID: {target.bag_id}"):
        return await ctx.http.get_json(
            ctx.deadline,
            "marketValuation",
            join_url(s.matrixian_api_url, "property-value-plus"),
            MarketValuation,
            headers={"X-API-Key": s.matrixian_api_key},
            params={"bagId": target.bag_id, "lat": f"{target.lat:f}", "lon": f"{target.lon:f}"},
        )


async def fetch_transactions(ctx: ProviderContext, target: Target) -> TransactionHistory:
    """Sale history. No recorded sales (404) is an answer, not a failure."""
    s = ctx.settings
    url = join_url(s.altum_transaction_api_url, f"transactions/{target.bag_id}")
    return await get_or_sentinel(
        ctx,
        "transactionHistory",
        url,
        TransactionHistory,
        TransactionHistory,
        headers=bearer(s.altum_transaction_api_key),
    )


async def fetch_monument(ctx: ProviderContext, target: Target) -> MonumentStatus:
    """National monument register. No point on the parcel means "not a monument"."""
    features = await features_near(
        ctx,
        "monumentStatus",
        ctx.settings.monumenten_api_url,
        "rce_inspire_points",
        target.lat,
        target.lon,
        delta=MONUMENT_BBOX_DELTA,
        limit=5,
    )
    if not features:
        return MonumentStatus(is_monument=False)

    props = features[0].properties
    return MonumentStatus(
        is_monument=True,
        type="Rijksmonument",
        name=str(props.get("text") or ""),
        date=str(props.get("legal_foundation_date") or ""),
    )


__all__ = [
    "fetch_kadaster",
    "fetch_market_valuation",
    "fetch_monument",
    "fetch_transactions",
    "fetch_woz",
]

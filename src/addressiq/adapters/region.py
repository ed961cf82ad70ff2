"""Region resolution: which CBS neighbourhood contains the address."""

from __future__ import annotations

from addressiq.adapters.base import ProviderContext, Target
from addressiq.adapters.ogc import features_near
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.models.address import RegionCodes

SOURCE = "region"

# ~200 m box around the point
REGION_BBOX_DELTA = 0.001


async def resolve_region(ctx: ProviderContext, target: Target) -> RegionCodes:
    """Neighbourhood, district and municipality codes for the target's coordinates."""
    features = await features_near(
        ctx,
        SOURCE,
        ctx.settings.region_api_url,
        "buurten",
        target.lat,
        target.lon,
        delta=REGION_BBOX_DELTA,
        limit=1,
    )
    if not features:
        raise ProviderError(ErrorKind.NOT_FOUND, SOURCE, "no neighbourhood found for coordinates")

    props = features[0].properties
    return RegionCodes(
        neighbourhood_code=str(props.get("buurtcode") or ""),
        neighbourhood_name=str(props.get("buurtnaam") or ""),
        district_code=str(props.get("wijkcode") or ""),
        district_name=str(props.get("wijknaam") or ""),
        municipality_code=str(props.get("gemeentecode") or ""),
        municipality_name=str(props.get("gemeentenaam") or ""),
    )


__all__ = ["resolve_region"]

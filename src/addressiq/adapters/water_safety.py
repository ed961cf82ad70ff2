"""Water and safety adapters: flood risk, surface water quality, neighbourhood safety, Schiphol."""

from __future__ import annotations

from addressiq.adapters.base import (
    ProviderContext,
    Target,
    get_or_sentinel,
    join_url,
    point_params,
)
from addressiq.adapters.ogc import features_near
from addressiq.core.logging import get_logger
from addressiq.models.sources import FloodRisk, SchipholFlights, Safety, WaterQuality

log = get_logger(__name__)

# ~500 m box for flood risk zones
FLOOD_BBOX_DELTA = 0.005


def classify_flood_zone(qualitative_value: str, description: str) -> tuple[str, float]:
    """Risk level and annual probability for an INSPIRE flood risk zone.

    ``"beschermd"`` (protected) in the description downgrades High to Medium.
    """
    qual = qualitative_value.lower()
    level, probability = "Medium", 0.1
    if "potential significant" in qual:
        level, probability = "Medium", 0.1
    elif "high" in qual or "significant" in qual:
        level, probability = "High", 1.0
    elif "low" in qual or "minor" in qual:
        level, probability = "Low", 0.01

    if "beschermd" in description.lower() and level == "High":
        level, probability = "Medium", 0.1
    return level, probability


def safety_perception(score: float) -> str:
    if score >= 80:
        return "Very Safe"
    if score >= 60:
        return "Safe"
    if score >= 40:
        return "Moderate"
    return "Unsafe"


async def fetch_flood_risk(ctx: ProviderContext, target: Target) -> FloodRisk:
    """Flood risk zone containing the address. Outside every zone means protected."""
    features = await features_near(
        ctx,
        "floodRisk",
        ctx.settings.flood_risk_api_url,
        "risk_zone",
        target.lat,
        target.lon,
        delta=FLOOD_BBOX_DELTA,
        limit=5,
    )
    if not features:
        return FloodRisk(
            risk_level="Low",
            flood_probability=0.01,
            water_depth=0.0,
            flood_zone="Protected",
            dike_quality="Good",
        )

    props = features[0].properties
    qualitative = str(props.get("qualitative_value") or "")
    description = str(props.get("description") or "")
    level, probability = classify_flood_zone(qualitative, description)
    log.debug("flood_zone_classified", level=level, zones=len(features))
    return FloodRisk(
        risk_level=level,
        flood_probability=probability,
        water_depth=0.0,
        flood_zone=description or qualitative,
        dike_quality="Good",
    )


def _no_nearby_water() -> WaterQuality:
    return WaterQuality(water_quality="N/A", distance=9999, parameters={})


async def fetch_water_quality(ctx: ProviderContext, target: Target) -> WaterQuality:
    url = join_url(ctx.settings.digital_delta_api_url, "water-quality")
    return await get_or_sentinel(
        ctx, "waterQuality", url, WaterQuality, _no_nearby_water, params=point_params(target)
    )


def _neutral_safety() -> Safety:
    return Safety(safety_score=70.0, safety_perception="Moderate", crime_types={})


async def fetch_safety(ctx: ProviderContext, target: Target) -> Safety:
    """Safety perception for the neighbourhood. Without data the score is a neutral 70."""
    url = join_url(ctx.settings.safety_experience_api_url, "safety")
    neutral = _neutral_safety()
    reply = await get_or_sentinel(
        ctx, "safety", url, Safety, lambda: neutral, params={"neighborhood": target.neighbourhood_code}
    )
    if reply is neutral:
        return reply
    return reply.model_copy(update={"safety_perception": safety_perception(reply.safety_score)})


def _outside_noise_contours() -> SchipholFlights:
    return SchipholFlights(daily_flights=0, noise_level=0.0, flight_paths=[], night_flights=0, noise_contour="None")


async def fetch_schiphol(ctx: ProviderContext, target: Target) -> SchipholFlights:
    s = ctx.settings
    headers: dict[str, str] = {}
    if s.schiphol_api_key:
        headers = {"ResourceVersion": "v4", "app_id": s.schiphol_app_id, "app_key": s.schiphol_api_key}
    return await get_or_sentinel(
        ctx,
        "schipholFlights",
        join_url(s.schiphol_api_url, "noise-impact"),
        SchipholFlights,
        _outside_noise_contours,
        headers=headers,
        params=point_params(target),
    )


__all__ = [
    "classify_flood_zone",
    "fetch_flood_risk",
    "fetch_safety",
    "fetch_schiphol",
    "fetch_water_quality",
    "safety_perception",
]

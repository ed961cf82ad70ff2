"""OGC API Features helper for the PDOK collections (buurten, BGT, flood zones, monuments)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from addressiq.adapters.base import ProviderContext, join_url
from addressiq.core.geo import bbox


class Feature(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | int | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    geometry: dict[str, Any] | None = None


class FeatureCollection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    features: list[Feature] = Field(default_factory=list)


async def features_near(
    ctx: ProviderContext,
    source: str,
    base_url: str,
    collection: str,
    lat: float,
    lon: float,
    *,
    delta: float,
    limit: int,
) -> list[Feature]:
    """Features of ``collection`` intersecting a ``delta``-degree box around the point."""
    url = join_url(base_url, f"collections/{collection}/items")
    params = {"bbox": bbox(lat, lon, delta), "f": "json", "limit": str(limit)}
    reply = await ctx.http.get_json(ctx.deadline, source, url, FeatureCollection, params=params)
    return reply.features


def number(props: dict[str, Any], key: str) -> float | None:
    """Numeric property, with CBS's negative "secret/unknown" markers read as absent."""
    value = props.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if value >= 0 else None


__all__ = ["Feature", "FeatureCollection", "features_near", "number"]

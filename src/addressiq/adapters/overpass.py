"""OpenStreetMap Overpass client shared by the transit, school and facility adapters.

Public Overpass instances are individually unreliable (rate limits, timeouts,
overload 504s). A query goes to the configured primary endpoint first and then
to each fallback mirror in order; the first mirror that answers wins, even with
zero elements.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from addressiq.adapters.base import ProviderContext
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.logging import get_logger

log = get_logger(__name__)

USER_AGENT = "AddressIQ/1.0"


class LatLonPoint(BaseModel):
    lat: float = 0.0
    lon: float = 0.0


class Element(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "node"
    id: int = 0
    lat: float | None = None
    lon: float | None = None
    center: LatLonPoint | None = None
    tags: dict[str, str] = Field(default_factory=dict)

    @property
    def position(self) -> tuple[float, float]:
        """``(lat, lon)`` of a node, or the centre of a way queried with ``out center``."""
        if self.lat is not None and self.lon is not None:
            return self.lat, self.lon
        if self.center is not None:
            return self.center.lat, self.center.lon
        return 0.0, 0.0

    def tag(self, key: str) -> str:
        return self.tags.get(key, "")


class OverpassReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    elements: list[Element] = Field(default_factory=list)


def around_query(selectors: list[str], radius: int, lat: float, lon: float, *, out: str, timeout: int = 15) -> str:
    """Overpass QL union of ``selectors`` within ``radius`` metres of a point.

    Example:
        >>> around_query(['node["amenity"="school"]'], 2000, 52.1, 5.1, out="out center body qt 20")
    """
    around = f"(around:{radius},{lat:.6f},{lon:.6f})"
    body = "\n".join(f"  {selector}{around};" for selector in selectors)
    return f"[out:json][timeout:{timeout}];\n(\n{body}\n);\n{out};"


def mirrors(primary: str, fallbacks: list[str]) -> list[str]:
    ordered = [primary, *fallbacks]
    return [url for i, url in enumerate(ordered) if url and url not in ordered[:i]]


async def query_overpass(ctx: ProviderContext, source: str, primary_url: str, query: str) -> OverpassReply:
    """Run ``query`` against the primary endpoint, then each fallback mirror.

    Raises:
        ProviderError: the last mirror's failure when every mirror failed.
    """
    last_error: ProviderError | None = None
    for url in mirrors(primary_url, ctx.settings.overpass_fallback_urls):
        ctx.deadline.check(source)
        try:
            return await ctx.http.post_form(
                ctx.deadline,
                source,
                url,
                {"data": query},
                OverpassReply,
                headers={"User-Agent": USER_AGENT},
            )
        except ProviderError as e:
            log.debug("overpass_mirror_failed", source=source, mirror=url, error_kind=e.kind.value, error=e.message)
            last_error = e

    if last_error is None:
        raise ProviderError(ErrorKind.CONFIG_MISSING, source, "no Overpass endpoint configured")
    raise last_error


__all__ = ["Element", "OverpassReply", "around_query", "mirrors", "query_overpass"]

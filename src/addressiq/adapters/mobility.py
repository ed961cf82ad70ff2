"""Mobility adapters: road traffic (NDW), public transport stops (Overpass), parking."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from addressiq.adapters.base import ProviderContext, Target, join_url, point_params
from addressiq.adapters.overpass import Element, around_query, query_overpass
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.geo import haversine
from addressiq.models.sources import LatLon, ParkingData, PublicTransport, TrafficPoint, TransitStop

TRAFFIC_RADIUS_M = 1000
TRANSIT_RADIUS_M = 1000
PARKING_RADIUS_M = 500
MAX_STOPS = 10

TRANSIT_SELECTORS = [
    'node["highway"="bus_stop"]',
    'node["railway"="tram_stop"]',
    'node["railway"="station"]',
    'node["railway"="halt"]',
    'node["public_transport"="stop_position"]',
    'node["public_transport"="platform"]',
    'node["amenity"="bus_station"]',
]


class _TrafficReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[TrafficPoint] = Field(default_factory=list)


def stop_type(element: Element) -> str:
    railway = element.tag("railway")
    if railway in ("station", "halt"):
        return "Train"
    if railway == "tram_stop":
        return "Tram"
    return "Bus"


async def fetch_traffic(ctx: ProviderContext, target: Target) -> list[TrafficPoint]:
    reply = await ctx.http.get_json(
        ctx.deadline,
        "trafficData",
        join_url(ctx.settings.ndw_traffic_api_url, "traffic"),
        _TrafficReply,
        params={**point_params(target), "radius": str(TRAFFIC_RADIUS_M)},
    )
    if not reply.data:
        raise ProviderError(ErrorKind.NOT_FOUND, "trafficData", "no traffic measurement points near location")
    return reply.data


async def fetch_public_transport(ctx: ProviderContext, target: Target) -> PublicTransport:
    """Nearest public transport stops from OpenStreetMap, closest first.

    Line and connection data need a real-time feed and are left empty.
    """
    query = around_query(TRANSIT_SELECTORS, TRANSIT_RADIUS_M, target.lat, target.lon, out="out body qt 50")
    reply = await query_overpass(ctx, "publicTransport", ctx.settings.openov_api_url, query)

    stops = []
    for element in reply.elements:
        lat, lon = element.position
        kind = stop_type(element)
        stops.append(
            TransitStop(
                stop_id=str(element.id),
                name=element.tag("name") or f"{kind} stop",
                type=kind,
                distance=haversine(target.lat, target.lon, lat, lon),
                lines=[],
                coordinates=LatLon(lat=lat, lon=lon),
            )
        )
    stops.sort(key=lambda stop: stop.distance)
    return PublicTransport(nearest_stops=stops[:MAX_STOPS], connections=[])


async def fetch_parking(ctx: ProviderContext, target: Target) -> ParkingData:
    return await ctx.http.get_json(
        ctx.deadline,
        "parkingData",
        join_url(ctx.settings.parking_api_url, "parking"),
        ParkingData,
        params={**point_params(target), "radius": str(PARKING_RADIUS_M)},
    )


__all__ = ["fetch_parking", "fetch_public_transport", "fetch_traffic", "stop_type"]

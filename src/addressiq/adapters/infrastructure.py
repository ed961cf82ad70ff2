"""Infrastructure adapters: green space, schools, building permits, facilities, elevation.

Green space comes from the BGT vegetated-terrain layer (plus Natura2000
reserves); schools and facilities from OpenStreetMap via Overpass; elevation
from Open-Elevation. The slow public endpoints are retried with exponential
backoff inside the request deadline.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from addressiq.adapters.base import ProviderContext, Target, join_url, point_params
from addressiq.adapters.ogc import Feature, features_near
from addressiq.adapters.overpass import Element, OverpassReply, around_query, query_overpass
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.geo import METRES_PER_DEGREE, haversine, ring_area_m2, ring_centroid
from addressiq.core.logging import get_logger
from addressiq.models.sources import (
    BuildingPermits,
    Education,
    Elevation,
    Facilities,
    Facility,
    GreenSpace,
    GreenSpaces,
    School,
)
from addressiq.transport.retry import with_retry

log = get_logger(__name__)

RETRY_ATTEMPTS = 3

GREEN_RADIUS_M = 1000
DEFAULT_GREEN_AREA_M2 = 500.0
SCHOOL_RADIUS_M = 2000
DEFAULT_SCHOOL_QUALITY = 7.0
PERMIT_RADIUS_M = 1000
FACILITY_RADIUS_M = 1500
MAX_FACILITIES = 20
WALK_M_PER_MIN = 80
DRIVE_M_PER_MIN = 500

BGT_GREEN_TYPES = {
    "groenvoorziening": "Garden",
    "bos": "Forest",
    "loofbos": "Forest",
    "naaldbos": "Forest",
    "gemengd bos": "Forest",
    "grasland agrarisch": "Grassland",
    "grasland overig": "Grassland",
    "heide": "Heath",
    "moeras": "Wetland",
    "fruitteelt": "Orchard",
}
PARK_TYPES = ("Park", "Garden")

FACILITY_SELECTORS = [
    'node["shop"="supermarket"]',
    'node["amenity"="pharmacy"]',
    'node["amenity"="doctors"]',
    'node["amenity"="hospital"]',
    'node["amenity"="restaurant"]',
    'node["amenity"="cafe"]',
    'node["leisure"="fitness_centre"]',
    'node["amenity"="bank"]',
    'node["amenity"="post_office"]',
]

SECONDARY_NAME_HINTS = ("vmbo", "havo", "vwo", "college", "lyceum", "secondary")


# ── Green spaces ─────────────────────────────────────────────────────────


def green_type(bgt_type: str) -> str:
    return BGT_GREEN_TYPES.get(bgt_type, "Green Area")


def _outer_ring(geometry: dict[str, Any] | None) -> list[list[float]]:
    if not geometry:
        return []
    coords = geometry.get("coordinates") or []
    if geometry.get("type") == "MultiPolygon":
        coords = coords[0] if coords else []
    return coords[0] if coords else []


def _green_space(feature: Feature, target: Target, radius: int) -> GreenSpace:
    props = feature.properties
    kind = green_type(str(props.get("fysiek_voorkomen") or ""))
    name = str(props.get("naam") or props.get("openbare_ruimte") or kind)

    ring = _outer_ring(feature.geometry)
    centroid = ring_centroid(ring)
    area = ring_area_m2(ring) or DEFAULT_GREEN_AREA_M2
    if centroid is None:
        return GreenSpace(name=name, type=kind, area=area, distance=radius / 2)

    lon, lat = centroid
    return GreenSpace(
        name=name,
        type=kind,
        area=area,
        distance=haversine(target.lat, target.lon, lat, lon),
        lat=lat,
        lon=lon,
    )


async def _nature_reserves(ctx: ProviderContext, target: Target, radius: int) -> list[GreenSpace]:
    """Natura2000 areas in a wider box. Supplementary: a failure here leaves the BGT result intact."""
    try:
        features = await features_near(
            ctx,
            "greenSpaces",
            ctx.settings.natura2000_api_url,
            "natura2000",
            target.lat,
            target.lon,
            delta=radius / METRES_PER_DEGREE * 5,
            limit=5,
        )
    except ProviderError as e:
        log.debug("natura2000_lookup_failed", error_kind=e.kind.value, error=e.message)
        return []
    return [
        GreenSpace(
            name=str(f.properties.get("naam") or ""),
            type="Nature Reserve",
            area=float(f.properties.get("oppervlakte") or 0.0),
            distance=radius * 3,
        )
        for f in features
    ]


async def fetch_green_spaces(ctx: ProviderContext, target: Target) -> GreenSpaces:
    radius = GREEN_RADIUS_M
    features = await with_retry(
        RETRY_ATTEMPTS,
        ctx.settings.retry_initial_delay_seconds,
        lambda: features_near(
            ctx,
            "greenSpaces",
            ctx.settings.green_spaces_api_url,
            "begroeidterreindeel",
            target.lat,
            target.lon,
            delta=radius / METRES_PER_DEGREE,
            limit=50,
        ),
        ctx.deadline,
        source="greenSpaces",
    )

    spaces = [_green_space(f, target, radius) for f in features]
    total_area = sum(space.area for space in spaces)
    green_pct = min(100.0, total_area / (math.pi * radius * radius) * 100)

    parks = [space for space in spaces if space.type in PARK_TYPES]
    nearest = min(parks, key=lambda space: space.distance, default=None)

    if ctx.settings.natura2000_api_url:
        reserves = await _nature_reserves(ctx, target, radius)
        spaces.extend(reserves)
        if nearest is None and reserves:
            nearest = reserves[0]

    return GreenSpaces(
        total_green_area=total_area,
        green_percentage=green_pct,
        nearest_park=nearest.name if nearest else "",
        park_distance=nearest.distance if nearest else 0.0,
        tree_canopy_cover=green_pct * 0.3,
        green_spaces=spaces,
    )


# ── Education ────────────────────────────────────────────────────────────


def school_type(isced_level: str, name: str) -> str:
    """School type from the ISCED level tag, else guessed from the name."""
    if isced_level == "0":
        return "Pre-Primary"
    if isced_level == "1":
        return "Primary"
    if isced_level in ("2", "3"):
        return "Secondary"

    lowered = name.lower()
    if "basisschool" in lowered or "primary" in lowered:
        return "Primary"
    if any(hint in lowered for hint in SECONDARY_NAME_HINTS):
        return "Secondary"
    return "Primary"


def _school(element: Element, target: Target) -> School:
    lat, lon = element.position
    street = element.tag("addr:street")
    address = f"{street} {element.tag('addr:housenumber')}, {element.tag('addr:city')}" if street else ""
    return School(
        name=element.tag("name"),
        type=school_type(element.tag("isced:level"), element.tag("name")),
        distance=haversine(target.lat, target.lon, lat, lon),
        quality_score=DEFAULT_SCHOOL_QUALITY,
        denomination=element.tag("religion") or "Public",
        address=address,
        lat=lat,
        lon=lon,
    )


async def _overpass_with_retry(ctx: ProviderContext, source: str, url: str, query: str) -> OverpassReply:
    return await with_retry(
        RETRY_ATTEMPTS,
        ctx.settings.retry_initial_delay_seconds,
        lambda: query_overpass(ctx, source, url, query),
        ctx.deadline,
        source=source,
    )


async def fetch_education(ctx: ProviderContext, target: Target) -> Education:
    query = around_query(
        ['node["amenity"="school"]', 'way["amenity"="school"]'],
        SCHOOL_RADIUS_M,
        target.lat,
        target.lon,
        out="out center body qt 20",
        timeout=10,
    )
    reply = await _overpass_with_retry(ctx, "education", ctx.settings.education_api_url, query)

    schools = [_school(element, target) for element in reply.elements]
    primary = [s for s in schools if s.type == "Primary"]
    secondary = [s for s in schools if s.type == "Secondary"]
    average = sum(s.quality_score for s in schools) / len(schools) if schools else DEFAULT_SCHOOL_QUALITY

    return Education(
        nearest_primary_school=min(primary, key=lambda s: s.distance, default=None),
        nearest_secondary_school=min(secondary, key=lambda s: s.distance, default=None),
        all_schools=schools,
        average_quality=average,
    )


# ── Building permits ─────────────────────────────────────────────────────


async def fetch_building_permits(ctx: ProviderContext, target: Target) -> BuildingPermits:
    url = join_url(ctx.settings.building_permits_api_url, "permits")
    params = {**point_params(target), "radius": str(PERMIT_RADIUS_M), "years": "2"}
    return await with_retry(
        RETRY_ATTEMPTS,
        ctx.settings.retry_initial_delay_seconds,
        lambda: ctx.http.get_json(ctx.deadline, "buildingPermits", url, BuildingPermits, params=params),
        ctx.deadline,
        source="buildingPermits",
    )


# ── Facilities ───────────────────────────────────────────────────────────


def categorise_facility(element: Element) -> tuple[str, str]:
    """``(category, type)`` for an OSM amenity, shop or leisure node."""
    amenity = element.tag("amenity")
    healthcare = element.tag("healthcare")
    if element.tag("shop") == "supermarket":
        return "Retail", "Supermarket"
    if amenity == "pharmacy" or healthcare == "pharmacy":
        return "Healthcare", "Pharmacy"
    if amenity == "doctors" or healthcare == "doctor":
        return "Healthcare", "Doctor"
    if amenity == "hospital":
        return "Healthcare", "Hospital"
    if amenity == "restaurant":
        return "Dining", "Restaurant"
    if amenity == "cafe":
        return "Dining", "Cafe"
    if element.tag("leisure") == "fitness_centre":
        return "Leisure", "Gym"
    if amenity == "bank":
        return "Services", "Bank"
    if amenity == "post_office":
        return "Services", "Post Office"
    return "Other", amenity


def amenities_score(category_counts: dict[str, int], facilities: list[Facility]) -> float:
    """0-100: category variety (40) + count (30) + proximity (30)."""
    score = min(40.0, len(category_counts) * 8.0)
    score += min(30.0, len(facilities) * 2.0)
    if facilities:
        avg_distance = sum(f.distance for f in facilities) / len(facilities)
        score += max(0.0, 30 * (1 - avg_distance / FACILITY_RADIUS_M))
    return score


async def fetch_facilities(ctx: ProviderContext, target: Target) -> Facilities:
    query = around_query(FACILITY_SELECTORS, FACILITY_RADIUS_M, target.lat, target.lon, out="out body qt 50")
    reply = await _overpass_with_retry(ctx, "facilities", ctx.settings.facilities_api_url, query)

    facilities: list[Facility] = []
    counts: dict[str, int] = {}
    for element in reply.elements:
        lat, lon = element.position
        category, kind = categorise_facility(element)
        distance = haversine(target.lat, target.lon, lat, lon)
        facilities.append(
            Facility(
                name=element.tag("name") or kind,
                category=category,
                type=kind,
                distance=distance,
                walk_time=int(distance / WALK_M_PER_MIN),
                drive_time=int(distance / DRIVE_M_PER_MIN),
                rating=4.0,
                lat=lat,
                lon=lon,
            )
        )
        counts[category] = counts.get(category, 0) + 1

    facilities.sort(key=lambda f: f.distance)
    top = facilities[:MAX_FACILITIES]
    return Facilities(top_facilities=top, amenities_score=amenities_score(counts, top), category_counts=counts)


# ── Elevation ────────────────────────────────────────────────────────────


class _ElevationResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    latitude: float = 0.0
    longitude: float = 0.0
    elevation: float = 0.0


class _ElevationReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[_ElevationResult] = Field(default_factory=list)


def elevation_flood_risk(elevation: float) -> str:
    """Flood exposure by height relative to NAP."""
    if elevation < -2.0:
        return "High"
    if elevation < 1.0:
        return "Medium"
    return "Low"


def view_potential(elevation: float) -> str:
    if elevation > 5.0:
        return "Excellent"
    if elevation > 2.0:
        return "Good"
    if elevation < -1.0:
        return "Poor"
    return "Fair"


async def fetch_elevation(ctx: ProviderContext, target: Target) -> Elevation:
    reply = await ctx.http.get_json(
        ctx.deadline,
        "elevation",
        ctx.settings.ahn_height_model_api_url,
        _ElevationReply,
        params={"locations": f"{target.lat:.6f},{target.lon:.6f}"},
    )
    if not reply.results:
        raise ProviderError(ErrorKind.NOT_FOUND, "elevation", "no elevation for location")

    height = reply.results[0].elevation
    return Elevation(
        elevation=height,
        terrain_slope=0.5,
        flood_risk=elevation_flood_risk(height),
        view_potential=view_potential(height),
        surrounding_heights=[height - 0.5, height + 0.5, height, height - 0.3],
    )


__all__ = [
    "amenities_score",
    "categorise_facility",
    "elevation_flood_risk",
    "fetch_building_permits",
    "fetch_education",
    "fetch_elevation",
    "fetch_facilities",
    "fetch_green_spaces",
    "green_type",
    "school_type",
    "view_potential",
]

"""Small geographic helpers. WGS84 degrees in, metres out."""

from __future__ import annotations

import math

EARTH_RADIUS_M = 6_371_000.0
METRES_PER_DEGREE = 111_000.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bbox(lat: float, lon: float, delta: float) -> str:
    """OGC API ``bbox`` parameter (``minLon,minLat,maxLon,maxLat``) around a point."""
    return f"{lon - delta:.6f},{lat - delta:.6f},{lon + delta:.6f},{lat + delta:.6f}"


def ring_centroid(ring: list[list[float]]) -> tuple[float, float] | None:
    """Mean vertex of a GeoJSON linear ring, as ``(lon, lat)``."""
    points = [p for p in ring if len(p) >= 2]
    if not points:
        return None
    return (
        sum(p[0] for p in points) / len(points),
        sum(p[1] for p in points) / len(points),
    )


def ring_area_m2(ring: list[list[float]]) -> float:
    """Approximate area of a small lon/lat ring in square metres (shoelace formula)."""
    points = [p for p in ring if len(p) >= 2]
    if len(points) < 3:
        return 0.0
    twice_area = 0.0
    for i, p in enumerate(points):
        q = points[(i + 1) % len(points)]
        twice_area += p[0] * q[1] - q[0] * p[1]
    return abs(twice_area / 2) * METRES_PER_DEGREE * METRES_PER_DEGREE


__all__ = ["EARTH_RADIUS_M", "METRES_PER_DEGREE", "bbox", "haversine", "ring_area_m2", "ring_centroid"]

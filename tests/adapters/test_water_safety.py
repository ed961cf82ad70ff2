"""Tests for the flood, water quality, safety and Schiphol adapters."""

import pytest

from addressiq.adapters.water_safety import (
    classify_flood_zone,
    fetch_flood_risk,
    fetch_safety,
    fetch_schiphol,
    fetch_water_quality,
    safety_perception,
)
from addressiq.core.errors import ErrorKind, ProviderError

FLOOD = "https://flood.test/ogc/v1"
DELTA = "https://delta.test/api"
SAFETY = "https://safety.test/api"
SCHIPHOL = "https://schiphol.test/public-flights"


class TestClassifyFloodZone:
    @pytest.mark.parametrize(
        ("qualitative", "description", "expected"),
        [
            ("High probability", "", ("High", 1.0)),
            ("Significant flood risk", "", ("High", 1.0)),
            ("Potential significant flood risk", "", ("Medium", 0.1)),
            ("Low probability", "", ("Low", 0.01)),
            ("minor", "", ("Low", 0.01)),
            ("", "", ("Medium", 0.1)),
            ("High probability", "Dijkring 14, beschermd gebied", ("Medium", 0.1)),
        ],
    )
    def test_zones(self, qualitative, description, expected):
        assert classify_flood_zone(qualitative, description) == expected


class TestSafetyPerception:
    @pytest.mark.parametrize(
        ("score", "label"),
        [(95, "Very Safe"), (80, "Very Safe"), (79.9, "Safe"), (60, "Safe"), (40, "Moderate"), (39, "Unsafe")],
    )
    def test_bands(self, score, label):
        assert safety_perception(score) == label


class TestFetchFloodRisk:
    @pytest.mark.asyncio
    async def test_outside_every_zone_is_protected(self, upstream, provider_ctx, target):
        upstream.add(f"{FLOOD}/collections/risk_zone/items", json={"features": []})
        flood = await fetch_flood_risk(provider_ctx(flood_risk_api_url=FLOOD), target)
        assert flood.risk_level == "Low"
        assert flood.flood_probability == 0.01
        assert flood.flood_zone == "Protected"

    @pytest.mark.asyncio
    async def test_first_zone_classified(self, upstream, provider_ctx, target):
        upstream.add(
            f"{FLOOD}/collections/risk_zone/items",
            json={"features": [{"properties": {"qualitative_value": "High probability", "description": "Rivier"}}]},
        )
        flood = await fetch_flood_risk(provider_ctx(flood_risk_api_url=FLOOD), target)
        assert flood.risk_level == "High"
        assert flood.flood_zone == "Rivier"
        assert upstream.calls[0].url.params["limit"] == "5"


class TestSentinels:
    """A 404 from these providers means "nothing to report", not failure."""

    @pytest.mark.asyncio
    async def test_water_quality_no_nearby_water(self, upstream, provider_ctx, target):
        upstream.add(f"{DELTA}/water-quality", status=404, json={})
        water = await fetch_water_quality(provider_ctx(digital_delta_api_url=DELTA), target)
        assert water.water_quality == "N/A"
        assert water.distance == 9999

    @pytest.mark.asyncio
    async def test_water_quality_value(self, upstream, provider_ctx, target):
        upstream.add(f"{DELTA}/water-quality", json={"waterQuality": "Good", "nearestWater": "Vaartsche Rijn"})
        water = await fetch_water_quality(provider_ctx(digital_delta_api_url=DELTA), target)
        assert water.water_quality == "Good"
        assert water.nearest_water == "Vaartsche Rijn"

    @pytest.mark.asyncio
    async def test_safety_neutral_without_data(self, upstream, provider_ctx, target):
        upstream.add(f"{SAFETY}/safety", status=404, json={})
        safety = await fetch_safety(provider_ctx(safety_experience_api_url=SAFETY), target)
        assert safety.safety_score == 70.0
        assert safety.safety_perception == "Moderate"

    @pytest.mark.asyncio
    async def test_safety_perception_derived(self, upstream, provider_ctx, target):
        upstream.add(f"{SAFETY}/safety", json={"safetyScore": 85, "crimeRate": 12.5})
        safety = await fetch_safety(provider_ctx(safety_experience_api_url=SAFETY), target)
        assert safety.safety_perception == "Very Safe"
        assert upstream.calls[0].url.params["neighborhood"] == "BU03440101"

    @pytest.mark.asyncio
    async def test_reported_neutral_score_is_classified(self, upstream, provider_ctx, target):
        upstream.add(f"{SAFETY}/safety", json={"safetyScore": 70, "safetyPerception": "Moderate"})
        safety = await fetch_safety(provider_ctx(safety_experience_api_url=SAFETY), target)
        assert safety.safety_perception == "Safe"

    @pytest.mark.asyncio
    async def test_safety_failure_propagates(self, upstream, provider_ctx, target):
        upstream.add(f"{SAFETY}/safety", status=502, json={})
        with pytest.raises(ProviderError) as info:
            await fetch_safety(provider_ctx(safety_experience_api_url=SAFETY), target)
        assert info.value.kind is ErrorKind.NON_SUCCESS_STATUS

    @pytest.mark.asyncio
    async def test_schiphol_outside_contours(self, upstream, provider_ctx, target):
        upstream.add(f"{SCHIPHOL}/noise-impact", status=404, json={})
        flights = await fetch_schiphol(provider_ctx(schiphol_api_url=SCHIPHOL), target)
        assert flights.noise_contour == "None"
        assert flights.daily_flights == 0


class TestSchipholAuth:
    @pytest.mark.asyncio
    async def test_headers_only_with_key(self, upstream, provider_ctx, target):
        upstream.add(f"{SCHIPHOL}/noise-impact", json={"dailyFlights": 120})
        await fetch_schiphol(provider_ctx(schiphol_api_url=SCHIPHOL), target)
        assert "app_key" not in upstream.calls[0].headers

        await fetch_schiphol(
            provider_ctx(schiphol_api_url=SCHIPHOL, schiphol_app_id="id", schiphol_api_key="secret"),
            target,
        )
        headers = upstream.calls[1].headers
        assert headers["app_key"] == "secret"
        assert headers["app_id"] == "id"
        assert headers["resourceversion"] == "v4"

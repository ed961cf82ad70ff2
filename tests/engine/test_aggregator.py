"""
Tests for the aggregation engine.

Most tests run the engine over a small catalogue of in-test sources so the
fan-out rules can be checked without canned provider payloads; one test
drives the real catalogue end to end over the fake upstream.
"""

from __future__ import annotations

import asyncio

import pytest
from conftest import BAG_URL, REGION_URL, bag_doc, bag_reply, region_reply

from addressiq.adapters.base import Need, SourceSpec
from addressiq.core.cache import InMemoryCache, ResultCache
from addressiq.core.errors import AddressNotFoundError, ErrorKind, ProviderError
from addressiq.engine.aggregator import Aggregator
from addressiq.models.sources import Elevation, FloodRisk, Safety

FORECAST = "https://forecast.test/v1/forecast"
GEMINI = "https://gemini.test/v1beta/models/flash:generateContent"


def spec(name, empty, fetch, *, settings=("bag_api_url",), needs=Need.COORDINATES):
    return SourceSpec(name, name, "free", settings, needs, empty, fetch)


async def flood_ok(ctx, target):
    return FloodRisk(risk_level="Low", flood_zone="Protected")


async def safety_down(ctx, target):
    raise ProviderError(ErrorKind.NON_SUCCESS_STATUS, "safety", status=500)


async def elevation_crash(ctx, target):
    raise RuntimeError("boom")


async def elevation_slow(ctx, target):
    await asyncio.sleep(5)
    return Elevation(elevation=1.0)


@pytest.fixture
def settings(make_settings):
    return make_settings(bag_api_url=BAG_URL, region_api_url=REGION_URL)


@pytest.fixture
def routed(upstream):
    upstream.add(BAG_URL, json=bag_reply(bag_doc()))
    upstream.add(REGION_URL, json=region_reply())
    return upstream


@pytest.fixture
def cache():
    return ResultCache(InMemoryCache())


def assert_partitioned(record):
    assert not set(record.sources) & set(record.errors)


class TestAggregate:
    @pytest.mark.asyncio
    async def test_successes_and_failures(self, routed, http, settings, key):
        sources = [
            spec("floodRisk", FloodRisk, flood_ok),
            spec("safety", Safety, safety_down),
            spec("elevation", Elevation, elevation_crash),
        ]
        record = await Aggregator(http, settings, sources=sources).aggregate(key)

        assert record.sources == ["address", "region", "floodRisk"]
        assert record.errors["safety"] == "API returned status 500"
        assert record.errors["elevation"] == "unexpected error: boom"
        assert record.flood_risk.flood_zone == "Protected"
        assert record.safety == Safety()
        assert record.region.neighbourhood_code == "BU03440101"
        assert record.scores is not None
        assert record.cached is False
        assert_partitioned(record)

    @pytest.mark.asyncio
    async def test_disabled_source_in_neither_list(self, routed, http, settings, key):
        sources = [spec("floodRisk", FloodRisk, flood_ok, settings=("flood_risk_api_url",))]
        record = await Aggregator(http, settings, sources=sources).aggregate(key)

        assert "floodRisk" not in record.sources
        assert "floodRisk" not in record.errors
        assert record.flood_risk == FloodRisk()

    @pytest.mark.asyncio
    async def test_sources_in_declaration_order(self, routed, http, settings, key):
        async def slow_flood(ctx, target):
            await asyncio.sleep(0.05)
            return FloodRisk()

        async def fast_elevation(ctx, target):
            return Elevation()

        sources = [spec("floodRisk", FloodRisk, slow_flood), spec("elevation", Elevation, fast_elevation)]
        record = await Aggregator(http, settings, sources=sources).aggregate(key)
        assert record.sources == ["address", "region", "floodRisk", "elevation"]

    @pytest.mark.asyncio
    async def test_deadline_marks_timeout(self, routed, http, make_settings, key):
        settings = make_settings(bag_api_url=BAG_URL, request_deadline_seconds=0.3)
        sources = [spec("floodRisk", FloodRisk, flood_ok), spec("elevation", Elevation, elevation_slow)]

        record = await Aggregator(http, settings, sources=sources).aggregate(key)

        assert record.errors == {"elevation": "Timeout"}
        assert record.sources == ["address", "floodRisk"]

    @pytest.mark.asyncio
    async def test_region_skipped_without_url(self, routed, http, make_settings, key):
        settings = make_settings(bag_api_url=BAG_URL)
        record = await Aggregator(http, settings, sources=[]).aggregate(key)
        assert record.sources == ["address"]
        assert record.errors == {}
        assert upstream_urls(routed) == [BAG_URL]

    @pytest.mark.asyncio
    async def test_region_failure_is_soft(self, upstream, http, make_settings, key):
        settings = make_settings(bag_api_url=BAG_URL, region_api_url=REGION_URL, retry_initial_delay_seconds=0)
        upstream.add(BAG_URL, json=bag_reply(bag_doc()))
        upstream.add(REGION_URL, status=500, json={})
        sources = [spec("safety", Safety, flood_ok, needs=Need.NEIGHBOURHOOD)]

        record = await Aggregator(http, settings, sources=sources).aggregate(key)

        assert "region" in record.errors
        assert "safety" not in record.sources
        assert "safety" not in record.errors

    @pytest.mark.asyncio
    async def test_address_not_found_is_fatal(self, upstream, http, settings, key, cache):
        upstream.add(BAG_URL, json=bag_reply())
        with pytest.raises(AddressNotFoundError):
            await Aggregator(http, settings, cache=cache, sources=[]).aggregate(key)
        assert await cache.get(key) is None


class TestProgress:
    @pytest.mark.asyncio
    async def test_reported_per_fan_out_source(self, routed, http, settings, key):
        seen = []

        async def record_progress(update):
            seen.append(update.to_dict())

        sources = [
            spec("floodRisk", FloodRisk, flood_ok),
            spec("safety", Safety, safety_down),
            spec("elevation", Elevation, flood_ok, settings=("ahn_height_model_api_url",)),
        ]
        await Aggregator(http, settings, sources=sources).aggregate(key, progress=record_progress)

        assert [p["completed"] for p in seen] == [1, 2, 3]
        assert {p["total"] for p in seen} == {3}
        by_source = {p["source"]: p["status"] for p in seen}
        assert by_source == {"floodRisk": "success", "safety": "error", "elevation": "skipped"}
        assert all(p["lastCompleted"] == p["source"] for p in seen)


class TestCache:
    @pytest.mark.asyncio
    async def test_hit_skips_upstream(self, routed, http, settings, key, cache):
        aggregator = Aggregator(http, settings, cache=cache, sources=[spec("floodRisk", FloodRisk, flood_ok)])
        first = await aggregator.aggregate(key)
        calls = len(routed.calls)

        second = await aggregator.aggregate(key)

        assert second.cached is True
        assert second.sources == first.sources
        assert len(routed.calls) == calls

    @pytest.mark.asyncio
    async def test_bypass_reads_fresh_and_writes(self, routed, http, settings, key, cache):
        aggregator = Aggregator(http, settings, cache=cache, sources=[])
        await aggregator.aggregate(key)
        calls = len(routed.calls)

        fresh = await aggregator.aggregate(key, bypass_cache=True)

        assert fresh.cached is False
        assert len(routed.calls) > calls
        assert (await cache.get(key)).aggregated_at == fresh.aggregated_at


class TestAiSummary:
    @pytest.mark.asyncio
    async def test_summary_appended_last(self, routed, http, make_settings, key):
        routed.add(GEMINI, json={"candidates": [{"content": {"parts": [{"text": "Quiet street."}]}}]})
        settings = make_settings(bag_api_url=BAG_URL, gemini_api_url=GEMINI, gemini_api_key="g")
        record = await Aggregator(http, settings, sources=[spec("floodRisk", FloodRisk, flood_ok)]).aggregate(key)

        assert record.sources[-1] == "aiSummary"
        assert record.ai_summary.summary == "Quiet street."

    @pytest.mark.asyncio
    async def test_failure_recorded(self, routed, http, make_settings, key):
        routed.add(GEMINI, status=500, json={})
        settings = make_settings(bag_api_url=BAG_URL, gemini_api_url=GEMINI, gemini_api_key="g")
        record = await Aggregator(http, settings, sources=[]).aggregate(key)

        assert record.errors["aiSummary"] == "AI service returned status 500"
        assert "aiSummary" not in record.sources
        assert record.ai_summary.generated is False

    @pytest.mark.asyncio
    async def test_disabled_without_key(self, routed, http, settings, key):
        record = await Aggregator(http, settings, sources=[]).aggregate(key)
        assert "aiSummary" not in record.sources
        assert "aiSummary" not in record.errors


class TestFullCatalogue:
    @pytest.mark.asyncio
    async def test_weather_only(self, routed, http, make_settings, key):
        routed.add(
            FORECAST,
            json={
                "current_weather": {"temperature": 9.0, "windspeed": 20.0, "winddirection": 270.0},
                "hourly": {"time": [], "precipitation": []},
            },
        )
        settings = make_settings(bag_api_url=BAG_URL, region_api_url=REGION_URL, knmi_weather_api_url=FORECAST)

        record = await Aggregator(http, settings).aggregate(key)

        assert record.sources == ["address", "region", "weather"]
        assert record.errors == {}
        assert record.weather.temperature == 9.0
        assert record.to_json()["weather"]["windDirection"] == 270


def upstream_urls(upstream):
    return [str(call.url).split("?")[0] for call in upstream.calls]

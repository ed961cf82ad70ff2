"""Integration tests for the legacy search endpoints and the SSE stream."""

import asyncio
import json

import pytest
from conftest import BAG_URL, bag_doc, bag_reply

from addressiq.api.routers.search import bypass_allowed, parse_address_param, sse_event, stream_search
from addressiq.core.errors import InvalidInputError
from addressiq.models.address import AddressKey

FORECAST = "https://forecast.test/v1/forecast"


@pytest.fixture
def found(upstream):
    upstream.add(BAG_URL, json=bag_reply(bag_doc()))
    return upstream


def frames(body):
    """Split an SSE body into (event, data) pairs; comments come back as (":", text)."""
    parsed = []
    for block in body.split("\n\n"):
        if not block:
            continue
        if block.startswith(":"):
            parsed.append((":", block[1:].strip()))
            continue
        event, data = None, None
        for line in block.split("\n"):
            if line.startswith("event: "):
                event = line[len("event: ") :]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: ") :])
        parsed.append((event, data))
    return parsed


class TestParseAddress:
    @pytest.mark.parametrize("raw", ["3541ED 53", "3541ED+53", "  3541ed   53 "])
    def test_valid(self, raw):
        key = parse_address_param(raw)
        assert (key.postcode, key.house_number) == ("3541ED", "53")

    def test_missing(self):
        with pytest.raises(InvalidInputError, match="missing address parameter"):
            parse_address_param("  ")

    def test_one_part(self):
        with pytest.raises(InvalidInputError, match="invalid address format"):
            parse_address_param("3541ED")


class TestBypassAllowed:
    def test_not_requested(self):
        assert not bypass_allowed(False, "", None)

    def test_open_without_secret(self):
        assert bypass_allowed(True, "", None)

    def test_secret_required(self):
        assert not bypass_allowed(True, "s3cret", None)
        assert not bypass_allowed(True, "s3cret", "wrong")
        assert bypass_allowed(True, "s3cret", "s3cret")


class TestSseEvent:
    def test_named(self):
        assert sse_event("start", {"message": "Starting search..."}) == (
            'event: start\ndata: {"message": "Starting search..."}\n\n'
        )

    def test_unnamed_keeps_unicode(self):
        assert sse_event(None, {"city": "Den Haag €"}) == 'data: {"city": "Den Haag €"}\n\n'


class TestLegacySearch:
    def test_get(self, api, found):
        response = api().get("/search", params={"address": "3541ED 53"})

        assert response.status_code == 200
        body = response.json()
        assert body["address"] == "Vleutensevaart 53, 3541ED Utrecht"
        assert body["coordinates"] == [5.0614, 52.0961]
        assert json.loads(body["geojson"])["type"] == "Point"
        assert set(body["apiResults"]) == {"free", "freemium", "premium"}

        first = body["apiResults"]["free"][0]
        assert first["name"] == "BAG Address"
        assert first["status"] == "success"
        assert body["aiSummary"]["generated"] is False

    def test_unconfigured_sources_listed(self, api, found):
        body = api().get("/search", params={"address": "3541ED 53"}).json()
        items = [item for group in body["apiResults"].values() for item in group]
        assert len(items) == 35
        unconfigured = [item for item in items if item["status"] == "not_configured"]
        assert len(unconfigured) == 34
        assert {item["error"] for item in unconfigured} == {"API not configured"}

    def test_configured_source_reported(self, api, found):
        found.add(
            FORECAST,
            json={"current_weather": {"temperature": 9.0, "winddirection": 90.0}, "hourly": {}},
        )
        body = api(knmi_weather_api_url=FORECAST).get("/search", params={"address": "3541ED 53"}).json()
        weather = next(item for item in body["apiResults"]["free"] if item["name"] == "KNMI Weather")
        assert weather["status"] == "success"
        assert weather["data"]["temperature"] == 9.0

    @pytest.mark.parametrize(
        ("address", "detail"),
        [
            (None, "missing address parameter"),
            ("3541ED", "invalid address format, expected: postcode houseNumber"),
        ],
    )
    def test_get_bad_address(self, api, address, detail):
        params = {} if address is None else {"address": address}
        response = api().get("/search", params=params)
        assert response.status_code == 400
        assert response.json()["detail"] == detail

    def test_post_form(self, api, found):
        response = api().post("/search", data={"postcode": "3541 ED", "houseNumber": "53"})
        assert response.status_code == 200
        assert response.json()["address"].startswith("Vleutensevaart 53")

    def test_post_form_missing(self, api):
        response = api().post("/search", data={"postcode": "3541ED"})
        assert response.status_code == 400
        assert response.json()["detail"] == "missing postcode or houseNumber"


class TestStream:
    def test_start_progress_data(self, api, found):
        found.add(FORECAST, json={"current_weather": {"temperature": 9.0}, "hourly": {}})
        client = api(knmi_weather_api_url=FORECAST)

        with client.stream("GET", "/api/search/stream", params={"postcode": "3541ED", "houseNumber": "53"}) as response:
            assert response.headers["content-type"].startswith("text/event-stream")
            assert response.headers["cache-control"] == "no-cache"
            body = response.read().decode()

        events = [frame for frame in frames(body) if frame[0] != ":"]
        assert events[0] == ("start", {"message": "Starting search..."})
        assert events[-1][0] == "data"
        assert events[-1][1]["address"] == "Vleutensevaart 53, 3541ED Utrecht"

        progress = [data for event, data in events if event is None]
        assert len(progress) == 34
        assert progress[-1]["completed"] == progress[-1]["total"] == 34
        weather = next(p for p in progress if p["source"] == "weather")
        assert weather["status"] == "success"
        assert weather["lastCompleted"] == "weather"

    def test_unknown_address(self, api, upstream):
        upstream.add(BAG_URL, json=bag_reply())
        response = api().get("/api/search/stream", params={"postcode": "0000XX", "houseNumber": "1"})
        events = frames(response.text)
        assert events[0][0] == "start"
        assert events[-1] == ("error", {"message": "no address found for 0000XX 1"})

    def test_missing_parameters_single_error(self, api, upstream):
        response = api().get("/api/search/stream", params={"postcode": "3541ED"})
        assert response.status_code == 200
        assert frames(response.text) == [("error", {"message": "Missing postcode or houseNumber"})]
        assert upstream.calls == []

    def test_bypass_denied_with_wrong_secret(self, api, found):
        client = api(admin_secret="s3cret")
        params = {"postcode": "3541ED", "houseNumber": "53"}
        client.get("/api/search/stream", params=params)
        calls = len(found.calls)

        client.get("/api/search/stream", params={**params, "bypassCache": "true"}, headers={"X-Admin-Secret": "no"})
        assert len(found.calls) == calls

        client.get("/api/search/stream", params={**params, "bypassCache": "true"}, headers={"X-Admin-Secret": "s3cret"})
        assert len(found.calls) > calls


class HangingEngine:
    """Aggregation that never finishes until it is cancelled."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = asyncio.Event()

    async def aggregate(self, key, *, bypass_cache=False, progress=None):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled.set()
            raise


class TestStreamDisconnect:
    @pytest.mark.asyncio
    async def test_client_going_away_cancels_aggregation(self):
        engine = HangingEngine()
        stream = stream_search(engine, AddressKey.of("3541ED", "53"), bypass_cache=False)

        assert (await stream.__anext__()).startswith("event: start")
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.wait_for(engine.started.wait(), timeout=1)

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

        await asyncio.wait_for(engine.cancelled.wait(), timeout=1)

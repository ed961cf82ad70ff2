"""
Shared pytest fixtures and configuration for AddressIQ tests.

This module provides:
- Settings with every upstream switched off unless a test turns it on
- A fake upstream that routes ``httpx`` requests by URL prefix and records them
- An :class:`HttpClient` wired to that fake upstream
- Canned provider payloads for the address register and the region lookup

Usage:
    async def test_something(upstream, http, make_settings):
        upstream.add(BAG_URL, json=bag_reply())
        settings = make_settings(bag_api_url=BAG_URL)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from contextlib import ExitStack
from pathlib import Path
from typing import Any

import httpx
import pytest
import structlog
from fastapi.testclient import TestClient

from addressiq.adapters.base import ProviderContext, Target
from addressiq.api.app import create_app
from addressiq.core.settings import Settings
from addressiq.models.address import AddressKey, AddressRecord, Identifiers, RegionCodes
from addressiq.transport.client import HttpClient
from addressiq.transport.deadline import Deadline

BAG_URL = "https://bag.test/search/v3_1/free"
REGION_URL = "https://region.test/ogc/v1"

Responder = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo any ``configure_logging`` call so structlog state never leaks between tests."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Settings
# =============================================================================


def offline_settings(**overrides: Any) -> Settings:
    """Settings with every provider URL blanked, then ``overrides`` applied."""
    values: dict[str, Any] = {name: "" for name in Settings.model_fields if name.endswith("_url")}
    values["overpass_fallback_urls"] = []
    values["log_json"] = False
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    return offline_settings


# =============================================================================
# Fake upstream
# =============================================================================


class FakeUpstream:
    """Routes requests to canned responses by URL prefix and records every call.

    The first matching prefix wins. Unrouted requests get a 404.
    """

    def __init__(self) -> None:
        self.routes: list[tuple[str, Responder]] = []
        self.calls: list[httpx.Request] = []

    def add(
        self,
        prefix: str,
        *,
        json: Any = None,
        status: int = 200,
        text: str | None = None,
        handler: Responder | None = None,
    ) -> FakeUpstream:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                if text is not None:
                    return httpx.Response(status, text=text)
                return httpx.Response(status, json=json)

        self.routes.append((prefix, handler))
        return self

    def calls_to(self, prefix: str) -> list[httpx.Request]:
        return [call for call in self.calls if str(call.url).startswith(prefix)]

    def __call__(self, request: httpx.Request) -> httpx.Response | Awaitable[httpx.Response]:
        self.calls.append(request)
        url = str(request.url)
        for prefix, handler in self.routes:
            if url.startswith(prefix):
                return handler(request)
        return httpx.Response(404, json={"error": "not routed"})


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http(upstream: FakeUpstream) -> HttpClient:
    return HttpClient(httpx.AsyncClient(transport=httpx.MockTransport(upstream)), timeout=5.0)


# =============================================================================
# Canned payloads
# =============================================================================


def bag_doc(**overrides: Any) -> dict[str, Any]:
    doc = {
        "id": "adr-0344200000123456",
        "weergavenaam": "Vleutensevaart 53, 3541ED Utrecht",
        "straatnaam": "Vleutensevaart",
        "huis_nlt": "53",
        "huisnummer": 53,
        "postcode": "3541ED",
        "woonplaatsnaam": "Utrecht",
        "centroide_ll": "POINT(5.0614 52.0961)",
        "nummeraanduiding_id": "0344200000123456",
        "adresseerbaarobject_id": "0344010000123456",
        "pand_id": ["0344100000012345"],
        "gemeentenaam": "Utrecht",
        "gemeentecode": "0344",
        "provincienaam": "Utrecht",
        "provinciecode": "PV26",
    }
    doc.update(overrides)
    return doc


def bag_reply(*docs: dict[str, Any]) -> dict[str, Any]:
    return {"response": {"numFound": len(docs), "docs": list(docs)}}


def region_reply(**overrides: Any) -> dict[str, Any]:
    props = {
        "buurtcode": "BU03440101",
        "buurtnaam": "Oud Zuilen",
        "wijkcode": "WK034401",
        "wijknaam": "Zuilen",
        "gemeentecode": "GM0344",
        "gemeentenaam": "Utrecht",
    }
    props.update(overrides)
    return {"type": "FeatureCollection", "features": [{"id": props["buurtcode"], "properties": props}]}


@pytest.fixture
def key() -> AddressKey:
    return AddressKey.of("3541 ed", "53")


@pytest.fixture
def address() -> AddressRecord:
    return AddressRecord(
        display_name="Vleutensevaart 53, 3541ED Utrecht",
        street="Vleutensevaart",
        house_number="53",
        postcode="3541ED",
        city="Utrecht",
        coordinates=(5.0614, 52.0961),
        identifiers=Identifiers(accommodation_id="0344010000123456", address_id="0344200000123456"),
        municipality="Utrecht",
        municipality_code="0344",
    )


@pytest.fixture
def target(address: AddressRecord) -> Target:
    return Target(
        address=address,
        region=RegionCodes(neighbourhood_code="BU03440101", municipality_code="GM0344"),
    )


@pytest.fixture
def provider_ctx(http: HttpClient, make_settings: Callable[..., Settings]) -> Callable[..., ProviderContext]:
    """Factory for adapter contexts over the fake upstream."""

    def build(**settings: Any) -> ProviderContext:
        return ProviderContext(http=http, settings=make_settings(**settings), deadline=Deadline.after(10.0))

    return build


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def api(http: HttpClient) -> Iterator[Callable[..., TestClient]]:
    """Factory for started test clients over the fake upstream.

    ``api(**settings)`` builds the app with the address service routed to
    :data:`BAG_URL` unless overridden, runs its lifespan and returns the client.
    """
    with ExitStack() as stack:

        def build(**settings: Any) -> TestClient:
            settings.setdefault("bag_api_url", BAG_URL)
            app = create_app(settings=offline_settings(**settings), http=http)
            return stack.enter_context(TestClient(app))

        yield build

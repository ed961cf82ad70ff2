"""Tests for the Kadaster, WOZ, market valuation, transaction and monument adapters."""

import pytest

from addressiq.adapters.property_data import (
    fetch_kadaster,
    fetch_market_valuation,
    fetch_monument,
    fetch_transactions,
    fetch_woz,
)
from addressiq.core.errors import ErrorKind, ProviderError

KADASTER = "https://kadaster.test/api"
WOZ = "https://woz.test/api"
MATRIXIAN = "https://matrixian.test/api"
TRANSACTIONS = "https://transactions.test/api"
MONUMENTS = "https://monuments.test/ogc/v1"
BAG_ID = "0344010000123456"


class TestKadaster:
    @pytest.mark.asyncio
    async def test_reshapes_dutch_reply(self, upstream, provider_ctx, target):
        upstream.add(
            f"{KADASTER}/objecten/{BAG_ID}",
            json={
                "eigenaar": {"naam": "J. Jansen"},
                "kadaster": {"referentie": "UTR01-A-1234"},
                "woz": {"waarde": 412000},
                "energie": {"label": "B"},
                "oppervlakte": {"wonen": 118, "perceel": 240},
                "gebouw": {"type": "Tussenwoning", "bouwjaar": 1932},
            },
        )
        ctx = provider_ctx(kadaster_objectinfo_api_url=KADASTER, kadaster_objectinfo_api_key="k-key")
        info = await fetch_kadaster(ctx, target)

        assert info.owner_name == "J. Jansen"
        assert info.woz_value == 412000
        assert info.energy_label == "B"
        assert info.plot_size == 240
        assert info.build_year == 1932
        assert upstream.calls[0].headers["x-api-key"] == "k-key"

    @pytest.mark.asyncio
    async def test_not_found_names_bag_id(self, upstream, provider_ctx, target):
        upstream.add(KADASTER, status=404, json={})
        ctx = provider_ctx(kadaster_objectinfo_api_url=KADASTER, kadaster_objectinfo_api_key="k")
        with pytest.raises(ProviderError) as info:
            await fetch_kadaster(ctx, target)
        assert info.value.kind is ErrorKind.NOT_FOUND
        assert info.value.message == f"property not found for BAG ID: {BAG_ID}"


class TestWoz:
    @pytest.mark.asyncio
    async def test_bearer_auth(self, upstream, provider_ctx, target):
        upstream.add(f"{WOZ}/woz/{BAG_ID}", json={"wozValue": 398000, "valueYear": 2025})
        woz = await fetch_woz(provider_ctx(altum_woz_api_url=WOZ, altum_woz_api_key="tok"), target)
        assert woz.woz_value == 398000
        assert woz.value_year == 2025
        assert upstream.calls[0].headers["authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_server_error_keeps_status_message(self, upstream, provider_ctx, target):
        upstream.add(WOZ, status=500, json={})
        with pytest.raises(ProviderError, match="API returned status 500"):
            await fetch_woz(provider_ctx(altum_woz_api_url=WOZ, altum_woz_api_key="tok"), target)


class TestMarketValuation:
    @pytest.mark.asyncio
    async def test_query_parameters(self, upstream, provider_ctx, target):
        upstream.add(f"{MATRIXIAN}/property-value-plus", json={"marketValue": 455000, "confidence": 0.82})
        ctx = provider_ctx(matrixian_api_url=MATRIXIAN, matrixian_api_key="mx")
        value = await fetch_market_valuation(ctx, target)

        assert value.market_value == 455000
        request = upstream.calls[0]
        assert request.url.params["bagId"] == BAG_ID
        assert request.headers["x-api-key"] == "mx"


class TestTransactions:
    @pytest.mark.asyncio
    async def test_no_sales_is_empty_history(self, upstream, provider_ctx, target):
        upstream.add(TRANSACTIONS, status=404, json={})
        ctx = provider_ctx(altum_transaction_api_url=TRANSACTIONS, altum_transaction_api_key="t")
        history = await fetch_transactions(ctx, target)
        assert history.transactions == []
        assert history.total_count == 0

    @pytest.mark.asyncio
    async def test_history(self, upstream, provider_ctx, target):
        upstream.add(
            f"{TRANSACTIONS}/transactions/{BAG_ID}",
            json={"transactions": [{"date": "2015-06-01", "purchasePrice": 245000}], "totalCount": 1},
        )
        ctx = provider_ctx(altum_transaction_api_url=TRANSACTIONS, altum_transaction_api_key="t")
        history = await fetch_transactions(ctx, target)
        assert history.transactions[0].purchase_price == 245000


class TestMonument:
    @pytest.mark.asyncio
    async def test_not_a_monument(self, upstream, provider_ctx, target):
        upstream.add(f"{MONUMENTS}/collections/rce_inspire_points/items", json={"features": []})
        status = await fetch_monument(provider_ctx(monumenten_api_url=MONUMENTS), target)
        assert status.is_monument is False

    @pytest.mark.asyncio
    async def test_monument(self, upstream, provider_ctx, target):
        upstream.add(
            f"{MONUMENTS}/collections/rce_inspire_points/items",
            json={"features": [{"properties": {"text": "Woonhuis", "legal_foundation_date": "1967-03-01"}}]},
        )
        status = await fetch_monument(provider_ctx(monumenten_api_url=MONUMENTS), target)
        assert status.is_monument is True
        assert status.type == "Rijksmonument"
        assert status.name == "Woonhuis"
        assert status.date == "1967-03-01"

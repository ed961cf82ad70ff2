"""Tests for the CBS population, StatLine, square statistics and demographics adapters."""

import pytest

from addressiq.adapters.demographics import (
    age_distribution,
    fetch_demographics,
    fetch_population,
    fetch_square_stats,
    fetch_statline,
)
from addressiq.core.errors import ErrorKind, ProviderError

BUURTEN = "https://cbs-buurten.test/ogc/v1"
STATLINE = "https://statline.test"
CBS = "https://odata.cbs.test/ODataApi/odata"

NEIGHBOURHOOD = {
    "buurtcode": "BU03440101",
    "aantal_inwoners": 2000,
    "aantal_huishoudens": 950,
    "gemiddelde_huishoudsgrootte": 2.1,
    "percentage_personen_0_tot_15_jaar": 15,
    "percentage_personen_15_tot_25_jaar": 12,
    "percentage_personen_25_tot_45_jaar": 30,
    "percentage_personen_45_tot_65_jaar": 25,
    "percentage_personen_65_jaar_en_ouder": -99997,
    "gemiddelde_woningwaarde": 389,
    "gemiddeld_gestandaardiseerd_inkomen_van_huishoudens": 412,
    "omgevingsadressendichtheid": 2450,
}


def buurten_reply(props):
    return {"features": [{"properties": props}]}


class TestAgeDistribution:
    def test_counts_and_secret_markers(self):
        ages = age_distribution(2000, NEIGHBOURHOOD)
        assert ages == {"0-14": 300, "15-24": 240, "25-44": 600, "45-64": 500, "65+": 0}

    def test_no_population(self):
        assert set(age_distribution(0, NEIGHBOURHOOD).values()) == {0}


class TestFetchPopulation:
    @pytest.mark.asyncio
    async def test_population(self, upstream, provider_ctx, target):
        upstream.add(f"{BUURTEN}/collections/buurten/items", json=buurten_reply(NEIGHBOURHOOD))
        population = await fetch_population(provider_ctx(cbs_population_api_url=BUURTEN), target)

        assert population.total_population == 2000
        assert population.households == 950
        assert population.average_household_size == 2.1
        assert population.demographics.age25to44 == 600

    @pytest.mark.asyncio
    async def test_no_neighbourhood(self, upstream, provider_ctx, target):
        upstream.add(BUURTEN, json={"features": []})
        with pytest.raises(ProviderError) as info:
            await fetch_population(provider_ctx(cbs_population_api_url=BUURTEN), target)
        assert info.value.kind is ErrorKind.NOT_FOUND


class TestFetchSquareStats:
    @pytest.mark.asyncio
    async def test_income_in_hundreds(self, upstream, provider_ctx, target):
        upstream.add(BUURTEN, json=buurten_reply(NEIGHBOURHOOD))
        stats = await fetch_square_stats(provider_ctx(cbs_square_stats_api_url=BUURTEN), target)
        assert stats.grid_id == "BU03440101"
        assert stats.average_income == 41200
        assert stats.average_woz == 389
        assert stats.housing_density == 2450


class TestFetchStatline:
    @pytest.mark.asyncio
    async def test_key_figures(self, upstream, provider_ctx, target):
        upstream.add(
            f"{STATLINE}/ODataFeed/v4/CBS/84286NED/Observations",
            json={
                "value": [
                    {
                        "RegioS": "GM0344",
                        "BevolkingAanHetBeginVanDePeriode_1": 367984,
                        "GemiddeldInkomenPerInwoner_66": 31.2,
                        "PercentageWerkloosPerLeeftijdsklasse": 4.5,
                        "GemiddeldeWOZWaardeVanWoningen_35": 402,
                        "Woningvoorraad_31": None,
                    }
                ]
            },
        )
        data = await fetch_statline(provider_ctx(cbs_statline_api_url=STATLINE), target)

        assert data.region_code == "GM0344"
        assert data.population == 367984
        assert data.employment_rate == pytest.approx(95.5)
        assert data.average_woz == 402_000
        assert data.housing_stock == 0
        assert upstream.calls[0].url.params["$filter"] == "RegioS eq 'GM0344'"

    @pytest.mark.asyncio
    async def test_no_rows(self, upstream, provider_ctx, target):
        upstream.add(STATLINE, json={"value": []})
        with pytest.raises(ProviderError, match="GM0344"):
            await fetch_statline(provider_ctx(cbs_statline_api_url=STATLINE), target)


class TestFetchDemographics:
    @pytest.mark.asyncio
    async def test_thousands_scaled(self, upstream, provider_ctx, target):
        upstream.add(
            f"{CBS}/84286NED/WijkenEnBuurten",
            json={
                "value": [
                    {
                        "GemiddeldInkomenPerInkomensontvanger_68": 38.4,
                        "Bevolkingsdichtheid_33": 6120,
                        "GemiddeldeWOZWaardeVanWoningen_35": 356,
                    }
                ]
            },
        )
        demographics = await fetch_demographics(provider_ctx(cbs_api_url=CBS), target)

        assert demographics.avg_income == pytest.approx(38_400)
        assert demographics.population_density == 6120
        assert demographics.avg_woz_value == 356_000
        assert upstream.calls[0].url.params["$filter"] == "WijkenEnBuurten eq 'BU03440101'"

    @pytest.mark.asyncio
    async def test_unknown_neighbourhood(self, upstream, provider_ctx, target):
        upstream.add(CBS, json={"value": []})
        with pytest.raises(ProviderError) as info:
            await fetch_demographics(provider_ctx(cbs_api_url=CBS), target)
        assert info.value.message == "no CBS data found for neighbourhood BU03440101"

    @pytest.mark.asyncio
    async def test_unexpected_row_shape(self, upstream, provider_ctx, target):
        upstream.add(CBS, json={"value": [{"Bevolkingsdichtheid_33": "dense"}]})
        with pytest.raises(ProviderError) as info:
            await fetch_demographics(provider_ctx(cbs_api_url=CBS), target)
        assert info.value.kind is ErrorKind.DECODE

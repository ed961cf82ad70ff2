"""Demographic adapters over CBS data.

Population and square statistics read the CBS neighbourhood layer published
through PDOK (OGC API Features); StatLine and the WijkenEnBuurten table are
CBS OData feeds. CBS marks secret or unknown figures with negative numbers;
those are read as absent.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from addressiq.adapters.base import ProviderContext, Target, join_url
from addressiq.adapters.ogc import features_near, number
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.models.sources import AgeBreakdown, Demographics, Population, SquareStats, StatLineData

NEIGHBOURHOOD_BBOX_DELTA = 0.001
KEY_FIGURES_TABLE = "84286NED"
STATLINE_YEAR = 2024

AGE_BANDS = (
    ("0-14", "percentage_personen_0_tot_15_jaar"),
    ("15-24", "percentage_personen_15_tot_25_jaar"),
    ("25-44", "percentage_personen_25_tot_45_jaar"),
    ("45-64", "percentage_personen_45_tot_65_jaar"),
    ("65+", "percentage_personen_65_jaar_en_ouder"),
)


class _Observation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    RegioS: str = ""
    Perioden: str = ""
    BevolkingAanHetBeginVanDePeriode_1: int = 0
    GemiddeldInkomenPerInwoner_66: float = 0.0
    PercentageWerkloosPerLeeftijdsklasse: float = 0.0
    GemiddeldeWOZWaardeVanWoningen_35: float = 0.0
    Woningvoorraad_31: int = 0


class _KeyFigures(BaseModel):
    model_config = ConfigDict(extra="ignore")

    GemiddeldInkomenPerInkomensontvanger_68: float = 0.0
    Bevolkingsdichtheid_33: float = 0.0
    GemiddeldeWOZWaardeVanWoningen_35: float = 0.0


_Row = TypeVar("_Row", bound=BaseModel)


class _ODataReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: list[dict[str, Any]] = Field(default_factory=list)


def _first_row(model: type[_Row], reply: _ODataReply, source: str) -> _Row:
    """Validate the first OData row; CBS nulls fall back to the field defaults."""
    present = {key: value for key, value in reply.value[0].items() if value is not None}
    try:
        return model.model_validate(present)
    except ValidationError as e:
        raise ProviderError(ErrorKind.DECODE, source, "unexpected CBS row shape", cause=e) from e


async def _neighbourhood(ctx: ProviderContext, source: str, base_url: str, target: Target) -> dict[str, Any]:
    features = await features_near(
        ctx,
        source,
        base_url,
        "buurten",
        target.lat,
        target.lon,
        delta=NEIGHBOURHOOD_BBOX_DELTA,
        limit=1,
    )
    if not features:
        raise ProviderError(ErrorKind.NOT_FOUND, source, "no neighbourhood statistics for location")
    return features[0].properties


def age_distribution(population: int, props: dict[str, Any]) -> dict[str, int]:
    """Head counts per age band from the CBS percentage columns."""
    counts = {}
    for band, key in AGE_BANDS:
        pct = number(props, key)
        counts[band] = int(population * pct // 100) if population > 0 and pct is not None else 0
    return counts


async def fetch_population(ctx: ProviderContext, target: Target) -> Population:
    props = await _neighbourhood(ctx, "population", ctx.settings.cbs_population_api_url, target)

    population = int(number(props, "aantal_inwoners") or 0)
    ages = age_distribution(population, props)
    return Population(
        total_population=population,
        age_distribution=ages,
        households=int(number(props, "aantal_huishoudens") or 0),
        average_household_size=float(number(props, "gemiddelde_huishoudsgrootte") or 0.0),
        demographics=AgeBreakdown(
            age0to14=ages["0-14"],
            age15to24=ages["15-24"],
            age25to44=ages["25-44"],
            age45to64=ages["45-64"],
            age65plus=ages["65+"],
        ),
    )


async def fetch_square_stats(ctx: ProviderContext, target: Target) -> SquareStats:
    props = await _neighbourhood(ctx, "squareStats", ctx.settings.cbs_square_stats_api_url, target)

    # household income is published in hundreds of euros
    income = number(props, "gemiddeld_gestandaardiseerd_inkomen_van_huishoudens")
    return SquareStats(
        grid_id=str(props.get("buurtcode") or ""),
        population=int(number(props, "aantal_inwoners") or 0),
        households=int(number(props, "aantal_huishoudens") or 0),
        average_woz=float(number(props, "gemiddelde_woningwaarde") or 0.0),
        average_income=income * 100 if income is not None else 0.0,
        housing_density=float(number(props, "omgevingsadressendichtheid") or 0.0),
    )


async def fetch_statline(ctx: ProviderContext, target: Target) -> StatLineData:
    """Latest municipal key figures from CBS StatLine."""
    code = target.municipality_code
    url = join_url(ctx.settings.cbs_statline_api_url, f"ODataFeed/v4/CBS/{KEY_FIGURES_TABLE}/Observations")
    reply = await ctx.http.get_json(
        ctx.deadline,
        "statLineData",
        url,
        _ODataReply,
        params={"$filter": f"RegioS eq '{code}'", "$orderby": "Perioden desc", "$top": "1"},
    )
    if not reply.value:
        raise ProviderError(ErrorKind.NOT_FOUND, "statLineData", f"no StatLine figures for region {code}")

    row = _first_row(_Observation, reply, "statLineData")
    return StatLineData(
        region_code=row.RegioS or code,
        region_name=code,
        population=row.BevolkingAanHetBeginVanDePeriode_1,
        average_income=row.GemiddeldInkomenPerInwoner_66,
        employment_rate=100.0 - row.PercentageWerkloosPerLeeftijdsklasse,
        housing_stock=row.Woningvoorraad_31,
        average_woz=row.GemiddeldeWOZWaardeVanWoningen_35 * 1000,
        year=STATLINE_YEAR,
    )


async def fetch_demographics(ctx: ProviderContext, target: Target) -> Demographics:
    """Income, density and WOZ for the neighbourhood. CBS publishes money in thousands of euros."""
    code = target.neighbourhood_code
    url = join_url(ctx.settings.cbs_api_url, f"{KEY_FIGURES_TABLE}/WijkenEnBuurten")
    reply = await ctx.http.get_json(
        ctx.deadline,
        "demographics",
        url,
        _ODataReply,
        params={"$filter": f"WijkenEnBuurten eq '{code}'"},
    )
    if not reply.value:
        raise ProviderError(ErrorKind.NOT_FOUND, "demographics", f"no CBS data found for neighbourhood {code}")

    row = _first_row(_KeyFigures, reply, "demographics")
    return Demographics(
        avg_income=row.GemiddeldInkomenPerInkomensontvanger_68 * 1000,
        population_density=row.Bevolkingsdichtheid_33,
        avg_woz_value=row.GemiddeldeWOZWaardeVanWoningen_35 * 1000,
    )


__all__ = [
    "age_distribution",
    "fetch_demographics",
    "fetch_population",
    "fetch_square_stats",
    "fetch_statline",
]

"""The source catalogue.

Declaration order here is the order of the composite record's ``sources``
list. ``address`` and ``region`` are resolved before the fan-out and
``aiSummary`` after it; everything in :data:`FAN_OUT` runs concurrently.
"""

from __future__ import annotations

from addressiq.adapters import (
    demographics,
    energy,
    environment,
    infrastructure,
    mobility,
    platform,
    property_data,
    soil,
    water_safety,
    weather,
)
from addressiq.adapters.base import Need, SourceSpec
from addressiq.core.settings import Settings
from addressiq.models import sources as m


def _weather_configured(settings: Settings) -> bool:
    return settings.uses_weerlive or bool(settings.knmi_weather_api_url)


FAN_OUT: tuple[SourceSpec, ...] = (
    # ── Property & land ─────────────────────────────────────────────────
    SourceSpec(
        "kadasterInfo",
        "Kadaster Object Info",
        "freemium",
        ("kadaster_objectinfo_api_url", "kadaster_objectinfo_api_key"),
        Need.BAG_ID,
        m.KadasterInfo,
        property_data.fetch_kadaster,
    ),
    SourceSpec(
        "wozData",
        "Altum WOZ",
        "freemium",
        ("altum_woz_api_url", "altum_woz_api_key"),
        Need.BAG_ID,
        m.WozData,
        property_data.fetch_woz,
    ),
    SourceSpec(
        "marketValuation",
        "Matrixian Property Value+",
        "freemium",
        ("matrixian_api_url", "matrixian_api_key"),
        Need.BAG_ID,
        m.MarketValuation,
        property_data.fetch_market_valuation,
    ),
    SourceSpec(
        "transactionHistory",
        "Altum Transactions",
        "freemium",
        ("altum_transaction_api_url", "altum_transaction_api_key"),
        Need.BAG_ID,
        m.TransactionHistory,
        property_data.fetch_transactions,
    ),
    SourceSpec(
        "monumentStatus",
        "Monument Status",
        "free",
        ("monumenten_api_url",),
        Need.COORDINATES,
        m.MonumentStatus,
        property_data.fetch_monument,
    ),
    # ── Weather & climate ───────────────────────────────────────────────
    SourceSpec(
        "weather",
        "KNMI Weather",
        "free",
        ("knmi_weather_api_url",),
        Need.COORDINATES,
        m.WeatherData,
        weather.fetch_weather,
        configured=_weather_configured,
    ),
    SourceSpec(
        "solarPotential",
        "KNMI Solar",
        "free",
        ("knmi_solar_api_url",),
        Need.COORDINATES,
        m.SolarPotential,
        weather.fetch_solar,
    ),
    # ── Soil ────────────────────────────────────────────────────────────
    SourceSpec(
        "soilData",
        "WUR Soil Physicals",
        "freemium",
        ("wur_soil_api_url",),
        Need.COORDINATES,
        m.SoilData,
        soil.fetch_soil,
    ),
    SourceSpec(
        "subsidence",
        "SkyGeo Subsidence",
        "freemium",
        ("skygeo_subsidence_api_url",),
        Need.COORDINATES,
        m.Subsidence,
        soil.fetch_subsidence,
    ),
    SourceSpec(
        "soilQuality",
        "Soil Quality",
        "freemium",
        ("soil_quality_api_url",),
        Need.COORDINATES,
        m.SoilQuality,
        soil.fetch_soil_quality,
    ),
    SourceSpec(
        "broSoilMap",
        "BRO Soil Map",
        "free",
        ("bro_soil_map_api_url",),
        Need.COORDINATES,
        m.BroSoilMap,
        soil.fetch_bro_soil_map,
    ),
    # ── Environmental quality ───────────────────────────────────────────
    SourceSpec(
        "airQuality",
        "Luchtmeetnet Air Quality",
        "free",
        ("luchtmeetnet_api_url",),
        Need.COORDINATES,
        m.AirQuality,
        environment.fetch_air_quality,
    ),
    SourceSpec(
        "noisePollution",
        "Noise Pollution",
        "freemium",
        ("noise_pollution_api_url",),
        Need.COORDINATES,
        m.NoisePollution,
        environment.fetch_noise,
    ),
    # ── Energy & sustainability ─────────────────────────────────────────
    SourceSpec(
        "energyClimate",
        "Altum Energy & Climate",
        "freemium",
        ("altum_energy_api_url", "altum_energy_api_key"),
        Need.BAG_ID,
        m.EnergyClimate,
        energy.fetch_energy,
    ),
    SourceSpec(
        "sustainability",
        "Altum Sustainability",
        "freemium",
        ("altum_sustainability_api_url", "altum_sustainability_api_key"),
        Need.BAG_ID,
        m.Sustainability,
        energy.fetch_sustainability,
    ),
    # ── Water & safety ──────────────────────────────────────────────────
    SourceSpec(
        "floodRisk",
        "Flood Risk",
        "free",
        ("flood_risk_api_url",),
        Need.COORDINATES,
        m.FloodRisk,
        water_safety.fetch_flood_risk,
    ),
    SourceSpec(
        "waterQuality",
        "Digital Delta Water Quality",
        "freemium",
        ("digital_delta_api_url",),
        Need.COORDINATES,
        m.WaterQuality,
        water_safety.fetch_water_quality,
    ),
    SourceSpec(
        "safety",
        "CBS Safety Experience",
        "freemium",
        ("safety_experience_api_url",),
        Need.NEIGHBOURHOOD,
        m.Safety,
        water_safety.fetch_safety,
    ),
    SourceSpec(
        "schipholFlights",
        "Schiphol Flight Noise",
        "freemium",
        ("schiphol_api_url",),
        Need.COORDINATES,
        m.SchipholFlights,
        water_safety.fetch_schiphol,
    ),
    # ── Mobility ────────────────────────────────────────────────────────
    SourceSpec(
        "trafficData",
        "NDW Traffic",
        "free",
        ("ndw_traffic_api_url",),
        Need.COORDINATES,
        list,
        mobility.fetch_traffic,
    ),
    SourceSpec(
        "publicTransport",
        "openOV Public Transport",
        "free",
        ("openov_api_url",),
        Need.COORDINATES,
        m.PublicTransport,
        mobility.fetch_public_transport,
    ),
    SourceSpec(
        "parkingData",
        "Parking Availability",
        "freemium",
        ("parking_api_url",),
        Need.COORDINATES,
        m.ParkingData,
        mobility.fetch_parking,
    ),
    # ── Demographics ────────────────────────────────────────────────────
    SourceSpec(
        "population",
        "CBS Population",
        "free",
        ("cbs_population_api_url",),
        Need.COORDINATES,
        m.Population,
        demographics.fetch_population,
    ),
    SourceSpec(
        "statLineData",
        "CBS StatLine",
        "free",
        ("cbs_statline_api_url",),
        Need.MUNICIPALITY,
        m.StatLineData,
        demographics.fetch_statline,
    ),
    SourceSpec(
        "squareStats",
        "CBS Square Statistics",
        "free",
        ("cbs_square_stats_api_url",),
        Need.COORDINATES,
        m.SquareStats,
        demographics.fetch_square_stats,
    ),
    SourceSpec(
        "demographics",
        "CBS Neighbourhood Key Figures",
        "free",
        ("cbs_api_url",),
        Need.NEIGHBOURHOOD,
        m.Demographics,
        demographics.fetch_demographics,
    ),
    # ── Infrastructure ──────────────────────────────────────────────────
    SourceSpec(
        "greenSpaces",
        "Green Spaces",
        "free",
        ("green_spaces_api_url",),
        Need.COORDINATES,
        m.GreenSpaces,
        infrastructure.fetch_green_spaces,
    ),
    SourceSpec(
        "education",
        "Education Facilities",
        "free",
        ("education_api_url",),
        Need.COORDINATES,
        m.Education,
        infrastructure.fetch_education,
    ),
    SourceSpec(
        "buildingPermits",
        "Building Permits",
        "freemium",
        ("building_permits_api_url",),
        Need.COORDINATES,
        m.BuildingPermits,
        infrastructure.fetch_building_permits,
    ),
    SourceSpec(
        "facilities",
        "Facilities & Amenities",
        "free",
        ("facilities_api_url",),
        Need.COORDINATES,
        m.Facilities,
        infrastructure.fetch_facilities,
    ),
    SourceSpec(
        "elevation",
        "AHN Height Model",
        "free",
        ("ahn_height_model_api_url",),
        Need.COORDINATES,
        m.Elevation,
        infrastructure.fetch_elevation,
    ),
    # ── Comprehensive platforms ─────────────────────────────────────────
    SourceSpec(
        "pdokData",
        "PDOK Platform",
        "free",
        ("pdok_api_url",),
        Need.COORDINATES,
        m.PdokData,
        platform.fetch_pdok_platform,
    ),
    SourceSpec(
        "stratopoEnvironment",
        "Stratopo Environment",
        "freemium",
        ("stratopo_api_url",),
        Need.COORDINATES,
        m.StratopoEnvironment,
        platform.fetch_stratopo,
    ),
    SourceSpec(
        "landUse",
        "Land Use & Zoning",
        "free",
        ("land_use_api_url",),
        Need.COORDINATES,
        m.LandUse,
        platform.fetch_land_use,
    ),
)

ADDRESS = "address"
REGION = "region"
AI_SUMMARY = "aiSummary"

SOURCE_ORDER: tuple[str, ...] = (ADDRESS, REGION, *(spec.name for spec in FAN_OUT), AI_SUMMARY)

BY_NAME: dict[str, SourceSpec] = {spec.name: spec for spec in FAN_OUT}


def get_source(name: str) -> SourceSpec:
    try:
        return BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown source {name!r}") from None


__all__ = ["ADDRESS", "AI_SUMMARY", "BY_NAME", "FAN_OUT", "REGION", "SOURCE_ORDER", "get_source"]

"""Per-source value models.

Each model's defaults are that source's *empty value*: the placeholder stored
in the composite record when the source is disabled or soft-failed. Commercial
providers whose reply already uses these camelCase keys are decoded straight
into the model.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from addressiq.models.base import CamelModel, HistoricalPoint

# ── Property & land ──────────────────────────────────────────────────────


class KadasterInfo(CamelModel):
    owner_name: str = ""
    cadastral_reference: str = ""
    woz_value: float = 0.0
    energy_label: str = ""
    municipal_taxes: float = 0.0
    surface_area: float = 0.0
    plot_size: float = 0.0
    building_type: str = ""
    build_year: int = 0


class WozData(CamelModel):
    woz_value: float = 0.0
    value_year: int = 0
    building_type: str = ""
    build_year: int = 0
    surface_area: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0


class ComparableProperty(CamelModel):
    address: str = ""
    distance: float = 0.0
    sale_price: float = 0.0
    sale_date: str = ""
    surface_area: float = 0.0
    property_type: str = ""


class PropertyFeatures(CamelModel):
    has_garden: bool = False
    has_parking: bool = False
    energy_label: str = ""


class MarketValuation(CamelModel):
    market_value: float = 0.0
    valuation_date: str = ""
    confidence: float = 0.0
    price_per_sqm: float = 0.0
    comparable_properties: list[ComparableProperty] = Field(default_factory=list)
    features: PropertyFeatures = Field(default_factory=PropertyFeatures)


class Transaction(CamelModel):
    transaction_id: str = ""
    date: str = ""
    purchase_price: float = 0.0
    property_type: str = ""
    surface_area: float = 0.0
    bag_object_id: str = ""


class TransactionHistory(CamelModel):
    transactions: list[Transaction] = Field(default_factory=list)
    total_count: int = 0


class MonumentStatus(CamelModel):
    is_monument: bool = False
    type: str = ""
    name: str = ""
    date: str = ""


# ── Weather & climate ────────────────────────────────────────────────────


class WeatherData(CamelModel):
    temperature: float = 0.0
    precipitation: float = 0.0
    rainfall_forecast: list[float] = Field(default_factory=list)
    wind_speed: float = 0.0
    wind_direction: int = 0
    humidity: float = 0.0
    pressure: float = 0.0
    description: str = ""
    visibility: float = 0.0
    last_updated: str = ""
    historical_rainfall: list[HistoricalPoint] = Field(default_factory=list)


class SolarPotential(CamelModel):
    solar_radiation: float = 0.0
    sunshine_hours: float = 0.0
    uv_index: float = 0.0
    date: str = ""
    historical: list[HistoricalPoint] = Field(default_factory=list)


# ── Soil ─────────────────────────────────────────────────────────────────


class SoilData(CamelModel):
    soil_type: str = ""
    composition: str = ""
    permeability: float = 0.0
    organic_matter: float = 0.0
    ph: float = 0.0
    suitability: str = ""


class Subsidence(CamelModel):
    subsidence_rate: float = 0.0
    total_subsidence: float = 0.0
    stability_rating: str = ""
    measurement_date: str = ""
    ground_movement: float = 0.0


class SoilQuality(CamelModel):
    contamination_level: str = ""
    contaminants: list[str] = Field(default_factory=list)
    quality_zone: str = ""
    restricted_use: bool = False
    last_tested: str = ""


class BroSoilMap(CamelModel):
    soil_type: str = ""
    peat_composition: float = 0.0
    profile: str = ""
    foundation_quality: str = ""
    groundwater_depth: float = 0.0


# ── Environmental quality ────────────────────────────────────────────────


class AirMeasurement(CamelModel):
    parameter: str = ""
    value: float = 0.0
    unit: str = "µg/m³"


class AirQuality(CamelModel):
    measurements: list[AirMeasurement] = Field(default_factory=list)
    station_id: str = ""
    station_name: str = ""
    aqi: int = 0
    category: str = ""
    last_updated: str = ""


class NoiseSource(CamelModel):
    type: str = ""
    level: float = 0.0
    distance: float = 0.0


class NoisePollution(CamelModel):
    road_noise: float = 0.0
    rail_noise: float = 0.0
    aircraft_noise: float = 0.0
    industry_noise: float = 0.0
    total_noise: float = 0.0
    noise_category: str = "Unknown"
    exceeds_limit: bool = False
    sources: list[NoiseSource] = Field(default_factory=list)


# ── Energy & sustainability ──────────────────────────────────────────────


class EnergyClimate(CamelModel):
    energy_label: str = "Unknown"
    climate_risk: str = ""
    efficiency_score: float = 0.0
    annual_energy_cost: float = 0.0
    co2_emissions: float = 0.0
    heat_loss: float = 0.0


class SustainabilityMeasure(CamelModel):
    type: str = ""
    description: str = ""
    co2_savings: float = 0.0
    cost_savings: float = 0.0
    investment: float = 0.0
    payback_years: float = 0.0
    priority: str = ""


class Sustainability(CamelModel):
    current_rating: str = ""
    potential_rating: str = ""
    recommended_measures: list[SustainabilityMeasure] = Field(default_factory=list)
    total_co2_savings: float = Field(default=0.0, alias="totalCO2Savings")
    total_cost_savings: float = 0.0
    investment_cost: float = 0.0
    payback_period: float = 0.0


# ── Water & safety ───────────────────────────────────────────────────────


class FloodRisk(CamelModel):
    risk_level: str = ""
    flood_probability: float = 0.0
    water_depth: float = 0.0
    nearest_dike: float = 0.0
    dike_quality: str = ""
    flood_zone: str = ""


class WaterQuality(CamelModel):
    water_level: float = 0.0
    water_quality: str = ""
    parameters: dict[str, float] = Field(default_factory=dict)
    nearest_water: str = ""
    distance: float = 0.0
    last_measured: str = ""


class Safety(CamelModel):
    crime_rate: float = 0.0
    safety_score: float = 0.0
    crime_types: dict[str, int] = Field(default_factory=dict)
    police_response: float = 0.0
    year_over_year_change: float = 0.0
    safety_perception: str = ""


class FlightPath(CamelModel):
    route_id: str = ""
    altitude: float = 0.0
    distance: float = 0.0
    flights_per_day: int = 0


class SchipholFlights(CamelModel):
    daily_flights: int = 0
    noise_level: float = 0.0
    peak_hours: list[str] = Field(default_factory=list)
    flight_paths: list[FlightPath] = Field(default_factory=list)
    night_flights: int = 0
    noise_contour: str = ""


# ── Mobility ─────────────────────────────────────────────────────────────


class LatLon(CamelModel):
    lat: float = 0.0
    lon: float = 0.0


class TrafficPoint(CamelModel):
    location_id: str = ""
    intensity: int = 0
    average_speed: float = 0.0
    congestion_level: str = ""
    last_updated: str = ""
    coordinates: LatLon = Field(default_factory=LatLon)


class TransitStop(CamelModel):
    stop_id: str = ""
    name: str = ""
    type: str = ""
    distance: float = 0.0
    lines: list[str] = Field(default_factory=list)
    coordinates: LatLon = Field(default_factory=LatLon)


class PublicTransport(CamelModel):
    nearest_stops: list[TransitStop] = Field(default_factory=list)
    connections: list[str] = Field(default_factory=list)


class ParkingZone(CamelModel):
    zone_id: str = ""
    name: str = ""
    type: str = ""
    capacity: int = 0
    available: int = 0
    hourly_rate: float = 0.0
    coordinates: LatLon = Field(default_factory=LatLon)


class ParkingData(CamelModel):
    total_spaces: int = 0
    available_spaces: int = 0
    occupancy_rate: float = 0.0
    parking_zones: list[ParkingZone] = Field(default_factory=list)


# ── Demographics ─────────────────────────────────────────────────────────


class AgeBreakdown(CamelModel):
    # the camelCase generator would capitalise after digits ("age0To14")
    age0to14: int = Field(default=0, alias="age0to14")
    age15to24: int = Field(default=0, alias="age15to24")
    age25to44: int = Field(default=0, alias="age25to44")
    age45to64: int = Field(default=0, alias="age45to64")
    age65plus: int = Field(default=0, alias="age65plus")


class Population(CamelModel):
    total_population: int = 0
    age_distribution: dict[str, int] = Field(default_factory=dict)
    households: int = 0
    average_household_size: float = 0.0
    demographics: AgeBreakdown = Field(default_factory=AgeBreakdown)


class StatLineData(CamelModel):
    region_code: str = ""
    region_name: str = ""
    population: int = 0
    average_income: float = 0.0
    employment_rate: float = 0.0
    education_level: str = ""
    housing_stock: int = 0
    average_woz: float = Field(default=0.0, alias="averageWOZ")
    year: int = 0


class SquareStats(CamelModel):
    grid_id: str = ""
    population: int = 0
    households: int = 0
    average_woz: float = Field(default=0.0, alias="averageWOZ")
    average_income: float = 0.0
    housing_density: float = 0.0


class Demographics(CamelModel):
    """Neighbourhood key figures from the CBS WijkenEnBuurten table."""

    avg_income: float = 0.0
    population_density: float = 0.0
    avg_woz_value: float = 0.0


# ── Infrastructure ───────────────────────────────────────────────────────


class GreenSpace(CamelModel):
    name: str = ""
    type: str = ""
    area: float = 0.0
    distance: float = 0.0
    lat: float = 0.0
    lon: float = 0.0


class GreenSpaces(CamelModel):
    total_green_area: float = 0.0
    green_percentage: float = 0.0
    nearest_park: str = ""
    park_distance: float = 0.0
    tree_canopy_cover: float = 0.0
    green_spaces: list[GreenSpace] = Field(default_factory=list)


class School(CamelModel):
    name: str = ""
    type: str = ""
    distance: float = 0.0
    quality_score: float = 0.0
    denomination: str = ""
    address: str = ""
    lat: float = 0.0
    lon: float = 0.0


class Education(CamelModel):
    nearest_primary_school: School | None = None
    nearest_secondary_school: School | None = None
    all_schools: list[School] = Field(default_factory=list)
    average_quality: float = 0.0


class BuildingPermit(CamelModel):
    permit_id: str = ""
    type: str = ""
    description: str = ""
    status: str = ""
    issue_date: str = ""
    address: str = ""
    distance: float = 0.0


class BuildingPermits(CamelModel):
    total_permits: int = 0
    new_construction: int = 0
    renovations: int = 0
    extensions: int = 0
    permits: list[BuildingPermit] = Field(default_factory=list)
    growth_trend: str = "Unknown"


class Facility(CamelModel):
    name: str = ""
    category: str = ""
    type: str = ""
    distance: float = 0.0
    walk_time: int = 0
    drive_time: int = 0
    rating: float = 0.0
    lat: float = 0.0
    lon: float = 0.0


class Facilities(CamelModel):
    top_facilities: list[Facility] = Field(default_factory=list)
    amenities_score: float = 0.0
    category_counts: dict[str, int] = Field(default_factory=dict)


class Elevation(CamelModel):
    elevation: float = 0.0
    terrain_slope: float = 0.0
    flood_risk: str = ""
    view_potential: str = ""
    surrounding_heights: list[float] = Field(default_factory=list)


# ── Comprehensive platforms ──────────────────────────────────────────────


class CadastralData(CamelModel):
    parcel_id: str = ""
    municipality: str = ""
    section: str = ""
    parcel_number: str = ""
    area: float = 0.0
    land_use: str = ""


class PlatformAddress(CamelModel):
    bag_id: str = ""
    full_address: str = ""
    postal_code: str = ""
    latitude: float = 0.0
    longitude: float = 0.0


class TopographyData(CamelModel):
    land_type: str = ""
    terrain_features: list[str] = Field(default_factory=list)
    water_bodies: list[str] = Field(default_factory=list)


class PdokData(CamelModel):
    cadastral_data: CadastralData = Field(default_factory=CadastralData)
    address_data: PlatformAddress = Field(default_factory=PlatformAddress)
    topography_data: TopographyData = Field(default_factory=TopographyData)


class StratopoEnvironment(CamelModel):
    environment_score: float = 0.0
    total_variables: int = 0
    pollution_index: float = 0.0
    urbanization_level: str = ""
    environment_factors: dict[str, Any] = Field(default_factory=dict)
    esg_rating: str = ""
    recommendations: list[str] = Field(default_factory=list)


class BuildingRights(CamelModel):
    max_height: float = 0.0
    max_build_area: float = 0.0
    floor_area_ratio: float = 0.0
    ground_coverage: float = 0.0
    can_subdivide: bool = False
    can_expand: bool = False


class FuturePlan(CamelModel):
    plan_name: str = ""
    type: str = ""
    status: str = ""
    expected_date: str = ""
    impact: str = ""


class LandUse(CamelModel):
    primary_use: str = ""
    zoning_code: str = ""
    zoning_details: str = ""
    restrictions: list[str] = Field(default_factory=list)
    allowed_uses: list[str] = Field(default_factory=list)
    building_rights: BuildingRights | None = None
    future_plans: list[FuturePlan] = Field(default_factory=list)


# ── AI summary ───────────────────────────────────────────────────────────


class AiSummary(CamelModel):
    summary: str = ""
    generated: bool = False
    error: str | None = None


__all__ = [
    "AgeBreakdown",
    "AiSummary",
    "AirMeasurement",
    "AirQuality",
    "BroSoilMap",
    "BuildingPermit",
    "BuildingPermits",
    "BuildingRights",
    "CadastralData",
    "ComparableProperty",
    "Demographics",
    "Education",
    "Elevation",
    "EnergyClimate",
    "Facilities",
    "Facility",
    "FlightPath",
    "FloodRisk",
    "FuturePlan",
    "GreenSpace",
    "GreenSpaces",
    "KadasterInfo",
    "LandUse",
    "LatLon",
    "MarketValuation",
    "MonumentStatus",
    "NoisePollution",
    "NoiseSource",
    "ParkingData",
    "ParkingZone",
    "PdokData",
    "PlatformAddress",
    "Population",
    "PropertyFeatures",
    "PublicTransport",
    "Safety",
    "SchipholFlights",
    "School",
    "SoilData",
    "SoilQuality",
    "SolarPotential",
    "SquareStats",
    "StatLineData",
    "StratopoEnvironment",
    "Subsidence",
    "Sustainability",
    "SustainabilityMeasure",
    "TopographyData",
    "TrafficPoint",
    "Transaction",
    "TransactionHistory",
    "TransitStop",
    "WaterQuality",
    "WeatherData",
    "WozData",
]

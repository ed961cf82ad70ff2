"""The composite record: one address, every source, one errors map."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from addressiq.models.address import AddressRecord, RegionCodes
from addressiq.models.base import CamelModel
from addressiq.models.scores import PropertyScores
from addressiq.models.sources import (
    AiSummary,
    AirQuality,
    BroSoilMap,
    BuildingPermits,
    Demographics,
    Education,
    Elevation,
    EnergyClimate,
    Facilities,
    FloodRisk,
    GreenSpaces,
    KadasterInfo,
    LandUse,
    MarketValuation,
    MonumentStatus,
    NoisePollution,
    ParkingData,
    PdokData,
    Population,
    PublicTransport,
    Safety,
    SchipholFlights,
    SoilData,
    SoilQuality,
    SolarPotential,
    SquareStats,
    StatLineData,
    StratopoEnvironment,
    Subsidence,
    Sustainability,
    TrafficPoint,
    TransactionHistory,
    WaterQuality,
    WeatherData,
    WozData,
)


class CompositeRecord(CamelModel):
    """Everything known about one address.

    Invariants:
        - a source name is in ``sources`` or in ``errors``, never both
        - a disabled source is in neither and keeps its empty value
        - ``sources`` follows source declaration order
    """

    address: AddressRecord
    region: RegionCodes = Field(default_factory=RegionCodes)

    kadaster_info: KadasterInfo = Field(default_factory=KadasterInfo)
    woz_data: WozData = Field(default_factory=WozData)
    market_valuation: MarketValuation = Field(default_factory=MarketValuation)
    transaction_history: TransactionHistory = Field(default_factory=TransactionHistory)
    monument_status: MonumentStatus = Field(default_factory=MonumentStatus)

    weather: WeatherData = Field(default_factory=WeatherData)
    solar_potential: SolarPotential = Field(default_factory=SolarPotential)
    soil_data: SoilData = Field(default_factory=SoilData)
    subsidence: Subsidence = Field(default_factory=Subsidence)
    soil_quality: SoilQuality = Field(default_factory=SoilQuality)
    bro_soil_map: BroSoilMap = Field(default_factory=BroSoilMap)
    air_quality: AirQuality = Field(default_factory=AirQuality)
    noise_pollution: NoisePollution = Field(default_factory=NoisePollution)

    energy_climate: EnergyClimate = Field(default_factory=EnergyClimate)
    sustainability: Sustainability = Field(default_factory=Sustainability)

    flood_risk: FloodRisk = Field(default_factory=FloodRisk)
    water_quality: WaterQuality = Field(default_factory=WaterQuality)
    safety: Safety = Field(default_factory=Safety)
    schiphol_flights: SchipholFlights = Field(default_factory=SchipholFlights)

    traffic_data: list[TrafficPoint] = Field(default_factory=list)
    public_transport: PublicTransport = Field(default_factory=PublicTransport)
    parking_data: ParkingData = Field(default_factory=ParkingData)

    population: Population = Field(default_factory=Population)
    stat_line_data: StatLineData = Field(default_factory=StatLineData)
    square_stats: SquareStats = Field(default_factory=SquareStats)
    demographics: Demographics = Field(default_factory=Demographics)

    green_spaces: GreenSpaces = Field(default_factory=GreenSpaces)
    education: Education = Field(default_factory=Education)
    building_permits: BuildingPermits = Field(default_factory=BuildingPermits)
    facilities: Facilities = Field(default_factory=Facilities)
    elevation: Elevation = Field(default_factory=Elevation)

    pdok_data: PdokData = Field(default_factory=PdokData)
    stratopo_environment: StratopoEnvironment = Field(default_factory=StratopoEnvironment)
    land_use: LandUse = Field(default_factory=LandUse)

    ai_summary: AiSummary = Field(default_factory=AiSummary)

    sources: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    scores: PropertyScores | None = None
    aggregated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    cached: bool = False

    def has(self, source: str) -> bool:
        """True when ``source`` contributed a value to this record."""
        return source in self.sources


_FIELD_BY_ALIAS: dict[str, str] = {
    (info.alias or name): name for name, info in CompositeRecord.model_fields.items()
}


def field_for_source(source: str) -> str:
    """Map a camelCase source name (``"kadasterInfo"``) onto its attribute name."""
    try:
        return _FIELD_BY_ALIAS[source]
    except KeyError:
        raise KeyError(f"unknown source {source!r}") from None


__all__ = ["CompositeRecord", "field_for_source"]

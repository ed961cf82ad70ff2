"""
Property scoring.

Derives ESG, profit and opportunity scores, an overall score, a risk level
and a short list of recommendations from a :class:`CompositeRecord`. Pure
and deterministic: no I/O, no clock, no randomness.

A component whose source did not contribute (disabled or failed) falls back
to a neutral value instead of reading the source's empty placeholder.

Architecture:
    ::

        CompositeRecord
              │
              ├── esg_breakdown()          → EsgBreakdown, weighted → esgScore
              ├── profit_breakdown()       → ProfitBreakdown, weighted → profitScore
              ├── opportunity_breakdown()  → OpportunityBreakdown, weighted → opportunityScore
              ├── risk_level()             → Low / Medium / High / Very High
              └── recommendations()
                                             overall = 0.3·esg + 0.4·profit + 0.3·opportunity

Examples:
    >>> scores = score_property(record)
    >>> scores.risk_level
    'Low'

Tags:
    scoring, esg, investment, addressiq

Doc-Types:
    api-reference
"""

from __future__ import annotations

from addressiq.models.composite import CompositeRecord
from addressiq.models.scores import (
    EsgBreakdown,
    OpportunityBreakdown,
    ProfitBreakdown,
    PropertyScores,
    ScoreBreakdown,
)

NEUTRAL = 50.0

ESG_WEIGHTS = {
    "energy_efficiency": 0.20,
    "environmental_risk": 0.15,
    "social_livability": 0.15,
    "sustainability": 0.15,
    "flood_risk": 0.10,
    "air_quality": 0.10,
    "noise_level": 0.10,
    "green_space_access": 0.05,
}

OPPORTUNITY_WEIGHTS = {
    "development_potential": 0.20,
    "renovation_roi": 0.15,
    "energy_upgrade_roi": 0.15,
    "neighborhood_growth": 0.15,
    "accessibility": 0.15,
    "amenities_score": 0.10,
    "future_development": 0.10,
}

ENERGY_LABEL_SCORES = {
    "A++++": 95.0,
    "A+++": 95.0,
    "A++": 95.0,
    "A+": 95.0,
    "A": 85.0,
    "B": 75.0,
    "C": 60.0,
    "D": 45.0,
    "E": 30.0,
    "F": 20.0,
    "G": 10.0,
}

FLOOD_SAFETY_SCORES = {"Low": 90.0, "Medium": 60.0, "High": 30.0, "Very High": 10.0}

GROWTH_TREND_SCORES = {"Increasing": 80.0, "Stable": 60.0, "Decreasing": 30.0}

# solar radiation at or above this many W/m² scores 100
SOLAR_REFERENCE_RADIATION = 600.0

DEFAULT_RENTAL_YIELD = 4.0


def energy_label_score(label: str) -> float:
    return ENERGY_LABEL_SCORES.get(label, NEUTRAL)


def _weighted(breakdown: EsgBreakdown | OpportunityBreakdown, weights: dict[str, float]) -> float:
    return sum(getattr(breakdown, name) * weight for name, weight in weights.items())


def _noise_score(total_noise: float) -> float:
    if total_noise < 50:
        return 100.0
    if total_noise < 55:
        return 80.0
    if total_noise < 60:
        return 60.0
    if total_noise < 65:
        return 40.0
    return 20.0


# ── ESG ──────────────────────────────────────────────────────────────────


def esg_breakdown(record: CompositeRecord) -> EsgBreakdown:
    energy = energy_label_score(record.energy_climate.energy_label) if record.has("energyClimate") else NEUTRAL

    environmental = 100.0
    if record.has("soilQuality"):
        level = record.soil_quality.contamination_level
        if level == "Severe":
            environmental -= 40
        elif level == "Moderate":
            environmental -= 20
    if record.has("subsidence") and record.subsidence.stability_rating == "High risk":
        environmental -= 30

    livability = NEUTRAL
    if record.has("safety"):
        livability = record.safety.safety_score * 0.4
    if record.has("facilities"):
        livability += record.facilities.amenities_score * 0.3
    if record.has("education"):
        livability += record.education.average_quality * 10 * 0.3

    sustainability = energy * 0.6
    radiation = record.solar_potential.solar_radiation if record.has("solarPotential") else 0.0
    if radiation > 0:
        sustainability += min(100.0, radiation / SOLAR_REFERENCE_RADIATION * 100) * 0.4

    flood = 70.0
    if record.has("floodRisk"):
        flood = FLOOD_SAFETY_SCORES.get(record.flood_risk.risk_level, 70.0)

    air = max(0.0, 100 - record.air_quality.aqi * 0.8) if record.has("airQuality") else 70.0
    noise = _noise_score(record.noise_pollution.total_noise) if record.has("noisePollution") else 70.0

    green = NEUTRAL
    if record.has("greenSpaces"):
        green = record.green_spaces.green_percentage
        if record.green_spaces.park_distance < 500:
            green = min(100.0, green + 20)

    return EsgBreakdown(
        energy_efficiency=energy,
        environmental_risk=max(0.0, environmental),
        social_livability=min(100.0, livability),
        sustainability=sustainability,
        flood_risk=flood,
        air_quality=air,
        noise_level=noise,
        green_space_access=green,
    )


# ── Profit ───────────────────────────────────────────────────────────────


def profit_breakdown(record: CompositeRecord) -> ProfitBreakdown:
    current = 0.0
    if record.has("wozData"):
        current = record.woz_data.woz_value
    elif record.has("kadasterInfo"):
        current = record.kadaster_info.woz_value

    market = record.market_valuation.market_value if record.has("marketValuation") else current

    appreciation = NEUTRAL
    transactions = record.transaction_history.transactions if record.has("transactionHistory") else []
    if transactions:
        first_price = transactions[-1].purchase_price
        if first_price > 0 and market > first_price:
            appreciation = min(100.0, (market - first_price) / first_price * 100 * 2)

    trend = record.building_permits.growth_trend if record.has("buildingPermits") else ""

    demand = NEUTRAL
    if record.has("population") and record.population.total_population > 10_000:
        demand += 20
    if trend == "Increasing":
        demand += 20
    if record.has("statLineData") and record.stat_line_data.employment_rate > 75:
        demand += 10

    liquidity = NEUTRAL
    if record.has("publicTransport") and len(record.public_transport.nearest_stops) > 2:
        liquidity += 15
    if record.has("facilities") and record.facilities.amenities_score > 70:
        liquidity += 20
    if record.has("statLineData") and record.stat_line_data.average_income > 40_000:
        liquidity += 15

    return ProfitBreakdown(
        current_value=current,
        market_value=market,
        price_appreciation=appreciation,
        rental_yield=DEFAULT_RENTAL_YIELD if market > 0 else 0.0,
        market_demand=min(100.0, demand),
        liquidity_score=min(100.0, liquidity),
        capital_growth=GROWTH_TREND_SCORES.get(trend, NEUTRAL),
    )


def profit_score(breakdown: ProfitBreakdown) -> float:
    return (
        breakdown.price_appreciation * 0.25
        + breakdown.market_demand * 0.25
        + breakdown.liquidity_score * 0.20
        + breakdown.capital_growth * 0.20
        + breakdown.rental_yield * 10 * 0.10
    )


# ── Opportunity ──────────────────────────────────────────────────────────


def opportunity_breakdown(record: CompositeRecord) -> OpportunityBreakdown:
    development = NEUTRAL
    rights = record.land_use.building_rights if record.has("landUse") else None
    if rights is not None:
        if rights.can_expand:
            development += 25
        if rights.can_subdivide:
            development += 25

    renovation = NEUTRAL
    if record.has("energyClimate"):
        label = record.energy_climate.energy_label
        if label in ("E", "F", "G"):
            renovation = 85.0
        elif label in ("D", "C"):
            renovation = 65.0
        else:
            renovation = 30.0

    upgrade = NEUTRAL
    if record.has("sustainability"):
        payback = record.sustainability.payback_period
        if 0 < payback < 10:
            upgrade = 100 - payback * 10
        elif payback >= 10:
            upgrade = 30.0

    growth = NEUTRAL
    if record.has("buildingPermits"):
        growth = record.building_permits.new_construction / 10
        if record.building_permits.growth_trend == "Increasing":
            growth += 30
    if record.has("statLineData") and record.stat_line_data.population > 50_000:
        growth += 10

    accessibility = NEUTRAL
    if record.has("publicTransport"):
        accessibility = min(100.0, 50 + len(record.public_transport.nearest_stops) * 10)
    traffic = record.traffic_data if record.has("trafficData") else []
    if traffic:
        average_speed = sum(point.average_speed for point in traffic) / len(traffic)
        if average_speed > 40:
            accessibility = min(100.0, accessibility + 10)

    future = NEUTRAL
    if record.has("landUse"):
        for plan in record.land_use.future_plans:
            if plan.status == "Approved" and plan.impact == "Positive":
                future += 15

    return OpportunityBreakdown(
        development_potential=min(100.0, development),
        renovation_roi=renovation,
        energy_upgrade_roi=upgrade,
        neighborhood_growth=min(100.0, growth),
        accessibility=accessibility,
        amenities_score=record.facilities.amenities_score if record.has("facilities") else NEUTRAL,
        future_development=min(100.0, future),
    )


# ── Risk & recommendations ───────────────────────────────────────────────


def risk_level(record: CompositeRecord) -> str:
    """Additive risk points mapped onto Low / Medium / High / Very High."""
    points = 0
    if record.has("floodRisk"):
        if record.flood_risk.risk_level in ("High", "Very High"):
            points += 3
        elif record.flood_risk.risk_level == "Medium":
            points += 1
    if record.has("subsidence") and record.subsidence.stability_rating == "High risk":
        points += 2
    if record.has("soilQuality"):
        if record.soil_quality.contamination_level == "Severe":
            points += 3
        elif record.soil_quality.contamination_level == "Moderate":
            points += 1
    if record.has("safety") and record.safety.safety_score < 40:
        points += 2
    if record.has("buildingPermits") and record.building_permits.growth_trend == "Decreasing":
        points += 1

    if points >= 6:
        return "Very High"
    if points >= 4:
        return "High"
    if points >= 2:
        return "Medium"
    return "Low"


def recommendations(record: CompositeRecord, scores: PropertyScores) -> list[str]:
    esg = scores.breakdown.esg
    opportunity = scores.breakdown.opportunity
    advice: list[str] = []

    if esg.energy_efficiency < 60:
        advice.append("Consider energy efficiency improvements (insulation, double glazing, solar panels)")
    if record.has("sustainability") and record.sustainability.total_cost_savings > 1000:
        advice.append(f"Energy upgrades could save €{record.sustainability.total_cost_savings:.0f}/year")
    if record.has("floodRisk") and record.flood_risk.risk_level in ("High", "Very High"):
        advice.append("High flood risk - ensure comprehensive insurance coverage")
    if opportunity.development_potential > 70:
        advice.append("Property has significant development potential - check zoning regulations")
    if scores.profit_score > 75:
        advice.append("Strong market conditions - good time for investment or sale")
    elif scores.profit_score < 40:
        advice.append("Weak market indicators - consider holding or substantial improvements")
    if opportunity.accessibility < 50:
        advice.append("Limited accessibility may affect resale value")
    if opportunity.renovation_roi > 70:
        advice.append("High ROI potential for renovations - prioritize kitchen and bathroom upgrades")
    return advice


def score_property(record: CompositeRecord) -> PropertyScores:
    """Compute every score for ``record``."""
    esg = esg_breakdown(record)
    profit = profit_breakdown(record)
    opportunity = opportunity_breakdown(record)

    esg_score = _weighted(esg, ESG_WEIGHTS)
    profit_total = profit_score(profit)
    opportunity_score = _weighted(opportunity, OPPORTUNITY_WEIGHTS)

    scores = PropertyScores(
        esg_score=esg_score,
        profit_score=profit_total,
        opportunity_score=opportunity_score,
        overall_score=esg_score * 0.3 + profit_total * 0.4 + opportunity_score * 0.3,
        risk_level=risk_level(record),
        breakdown=ScoreBreakdown(esg=esg, profit=profit, opportunity=opportunity),
    )
    return scores.model_copy(update={"recommendations": recommendations(record, scores)})


__all__ = [
    "energy_label_score",
    "esg_breakdown",
    "opportunity_breakdown",
    "profit_breakdown",
    "profit_score",
    "recommendations",
    "risk_level",
    "score_property",
]

"""
Property router: the composite record and its scoring projections.

Endpoints:
    GET /api/property                   {"property": composite}
    GET /api/property/scores            {postcode, houseNumber, scores}
    GET /api/property/recommendations   {postcode, houseNumber, recommendations}
    GET /api/property/analysis          {postcode, houseNumber, property, scores}
    GET /api/property/solar             {postcode, houseNumber, area, summary}

Every endpoint takes ``postcode`` and ``houseNumber`` query parameters and
runs one aggregation (or serves it from the cache).

Tags:
    addressiq, api, property, scores

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from addressiq.api.deps import AppSettings, Engine, Key, Summariser
from addressiq.models.composite import CompositeRecord
from addressiq.models.scores import PropertyScores
from addressiq.scoring import score_property
from addressiq.transport.deadline import Deadline

router = APIRouter(prefix="/api/property")


def _scores(record: CompositeRecord) -> PropertyScores:
    return record.scores if record.scores is not None else score_property(record)


@router.get("")
async def get_property(key: Key, engine: Engine) -> dict[str, Any]:
    """Comprehensive property data for one address."""
    record = await engine.aggregate(key)
    return {"property": record.to_json()}


@router.get("/scores")
async def get_scores(key: Key, engine: Engine) -> dict[str, Any]:
    record = await engine.aggregate(key)
    return {
        "postcode": key.postcode,
        "houseNumber": key.house_number,
        "scores": _scores(record).to_json(),
    }


@router.get("/recommendations")
async def get_recommendations(key: Key, engine: Engine) -> dict[str, Any]:
    record = await engine.aggregate(key)
    return {
        "postcode": key.postcode,
        "houseNumber": key.house_number,
        "recommendations": _scores(record).recommendations,
    }


@router.get("/analysis")
async def get_analysis(key: Key, engine: Engine) -> dict[str, Any]:
    """Composite record plus scores in one response."""
    record = await engine.aggregate(key)
    return {
        "postcode": key.postcode,
        "houseNumber": key.house_number,
        "property": record.to_json(),
        "scores": _scores(record).to_json(),
    }


@router.get("/solar")
async def get_solar(
    key: Key,
    engine: Engine,
    summariser: Summariser,
    settings: AppSettings,
    area: float = Query(..., gt=0, description="Roof area in square metres"),
) -> dict[str, Any]:
    """AI analysis of solar panel viability for a roof of ``area`` m².

    An unconfigured or failing AI service is reported inside ``summary``
    (``generated: false`` with an ``error``), not as an HTTP error.
    """
    record = await engine.aggregate(key)
    deadline = Deadline.after(settings.request_deadline_seconds)
    data = record.model_dump(mode="json", by_alias=True, exclude={"ai_summary", "scores"})
    summary = await summariser.solar(deadline, area, data)
    return {
        "postcode": key.postcode,
        "houseNumber": key.house_number,
        "area": area,
        "summary": summary.to_json(),
    }

"""Service metadata: root index, liveness and build information."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from addressiq.api.deps import AppSettings
from addressiq.api.schemas.common import BuildInfo, BuildStamp, HealthResponse

router = APIRouter()

SERVICE_NAME = "addressiq-backend"
API_VERSION = "2.0"

ENDPOINTS = {
    "GET /healthz": "Health check",
    "GET /build-info": "Build information",
    "GET /search": "Legacy search endpoint",
    "GET /api/search/stream": "Streaming search with progress events (SSE)",
    "GET /api/property": "Get comprehensive property data",
    "GET /api/property/scores": "Get property scores (ESG, Profit, Opportunity)",
    "GET /api/property/recommendations": "Get smart recommendations",
    "GET /api/property/analysis": "Get full analysis (data + scores + recommendations)",
    "GET /api/property/solar": "Get AI solar panel analysis for a roof area",
    "POST /admin/cache/flush": "Flush the result cache (requires X-Admin-Secret)",
}

QUERY_PARAMETERS = {
    "postcode": "Dutch postcode (e.g., 3541ED)",
    "houseNumber": "House number (e.g., 53)",
}


@router.get("/")
async def root() -> dict[str, Any]:
    return {
        "service": "AddressIQ API",
        "version": API_VERSION,
        "endpoints": ENDPOINTS,
        "query_parameters": QUERY_PARAMETERS,
    }


@router.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Liveness only: never touches upstream providers or the cache."""
    return HealthResponse(status="ok", service=SERVICE_NAME)


@router.get("/build-info", response_model=BuildInfo)
async def build_info(settings: AppSettings) -> BuildInfo:
    return BuildInfo(
        backend=BuildStamp(commit=settings.build_commit, date=settings.build_date),
        frontend=BuildStamp(commit=settings.frontend_build_commit, date=settings.frontend_build_date),
    )

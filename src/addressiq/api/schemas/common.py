"""
Common API schemas: RFC 7807 errors and the small fixed-shape responses.

Composite records, scores and legacy search results are serialised from
their own models; only the envelopes owned by the HTTP layer live here.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# ── RFC 7807 Problem Detail ─────────────────────────────────────────────


class ErrorDetail(BaseModel):
    """Field-level error detail, used for request validation failures."""

    code: str = Field(description="Machine-readable error code (e.g., 'REQUIRED', 'INVALID_FORMAT')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Parameter name if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Used as the error envelope for every non-2xx response.

    Example:
        {
            "type": "about:blank",
            "title": "Address not found",
            "status": 404,
            "detail": "no address found for 0000XX 1",
            "instance": "/api/property?postcode=0000XX&houseNumber=1",
            "errors": []
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code (e.g., 400, 404, 500)")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(
        default_factory=list,
        description="List of field-level error details",
    )


# ── Service metadata ─────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "addressiq-backend"


class BuildStamp(BaseModel):
    commit: str = "unknown"
    date: str = "unknown"


class BuildInfo(BaseModel):
    backend: BuildStamp
    frontend: BuildStamp


class FlushResponse(BaseModel):
    status: str = "ok"
    message: str = "cache flushed successfully"


__all__ = ["BuildInfo", "BuildStamp", "ErrorDetail", "FlushResponse", "HealthResponse", "ProblemDetail"]

"""
Error handling: maps AddressIQ errors to RFC 7807 responses.

Only three outcomes reach a client as errors: bad input (400), an address
the register does not know (404), and an infrastructure fault (500).
Provider failures never get here; they live in the composite's ``errors``.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from addressiq.api.schemas.common import ErrorDetail, ProblemDetail
from addressiq.core.errors import AddressIQError, AddressNotFoundError, ErrorCategory
from addressiq.core.logging import get_logger

log = get_logger(__name__)

# ── Error category → HTTP status mapping ─────────────────────────────────

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.ADDRESS: 500,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.CACHE: 500,
    ErrorCategory.PROVIDER: 500,
    ErrorCategory.INTERNAL: 500,
}

TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Address not found",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def status_for_error(exc: AddressIQError) -> int:
    """Resolve an error to an HTTP status, defaulting to 500."""
    if isinstance(exc, AddressNotFoundError):
        return 404
    return CATEGORY_TO_STATUS.get(exc.category, 500)


def problem_response(
    *,
    status: int,
    title: str | None = None,
    detail: str = "",
    instance: str = "",
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title or TITLES.get(status, "Error"),
        status=status,
        detail=detail,
        instance=instance,
        errors=[ErrorDetail(**e) for e in errors or []],
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


async def addressiq_error_handler(request: Request, exc: AddressIQError) -> JSONResponse:
    status = status_for_error(exc)
    if status >= 500:
        log.error("request_failed", path=request.url.path, **exc.to_dict())
    else:
        log.info("request_rejected", path=request.url.path, status=status, error=exc.message)
    return problem_response(status=status, detail=exc.message, instance=str(request.url))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Query and form validation failures are 400s, not FastAPI's default 422."""
    errors = [
        {
            "code": str(error.get("type", "invalid")).upper(),
            "message": str(error.get("msg", "")),
            "field": str(error["loc"][-1]) if error.get("loc") else None,
        }
        for error in exc.errors()
    ]
    return problem_response(
        status=400,
        detail="invalid request parameters",
        instance=str(request.url),
        errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: 500 with a ProblemDetail."""
    log.exception("unhandled_exception", path=request.url.path)
    return problem_response(
        status=500,
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )

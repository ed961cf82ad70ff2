"""Admin router: operator actions guarded by ``X-Admin-Secret``."""

from __future__ import annotations

import hmac

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from addressiq.api.deps import AppSettings, Cache
from addressiq.api.middleware.errors import problem_response
from addressiq.api.schemas.common import FlushResponse
from addressiq.core.errors import CacheError
from addressiq.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/admin")


@router.post("/cache/flush", response_model=FlushResponse)
async def flush_cache(
    settings: AppSettings,
    cache: Cache,
    x_admin_secret: str | None = Header(None),
) -> FlushResponse | JSONResponse:
    """Remove every cached composite record.

    403 when no admin secret is configured, 401 when the header does not
    match, 503 when caching is disabled and 500 when the backend fails.
    """
    if not settings.admin_secret:
        log.warning("admin_flush_unconfigured")
        return problem_response(status=403, detail="admin endpoint is not configured")

    if not hmac.compare_digest(x_admin_secret or "", settings.admin_secret):
        log.warning("admin_flush_unauthorized")
        return problem_response(status=401, detail="invalid admin secret")

    if cache is None:
        return problem_response(status=503, detail="cache service not available")

    try:
        await cache.flush()
    except CacheError as e:
        log.error("admin_flush_failed", error=e.message)
        return problem_response(status=500, detail="failed to flush cache")

    log.info("admin_flush_succeeded")
    return FlushResponse()

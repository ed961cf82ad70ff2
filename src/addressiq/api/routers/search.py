"""
Search router: the legacy flat search document and its streaming variant.

Endpoints:
    GET  /search?address=3541ED+53          legacy JSON
    POST /search  (form: postcode, houseNumber)
    GET  /api/search/stream?postcode&houseNumber[&bypassCache=true]

Stream protocol (``text/event-stream``)::

    event: start
    data: {"message": "Starting search..."}

    data: {"source": "weather", "status": "success", "completed": 7, "total": 34, "lastCompleted": "weather"}

    : keepalive

    event: data
    data: {<legacy search document>}

or, when the address cannot be resolved::

    event: error
    data: {"message": "no address found for 0000XX 1"}

Tags:
    addressiq, api, search, sse, streaming

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

import asyncio
import hmac
import json
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Form, Header, Query
from fastapi.responses import StreamingResponse

from addressiq.api.deps import AppSettings, Engine, make_key
from addressiq.api.legacy import build_legacy_response
from addressiq.core.errors import AddressIQError, ErrorKind, InvalidInputError
from addressiq.core.logging import get_logger
from addressiq.engine import Aggregator, Progress
from addressiq.models.address import AddressKey

log = get_logger(__name__)

router = APIRouter()

KEEPALIVE_SECONDS = 2.0


def parse_address_param(address: str | None) -> AddressKey:
    """Split ``"3541ED 53"`` (``+`` already decoded to a space) into a key."""
    if not address or not address.strip():
        raise InvalidInputError("missing address parameter")
    parts = address.replace("+", " ").split()
    if len(parts) < 2:
        raise InvalidInputError("invalid address format, expected: postcode houseNumber")
    return make_key(parts[0], parts[1])


@router.get("/search")
async def search(
    engine: Engine,
    address: str | None = Query(None, description="Postcode and house number, e.g. 3541ED+53"),
) -> dict[str, Any]:
    key = parse_address_param(address)
    record = await engine.aggregate(key)
    return build_legacy_response(record)


@router.post("/search")
async def search_form(
    engine: Engine,
    postcode: str | None = Form(None),
    house_number: str | None = Form(None, alias="houseNumber"),
) -> dict[str, Any]:
    key = make_key(postcode, house_number, "missing postcode or houseNumber")
    record = await engine.aggregate(key)
    return build_legacy_response(record)


# ── Streaming ────────────────────────────────────────────────────────────


def sse_event(event: str | None, data: Any) -> str:
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {json.dumps(data, ensure_ascii=False)}\n\n"


def bypass_allowed(requested: bool, admin_secret: str, provided: str | None) -> bool:
    """Cache bypass is honoured only with the admin secret, when one is configured."""
    if not requested:
        return False
    if admin_secret and not hmac.compare_digest(provided or "", admin_secret):
        log.warning("stream_cache_bypass_denied")
        return False
    return True


async def stream_search(engine: Aggregator, key: AddressKey, *, bypass_cache: bool) -> AsyncIterator[str]:
    """Run one aggregation and render it as SSE frames."""
    queue: asyncio.Queue[Progress] = asyncio.Queue()

    async def on_progress(progress: Progress) -> None:
        queue.put_nowait(progress)

    yield sse_event("start", {"message": "Starting search..."})

    task = asyncio.create_task(engine.aggregate(key, bypass_cache=bypass_cache, progress=on_progress))
    getter: asyncio.Task[Progress] | None = None
    try:
        while True:
            if getter is None:
                getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, task}, timeout=KEEPALIVE_SECONDS, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                yield sse_event(None, getter.result().to_dict())
                getter = None
            elif task in done:
                break
            else:
                yield ": keepalive\n\n"

        while not queue.empty():
            yield sse_event(None, queue.get_nowait().to_dict())

        try:
            record = task.result()
        except AddressIQError as e:
            log.info("stream_search_failed", error=e.message)
            yield sse_event("error", {"message": e.message})
            return
        except Exception as e:
            log.exception("stream_search_crashed")
            yield sse_event("error", {"message": f"internal error: {e}"})
            return

        yield sse_event("data", build_legacy_response(record))
    finally:
        if getter is not None:
            getter.cancel()
        if not task.done():
            log.info(
                "stream_client_disconnected",
                error_kind=ErrorKind.CANCELLED.value,
                postcode=key.postcode,
                house_number=key.house_number,
            )
            task.cancel()


async def _single_error(message: str) -> AsyncIterator[str]:
    yield sse_event("error", {"message": message})


@router.get("/api/search/stream")
async def search_stream(
    engine: Engine,
    settings: AppSettings,
    postcode: str | None = Query(None),
    house_number: str | None = Query(None, alias="houseNumber"),
    bypass_cache: bool = Query(False, alias="bypassCache"),
    admin_secret: str | None = Query(None, alias="adminSecret"),
    x_admin_secret: str | None = Header(None),
) -> StreamingResponse:
    try:
        key = make_key(postcode, house_number, "Missing postcode or houseNumber")
    except InvalidInputError as e:
        body = _single_error(e.message)
    else:
        bypass = bypass_allowed(bypass_cache, settings.admin_secret, x_admin_secret or admin_secret)
        log.info("stream_search_started", postcode=key.postcode, house_number=key.house_number, bypass_cache=bypass)
        body = stream_search(engine, key, bypass_cache=bypass)

    return StreamingResponse(
        body,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )

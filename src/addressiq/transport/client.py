"""
Shared HTTP helper for every provider adapter.

One :class:`HttpClient` wraps one ``httpx.AsyncClient`` (and therefore one
connection pool) for the lifetime of the process. Adapters never talk to
httpx directly: they call :meth:`HttpClient.get_json`,
:meth:`HttpClient.post_json` or :meth:`HttpClient.post_form` with the request
deadline, their source name, a URL and a target type, and get back a decoded,
validated value or a :class:`~addressiq.core.errors.ProviderError`.

Manifesto:
    Twenty-odd providers differ in URL shape, auth style and schema, but not
    in how a request is made, timed out, status-checked and decoded. That
    part lives here, once.

Architecture:
    ::

        adapter ──► HttpClient.get_json(deadline, "weather", url, WeatherReply)
                        │
                        ├── deadline.check()            → Timeout
                        ├── headers: Accept + caller     (caller wins)
                        ├── timeout = min(10 s, remaining)
                        ├── httpx.AsyncClient.request()  → Transport / Timeout
                        ├── 2xx check                    → Unauthorised / NotFound /
                        │                                  UpstreamRateLimited /
                        │                                  NonSuccessStatus
                        └── TypeAdapter.validate_json()  → Decode

Examples:
    >>> client = HttpClient(timeout=10.0)
    >>> reply = await client.get_json(deadline, "elevation", url, ElevationReply,
    ...                               params={"locations": "52.1,5.1"})

Tags:
    http, httpx, providers, decoding, addressiq

Doc-Types:
    api-reference
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.logging import get_logger
from addressiq.transport.deadline import Deadline

T = TypeVar("T")

log = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.UNAUTHORISED,
    403: ErrorKind.UNAUTHORISED,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.UPSTREAM_RATE_LIMITED,
}


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def classify_status(status: int) -> ErrorKind:
    """Map a non-2xx status code onto an :class:`ErrorKind`."""
    return _STATUS_KINDS.get(status, ErrorKind.NON_SUCCESS_STATUS)


def merge_headers(defaults: dict[str, str], overrides: dict[str, str] | None) -> dict[str, str]:
    """Merge caller headers over defaults, case-insensitively. Caller wins."""
    merged = httpx.Headers(defaults)
    for key, value in (overrides or {}).items():
        merged[key] = value
    return dict(merged.items())


class HttpClient:
    """Typed JSON-over-HTTP helper shared by all adapters.

    Args:
        client: Pre-built ``httpx.AsyncClient`` (tests inject one with a
            ``MockTransport``). When ``None`` one is created and owned.
        timeout: Default per-request timeout in seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # ── Public operations ─────────────────────────────────────────────

    async def get_json(
        self,
        deadline: Deadline,
        name: str,
        url: str,
        target: type[T] | Any = Any,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> T:
        """GET ``url`` and decode the JSON body into ``target``."""
        return await self._request(deadline, name, "GET", url, target, headers=headers, params=params)

    async def post_json(
        self,
        deadline: Deadline,
        name: str,
        url: str,
        body: Any,
        target: type[T] | Any = Any,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> T:
        """POST ``body`` as JSON and decode the reply into ``target``."""
        return await self._request(
            deadline,
            name,
            "POST",
            url,
            target,
            headers=merge_headers({"Content-Type": "application/json"}, headers),
            params=params,
            json=body,
        )

    async def post_form(
        self,
        deadline: Deadline,
        name: str,
        url: str,
        form: dict[str, str],
        target: type[T] | Any = Any,
        *,
        headers: dict[str, str] | None = None,
    ) -> T:
        """POST ``form`` url-encoded and decode the reply into ``target``."""
        return await self._request(
            deadline,
            name,
            "POST",
            url,
            target,
            headers=merge_headers({"Content-Type": "application/x-www-form-urlencoded"}, headers),
            data=form,
        )

    # ── Internals ─────────────────────────────────────────────────────

    async def _request(
        self,
        deadline: Deadline,
        name: str,
        method: str,
        url: str,
        target: Any,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
    ) -> Any:
        deadline.check(name)
        request_headers = merge_headers({"Accept": "application/json"}, headers)
        endpoint = url.split("?", 1)[0]
        log.debug("provider_request", source=name, method=method, url=endpoint)

        try:
            response = await self._client.request(
                method,
                url,
                headers=request_headers,
                params=params,
                json=json,
                data=data,
                timeout=deadline.request_timeout(self.timeout),
            )
        except httpx.TimeoutException as e:
            raise ProviderError(ErrorKind.TIMEOUT, name, f"request timed out: {endpoint}", cause=e) from e
        except httpx.HTTPError as e:
            raise ProviderError(ErrorKind.TRANSPORT, name, f"request failed: {e}", cause=e).with_context(
                url=endpoint
            ) from e

        status = response.status_code
        if not 200 <= status < 300:
            raise ProviderError(classify_status(status), name, status=status).with_context(url=endpoint)

        try:
            return _adapter(target).validate_json(response.content)
        except ValidationError as e:
            raise ProviderError(
                ErrorKind.DECODE,
                name,
                f"failed to decode response: {e.error_count()} validation error(s)",
                cause=e,
            ).with_context(url=endpoint, http_status=status) from e


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "HttpClient", "classify_status", "merge_headers"]

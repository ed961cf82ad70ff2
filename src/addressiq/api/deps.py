"""
FastAPI dependency injection: shared singletons and per-request parameters.

Usage in routers::

    from addressiq.api.deps import Engine, Key

    @router.get("/api/property")
    async def get_property(key: Key, engine: Engine):
        ...

Tags:
    addressiq, api, dependency-injection

Doc-Types:
    api-reference
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query, Request

from addressiq.adapters.summariser import GeminiSummariser
from addressiq.core.cache import ResultCache
from addressiq.core.errors import InvalidInputError
from addressiq.core.settings import Settings
from addressiq.engine import Aggregator
from addressiq.models.address import AddressKey

MISSING_ADDRESS_PARAMS = "missing postcode or houseNumber query parameters"

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings, loaded once per process."""
    return Settings()


# ── Lifespan-owned collaborators ─────────────────────────────────────────


def get_aggregator(request: Request) -> Aggregator:
    return request.app.state.aggregator


def get_result_cache(request: Request) -> ResultCache | None:
    return request.app.state.cache


def get_summariser(request: Request) -> GeminiSummariser:
    return request.app.state.aggregator.summariser


# ── Address parameters (per-request) ─────────────────────────────────────


def make_key(postcode: str | None, house_number: str | None, message: str = MISSING_ADDRESS_PARAMS) -> AddressKey:
    """Normalise raw parameters into an :class:`AddressKey`.

    Raises:
        InvalidInputError: either value is missing or blank.
    """
    key = AddressKey.of(postcode or "", house_number or "")
    if not key.postcode or not key.house_number:
        raise InvalidInputError(message)
    return key


def get_address_key(
    postcode: str | None = Query(None, description="Dutch postcode (e.g., 3541ED)"),
    house_number: str | None = Query(None, alias="houseNumber", description="House number (e.g., 53)"),
) -> AddressKey:
    return make_key(postcode, house_number)


# ── Convenience type aliases ─────────────────────────────────────────────

AppSettings = Annotated[Settings, Depends(get_settings)]
Engine = Annotated[Aggregator, Depends(get_aggregator)]
Cache = Annotated[ResultCache | None, Depends(get_result_cache)]
Summariser = Annotated[GeminiSummariser, Depends(get_summariser)]
Key = Annotated[AddressKey, Depends(get_address_key)]

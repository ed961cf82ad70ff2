"""
Provider adapter contract.

A provider adapter is a plain ``async`` function::

    async def fetch_noise(ctx: ProviderContext, target: Target) -> NoisePollution

It either returns its value or raises
:class:`~addressiq.core.errors.ProviderError`. It never decides whether it is
enabled: that is declared on its :class:`SourceSpec` (required settings and
required input) and checked by the engine before the adapter is called.

Manifesto:
    Adapters are thin configurations over the shared HTTP helper: a URL, an
    auth style, a reply type and a reshaping step. Everything that is the
    same for every provider (deadline, retries, status mapping, decoding,
    soft-failure bookkeeping) lives outside them.

Architecture:
    ::

        SourceSpec(name="noisePollution",
                   settings=("noise_pollution_api_url",),
                   needs=Need.COORDINATES,
                   empty=NoisePollution,
                   fetch=fetch_noise)
                │
                ▼
        engine: is_enabled(settings, target)?
                ├── no  → empty value, neither in sources nor errors
                └── yes → await fetch(ctx, target)
                            ├── value          → sources
                            └── ProviderError  → empty value + errors[name]

Tags:
    adapters, providers, contract, addressiq

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, TypeVar

from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.settings import Settings
from addressiq.models.address import AddressRecord, RegionCodes
from addressiq.transport.client import HttpClient
from addressiq.transport.deadline import Deadline

T = TypeVar("T")


class Need(str, Enum):
    """The slice of identifiers an adapter consumes."""

    NOTHING = "nothing"
    BAG_ID = "bag_id"
    COORDINATES = "coordinates"
    NEIGHBOURHOOD = "neighbourhood"
    MUNICIPALITY = "municipality"


Category = Literal["free", "freemium", "premium"]


@dataclass(frozen=True)
class Target:
    """Everything the fan-out knows about the address being looked up."""

    address: AddressRecord
    region: RegionCodes | None = None

    @property
    def lat(self) -> float:
        return self.address.latitude

    @property
    def lon(self) -> float:
        return self.address.longitude

    @property
    def bag_id(self) -> str:
        return self.address.bag_id

    @property
    def neighbourhood_code(self) -> str:
        return self.region.neighbourhood_code if self.region else ""

    @property
    def municipality_code(self) -> str:
        """Region municipality code, falling back to the one the address service returned."""
        if self.region and self.region.municipality_code:
            return self.region.municipality_code
        return self.address.municipality_code

    def provides(self, need: Need) -> bool:
        if need is Need.BAG_ID:
            return bool(self.bag_id)
        if need is Need.NEIGHBOURHOOD:
            return bool(self.neighbourhood_code)
        if need is Need.MUNICIPALITY:
            return bool(self.municipality_code)
        return True


@dataclass(frozen=True)
class ProviderContext:
    """Shared collaborators handed to every adapter call."""

    http: HttpClient
    settings: Settings
    deadline: Deadline


Fetch = Callable[[ProviderContext, Target], Awaitable[Any]]


@dataclass(frozen=True)
class SourceSpec:
    """Declaration of one upstream source.

    Attributes:
        name: Composite record key (``"kadasterInfo"``)
        label: Human-readable provider name for the legacy search response
        category: ``free`` / ``freemium`` / ``premium``
        settings: Setting names that must all be non-empty for the source to run
        needs: Identifier the adapter requires
        empty: Factory for the empty value
        fetch: The adapter
        configured: Custom configuration predicate replacing ``settings``
    """

    name: str
    label: str
    category: Category
    settings: tuple[str, ...]
    needs: Need
    empty: Callable[[], Any]
    fetch: Fetch
    configured: Callable[[Settings], bool] | None = None

    def is_configured(self, settings: Settings) -> bool:
        if self.configured is not None:
            return self.configured(settings)
        return all(getattr(settings, key) for key in self.settings)

    def is_enabled(self, settings: Settings, target: Target) -> bool:
        return self.is_configured(settings) and target.provides(self.needs)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def join_url(base: str, path: str) -> str:
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


@contextmanager
def not_found_message(source: str, message: str) -> Iterator[None]:
    """Re-raise a 404 from the wrapped call with a message naming what was missing."""
    try:
        yield
    except ProviderError as e:
        if e.kind is not ErrorKind.NOT_FOUND:
            raise
        raise ProviderError(ErrorKind.NOT_FOUND, source, message, status=e.status) from e


async def get_or_sentinel(
    ctx: ProviderContext,
    source: str,
    url: str,
    target: type[T],
    sentinel: Callable[[], T],
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
) -> T:
    """GET ``url``; a 404 means "nothing to report here" and yields ``sentinel()``."""
    try:
        return await ctx.http.get_json(ctx.deadline, source, url, target, headers=headers, params=params)
    except ProviderError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            return sentinel()
        raise


def point_params(target: Target) -> dict[str, str]:
    return {"lat": f"{target.lat:f}", "lon": f"{target.lon:f}"}


__all__ = [
    "Category",
    "Fetch",
    "Need",
    "ProviderContext",
    "SourceSpec",
    "Target",
    "bearer",
    "get_or_sentinel",
    "join_url",
    "not_found_message",
    "point_params",
]

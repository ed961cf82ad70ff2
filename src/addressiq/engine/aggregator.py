"""
Aggregation engine.

One call turns an :class:`AddressKey` into a scored :class:`CompositeRecord`:

    cache → address (hard) → region (soft) → fan-out (soft, concurrent)
          → AI summary (soft) → scoring (once) → cache write (soft)

Manifesto:
    A property lookup is only as slow as the deadline and only as fragile as
    the address register. Every other provider may fail, time out or be
    switched off, and the caller still gets a record describing exactly
    which sources answered and which did not.

Architecture:
    ::

        Aggregator.aggregate(key)
          │
          ├── ResultCache.get(key)              hit → record(cached=True)
          ├── resolve_address()                 AddressNotFoundError / AddressResolutionError
          ├── resolve_region()                  soft; neighbourhood-keyed sources skip
          ├── _fan_out()
          │     ├── disabled     → skipped     (empty value, no error)
          │     ├── value        → success     (sources)
          │     ├── ProviderError→ error       (errors[name])
          │     ├── other error  → error       (logged with traceback)
          │     └── deadline     → "Timeout"   (task cancelled)
          ├── GeminiSummariser.summarise()      soft; disabled without a key
          ├── score_property()
          └── ResultCache.put(key, record)      soft

Features:
    - **Single deadline:** created per call, threaded into every adapter
    - **Declaration order:** ``sources`` follows SOURCE_ORDER, not completion order
    - **Progress:** optional async callback after every fan-out source
    - **Cache bypass:** skips the read, still writes

Examples:
    >>> aggregator = Aggregator(http, settings, cache=cache)
    >>> record = await aggregator.aggregate(AddressKey.of("3541 ed", "53"))
    >>> record.sources[:2]
    ['address', 'region']

Tags:
    engine, aggregation, fan-out, asyncio, deadline, addressiq

Doc-Types:
    - API Reference
    - Architecture Guide
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from addressiq.adapters.address import resolve_address
from addressiq.adapters.base import ProviderContext, SourceSpec, Target
from addressiq.adapters.region import resolve_region
from addressiq.adapters.registry import ADDRESS, AI_SUMMARY, FAN_OUT, REGION
from addressiq.adapters.summariser import GeminiSummariser
from addressiq.core.cache import ResultCache
from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.logging import LogContext, get_logger
from addressiq.core.settings import Settings
from addressiq.models.address import AddressKey, AddressRecord, RegionCodes
from addressiq.models.composite import CompositeRecord, field_for_source
from addressiq.models.scores import PropertyScores
from addressiq.scoring import score_property
from addressiq.transport.client import HttpClient
from addressiq.transport.deadline import Deadline

log = get_logger(__name__)

Status = Literal["pending", "success", "error", "skipped"]


@dataclass
class SourceOutcome:
    """Result of one fan-out source."""

    name: str
    status: Status = "pending"
    value: Any = None
    error: str | None = None


@dataclass(frozen=True)
class Progress:
    """One progress notification, sent after each fan-out source settles."""

    source: str
    status: Status
    completed: int
    total: int

    @property
    def last_completed(self) -> str:
        return self.source

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "status": self.status,
            "completed": self.completed,
            "total": self.total,
            "lastCompleted": self.last_completed,
        }


ProgressCallback = Callable[[Progress], Awaitable[None]]
Scorer = Callable[[CompositeRecord], PropertyScores]


class Aggregator:
    """Builds composite records.

    Args:
        http: Shared HTTP helper
        settings: Provider URLs, keys and the request deadline
        cache: Advisory result cache; ``None`` disables caching
        summariser: AI summariser; built from ``http`` and ``settings`` when omitted
        scorer: Scoring function applied once per fresh record
        sources: Fan-out catalogue (tests pass a subset)
    """

    def __init__(
        self,
        http: HttpClient,
        settings: Settings,
        *,
        cache: ResultCache | None = None,
        summariser: GeminiSummariser | None = None,
        scorer: Scorer = score_property,
        sources: Sequence[SourceSpec] = FAN_OUT,
    ):
        self.http = http
        self.settings = settings
        self.cache = cache
        self.summariser = summariser or GeminiSummariser(http, settings)
        self.scorer = scorer
        self.sources = tuple(sources)

    async def aggregate(
        self,
        key: AddressKey,
        *,
        bypass_cache: bool = False,
        progress: ProgressCallback | None = None,
    ) -> CompositeRecord:
        """Look up everything known about ``key``.

        Raises:
            AddressNotFoundError: the address register has no such address
            AddressResolutionError: the address register failed
            ConfigError: no address register is configured
        """
        async with LogContext(postcode=key.postcode, house_number=key.house_number):
            if self.cache is not None and not bypass_cache:
                hit = await self.cache.get(key)
                if hit is not None:
                    log.info("aggregation_cache_hit")
                    return hit

            deadline = Deadline.after(self.settings.request_deadline_seconds)
            log.info("aggregation_started", deadline_seconds=deadline.timeout_seconds)

            address = await resolve_address(self.http, self.settings, deadline, key)
            ctx = ProviderContext(http=self.http, settings=self.settings, deadline=deadline)

            region, region_outcome = await self._region(ctx, Target(address=address))
            target = Target(address=address, region=region)

            outcomes = await self._fan_out(ctx, target, progress)
            record = self._compose(address, region, region_outcome, outcomes)
            record = await self._summarise(deadline, record)
            record = record.model_copy(update={"scores": self.scorer(record)})

            log.info(
                "aggregation_completed",
                sources=len(record.sources),
                errors=len(record.errors),
                elapsed_seconds=round(deadline.elapsed, 3),
            )

            if self.cache is not None:
                await self.cache.put(key, record)
            return record

    # ── Stages ───────────────────────────────────────────────────────

    async def _region(self, ctx: ProviderContext, target: Target) -> tuple[RegionCodes | None, SourceOutcome]:
        if not self.settings.region_api_url:
            return None, SourceOutcome(REGION, "skipped")
        outcome = await _run(REGION, resolve_region, ctx, target)
        if outcome.status == "success":
            return outcome.value, outcome
        return None, outcome

    async def _fan_out(
        self,
        ctx: ProviderContext,
        target: Target,
        progress: ProgressCallback | None,
    ) -> dict[str, SourceOutcome]:
        outcomes = {spec.name: SourceOutcome(spec.name) for spec in self.sources}
        total = len(self.sources)
        completed = 0

        async def settle(outcome: SourceOutcome) -> None:
            nonlocal completed
            completed += 1
            if progress is not None:
                await progress(Progress(outcome.name, outcome.status, completed, total))

        tasks: dict[asyncio.Task[SourceOutcome], SourceSpec] = {}
        for spec in self.sources:
            if not spec.is_enabled(self.settings, target):
                outcomes[spec.name].status = "skipped"
                await settle(outcomes[spec.name])
                continue
            task = asyncio.create_task(_run(spec.name, spec.fetch, ctx, target), name=f"source:{spec.name}")
            tasks[task] = spec

        pending: set[asyncio.Task[SourceOutcome]] = set(tasks)
        try:
            while pending:
                remaining = ctx.deadline.remaining()
                if remaining <= 0:
                    break
                done, pending = await asyncio.wait(pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    outcome = task.result()
                    outcomes[outcome.name] = outcome
                    await settle(outcome)
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        for task in pending:
            name = tasks[task].name
            log.warning("source_timed_out", source=name)
            outcomes[name] = SourceOutcome(name, "error", error=ProviderError(ErrorKind.TIMEOUT, name).message)
            await settle(outcomes[name])
        return outcomes

    def _compose(
        self,
        address: AddressRecord,
        region: RegionCodes | None,
        region_outcome: SourceOutcome,
        outcomes: dict[str, SourceOutcome],
    ) -> CompositeRecord:
        sources = [ADDRESS]
        errors: dict[str, str] = {}
        if region_outcome.status == "success":
            sources.append(REGION)
        elif region_outcome.status == "error":
            errors[REGION] = region_outcome.error or ""

        values: dict[str, Any] = {}
        for spec in self.sources:
            outcome = outcomes[spec.name]
            if outcome.status == "success":
                values[field_for_source(spec.name)] = outcome.value
                sources.append(spec.name)
            else:
                values[field_for_source(spec.name)] = spec.empty()
                if outcome.status == "error":
                    errors[spec.name] = outcome.error or ""

        return CompositeRecord(
            address=address,
            region=region or RegionCodes(),
            sources=sources,
            errors=errors,
            **values,
        )

    async def _summarise(self, deadline: Deadline, record: CompositeRecord) -> CompositeRecord:
        if not self.summariser.enabled:
            return record

        data = record.model_dump(mode="json", by_alias=True, exclude={"ai_summary", "scores"})
        summary = await self.summariser.summarise(deadline, data)
        if summary.generated:
            return record.model_copy(update={"ai_summary": summary, "sources": [*record.sources, AI_SUMMARY]})

        log.warning("ai_summary_unavailable", error=summary.error)
        errors = {**record.errors, AI_SUMMARY: summary.error or "AI summary failed"}
        return record.model_copy(update={"ai_summary": summary, "errors": errors})


async def _run(
    name: str,
    fetch: Callable[[ProviderContext, Target], Awaitable[Any]],
    ctx: ProviderContext,
    target: Target,
) -> SourceOutcome:
    """Run one adapter, folding every failure except cancellation into the outcome."""
    log.debug("source_started", source=name)
    try:
        value = await fetch(ctx, target)
    except ProviderError as e:
        log.debug("source_failed", source=name, error_kind=e.kind.value, error=e.message)
        return SourceOutcome(name, "error", error=e.message)
    except Exception as e:
        log.exception("source_crashed", source=name)
        return SourceOutcome(name, "error", error=f"unexpected error: {e}")
    log.debug("source_succeeded", source=name)
    return SourceOutcome(name, "success", value=value)


__all__ = ["Aggregator", "Progress", "ProgressCallback", "SourceOutcome"]

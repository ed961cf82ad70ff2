"""
AI location summary via Google Gemini.

The summariser runs after the fan-out, over the finished composite record.
It never raises for provider trouble: every outcome is an
:class:`~addressiq.models.sources.AiSummary` with ``generated`` telling
success from failure and ``error`` carrying a user-facing reason.

Architecture:
    ::

        CompositeRecord ──► JSON (≤ 30 000 bytes) ──► prompt template
                                                          │
                                   POST {gemini_api_url}?key=…
                                   generationConfig: 200 tokens, T=0.7
                                                          │
                           candidates[0].content.parts[0].text
                                                          │
                                  AiSummary(summary, generated, error)

Tags:
    ai, gemini, llm, summary, addressiq

Doc-Types:
    api-reference
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from addressiq.core.errors import ErrorKind, ProviderError
from addressiq.core.logging import get_logger
from addressiq.core.settings import Settings
from addressiq.models.sources import AiSummary
from addressiq.transport.client import HttpClient
from addressiq.transport.deadline import Deadline

log = get_logger(__name__)

SOURCE = "aiSummary"
MAX_DATA_BYTES = 30_000
MAX_OUTPUT_TOKENS = 200
TEMPERATURE = 0.7

LOCATION_PROMPT = """You are an expert Dutch property analyst. Analyse this JSON data about a Dutch property location and provide a concise summary (max 800 characters).

Your response MUST include:
1. **Investment potential** (property value trends, area development)
2. **Business opportunities** (what businesses would thrive here based on demographics, foot traffic, nearby amenities)
3. **Liveability** (is it good for families, professionals, retirees?)
4. **Key risks** (flooding, noise, pollution, crime)

Be direct and specific. Use data from the JSON, and other information you can gather from the location. Refer to key figures and facts from the JSON. Do not mention if any data is missing or unavailable. No fluff. British English.

JSON Data:
{data}"""  # noqa: E501

SOLAR_PROMPT = """You are an expert Dutch solar energy analyst. Analyse this JSON data about a specific roof/area in the Netherlands and provide a concise summary (max 600 characters) of its solar panel viability.

Your response MUST consider:
1. **The physical area:** The provided area is {area:.2f} square meters. Note: This is a 2D top-down footprint; it does not account for 3D roof pitch, so factor this margin of error into your recommendation.
2. **Environmental factors:** Interpret the current/historical precipitation, sunshine duration, and solar radiation from the provided JSON.

Be direct and specific. Focus strictly on whether this surface is viable for solar panels, the approximate potential, and any immediate environmental considerations. Do not mention if data is missing. No fluff. British English.

JSON Data:
{data}"""  # noqa: E501


class _Part(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class _Content(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[_Part] = Field(default_factory=list)


class _Candidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: _Content = Field(default_factory=_Content)


class _ApiError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int = 0
    message: str = ""


class _GeminiReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    candidates: list[_Candidate] = Field(default_factory=list)
    error: _ApiError | None = None


def failed(message: str) -> AiSummary:
    return AiSummary(summary="", generated=False, error=message)


def clamp_json(data: Any, limit: int = MAX_DATA_BYTES) -> str:
    """Serialise ``data`` and cut it to ``limit`` bytes of UTF-8.

    Raises:
        TypeError, ValueError: ``data`` is not JSON-serialisable.
    """
    encoded = json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return encoded[:limit].decode("utf-8", errors="ignore")


def _failure_message(error: ProviderError) -> str:
    if error.kind in (ErrorKind.TRANSPORT, ErrorKind.TIMEOUT):
        return "Failed to connect to AI service"
    if error.kind is ErrorKind.DECODE:
        return "Failed to parse AI response"
    if error.status is not None:
        return f"AI service returned status {error.status}"
    return error.message


class GeminiSummariser:
    """Generates location and solar summaries.

    Args:
        http: Shared HTTP helper
        settings: Supplies ``gemini_api_url`` and ``gemini_api_key``
    """

    def __init__(self, http: HttpClient, settings: Settings):
        self.http = http
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return bool(self.settings.gemini_api_key and self.settings.gemini_api_url)

    async def summarise(self, deadline: Deadline, data: Any) -> AiSummary:
        """Investment, business, liveability and risk summary of a composite record's JSON."""
        try:
            payload = clamp_json(data)
        except (TypeError, ValueError):
            return failed("Failed to prepare data for AI analysis")
        return await self._generate(deadline, LOCATION_PROMPT.format(data=payload))

    async def solar(self, deadline: Deadline, area: float, data: Any) -> AiSummary:
        """Solar panel viability for a roof footprint of ``area`` square metres."""
        try:
            payload = clamp_json(data)
        except (TypeError, ValueError):
            return failed("Failed to prepare data for AI analysis")
        return await self._generate(deadline, SOLAR_PROMPT.format(area=area, data=payload))

    async def _generate(self, deadline: Deadline, prompt: str) -> AiSummary:
        if not self.settings.gemini_api_key:
            return failed("Gemini API key not configured")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": MAX_OUTPUT_TOKENS, "temperature": TEMPERATURE},
        }
        try:
            reply = await self.http.post_json(
                deadline,
                SOURCE,
                self.settings.gemini_api_url,
                body,
                _GeminiReply,
                params={"key": self.settings.gemini_api_key},
            )
        except ProviderError as e:
            log.warning("ai_summary_failed", error_kind=e.kind.value, status=e.status)
            return failed(_failure_message(e))

        if reply.error is not None:
            return failed(reply.error.message)
        parts = reply.candidates[0].content.parts if reply.candidates else []
        if not parts or not parts[0].text:
            return failed("AI returned empty response")

        return AiSummary(summary=parts[0].text, generated=True)


__all__ = ["LOCATION_PROMPT", "SOLAR_PROMPT", "GeminiSummariser", "clamp_json", "failed"]

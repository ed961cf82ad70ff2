"""Tests for the Gemini summariser."""

import json

import pytest

from addressiq.adapters.summariser import GeminiSummariser, clamp_json
from addressiq.transport.deadline import Deadline

GEMINI = "https://gemini.test/v1beta/models/flash:generateContent"


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def summariser(http, make_settings):
    return GeminiSummariser(http, make_settings(gemini_api_url=GEMINI, gemini_api_key="g-key"))


class TestClampJson:
    def test_small_payload_unchanged(self):
        assert json.loads(clamp_json({"a": 1})) == {"a": 1}

    def test_cut_to_byte_limit(self):
        assert len(clamp_json({"text": "x" * 100}, limit=20).encode()) <= 20

    def test_multibyte_boundary_dropped(self):
        cut = clamp_json({"t": "€€€€"}, limit=9)
        assert "�" not in cut
        assert len(cut.encode()) <= 9

    def test_unserialisable(self):
        with pytest.raises(TypeError):
            clamp_json({"x": object()})


class TestEnabled:
    def test_disabled_without_key(self, http, make_settings):
        assert not GeminiSummariser(http, make_settings(gemini_api_url=GEMINI)).enabled

    def test_enabled(self, summariser):
        assert summariser.enabled


class TestSummarise:
    @pytest.mark.asyncio
    async def test_generated(self, upstream, summariser):
        upstream.add(GEMINI, json=gemini_reply("Solid family neighbourhood with low flood risk."))
        summary = await summariser.summarise(Deadline.after(10), {"address": {"displayName": "Vleutensevaart 53"}})

        assert summary.generated is True
        assert summary.summary.startswith("Solid family")
        assert summary.error in (None, "")

        request = upstream.calls[0]
        assert request.url.params["key"] == "g-key"
        body = json.loads(request.content)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "Vleutensevaart 53" in prompt
        assert body["generationConfig"] == {"maxOutputTokens": 200, "temperature": 0.7}

    @pytest.mark.asyncio
    async def test_solar_prompt_carries_area(self, upstream, summariser):
        upstream.add(GEMINI, json=gemini_reply("Viable."))
        summary = await summariser.solar(Deadline.after(10), 42.5, {"solarPotential": {}})
        prompt = json.loads(upstream.calls[0].content)["contents"][0]["parts"][0]["text"]
        assert "42.50 square meters" in prompt
        assert summary.generated

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "reply", "message"),
        [
            (500, {}, "AI service returned status 500"),
            (200, {"candidates": []}, "AI returned empty response"),
            (200, {"candidates": [{"content": {"parts": []}}]}, "AI returned empty response"),
            (200, {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]}, "AI returned empty response"),
            (200, {"error": {"code": 400, "message": "API key not valid"}}, "API key not valid"),
        ],
    )
    async def test_failures_are_values(self, upstream, summariser, status, reply, message):
        upstream.add(GEMINI, status=status, json=reply)
        summary = await summariser.summarise(Deadline.after(10), {})
        assert summary.generated is False
        assert summary.error == message

    @pytest.mark.asyncio
    async def test_malformed_reply(self, upstream, summariser):
        upstream.add(GEMINI, text="not json")
        summary = await summariser.summarise(Deadline.after(10), {})
        assert summary.error == "Failed to parse AI response"

    @pytest.mark.asyncio
    async def test_missing_key(self, upstream, http, make_settings):
        summary = await GeminiSummariser(http, make_settings(gemini_api_url=GEMINI)).summarise(Deadline.after(10), {})
        assert summary.error == "Gemini API key not configured"
        assert upstream.calls == []

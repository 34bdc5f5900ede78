"""Unit tests for the Gemini and Custom Search adapters."""

from __future__ import annotations

import json

import httpx
import pytest

from osint_helper.clients.custom_search import CustomSearchClient
from osint_helper.clients.gemini import GeminiClient
from osint_helper.utils.exceptions import (
    ConfigurationError,
    ModelResponseParsingError,
    RetryExhaustedError,
    SearchRateLimitedError,
)


@pytest.mark.asyncio
async def test_generate_json_sends_key_header_and_schema(settings, make_http, gemini_payload):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=gemini_payload('{"queries": ["a"]}'))

    gemini = GeminiClient(settings, make_http(handler))
    text = await gemini.generate_json("sys", "user", response_schema={"type": "OBJECT"})

    assert text == '{"queries": ["a"]}'
    request = seen[0]
    assert request.headers["x-goog-api-key"] == "test-gemini-key"
    assert request.url.path.endswith(f"/models/{settings.GEMINI_QUERY_MODEL}:generateContent")
    body = json.loads(request.content)
    assert body["systemInstruction"]["parts"][0]["text"] == "sys"
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["responseSchema"] == {"type": "OBJECT"}


@pytest.mark.asyncio
async def test_generate_json_without_candidates_raises(settings, make_http):
    gemini = GeminiClient(settings, make_http(lambda r: httpx.Response(200, json={"candidates": []})))

    with pytest.raises(ModelResponseParsingError, match="no content"):
        await gemini.generate_json("sys", "user")


@pytest.mark.asyncio
async def test_generate_json_requires_api_key(settings, make_http):
    settings.GEMINI_API_KEY = ""
    gemini = GeminiClient(settings, make_http(lambda r: httpx.Response(200, json={})))

    with pytest.raises(ConfigurationError):
        await gemini.generate_json("sys", "user")


@pytest.mark.asyncio
async def test_grounded_search_collects_unique_uris(settings, make_http, gemini_payload):
    payload = gemini_payload(
        "Ivan Petrov runs Romashka LLC.",
        ["https://a.example/1", "https://b.example/2", "https://a.example/1"],
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["tools"] == [{"googleSearch": {}}]
        return httpx.Response(200, json=payload)

    gemini = GeminiClient(settings, make_http(handler))
    result = await gemini.grounded_search("Ivan Petrov", "sys")

    assert result.text == "Ivan Petrov runs Romashka LLC."
    assert result.urls == ["https://a.example/1", "https://b.example/2"]


@pytest.mark.asyncio
async def test_grounded_search_without_text(settings, make_http):
    body = {"candidates": [{"content": {"parts": []}}]}
    gemini = GeminiClient(settings, make_http(lambda r: httpx.Response(200, json=body)))

    result = await gemini.grounded_search("q", "sys")

    assert result.text == "No summary available."
    assert result.urls == []


@pytest.mark.asyncio
async def test_custom_search_maps_items(settings, make_http):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "items": [
                    {"link": "https://example.com/a", "title": "A", "snippet": "about a"},
                    {"title": "no link"},
                    {"link": "https://example.com/b"},
                ]
            },
        )

    search = CustomSearchClient(settings, make_http(handler))
    hits = await search.search("Ivan Petrov")

    assert [h.url for h in hits] == ["https://example.com/a", "https://example.com/b"]
    assert hits[1].title == "Untitled"
    assert hits[1].snippet == ""
    params = seen[0].url.params
    assert params["q"] == "Ivan Petrov"
    assert params["num"] == "5"
    assert params["cx"] == "test-cx"


@pytest.mark.asyncio
async def test_custom_search_without_items(settings, make_http):
    search = CustomSearchClient(settings, make_http(lambda r: httpx.Response(200, json={})))
    assert await search.search("nothing") == []


@pytest.mark.asyncio
async def test_custom_search_persistent_429_is_rate_limited(settings, make_http, sleeps):
    settings.LLM_MAX_RETRIES = 2
    search = CustomSearchClient(settings, make_http(lambda r: httpx.Response(429)))

    with pytest.raises(SearchRateLimitedError):
        await search.search("q")
    assert len(sleeps) == 2


@pytest.mark.asyncio
async def test_custom_search_persistent_500_is_not_rate_limited(settings, make_http):
    settings.LLM_MAX_RETRIES = 1
    search = CustomSearchClient(settings, make_http(lambda r: httpx.Response(500)))

    with pytest.raises(RetryExhaustedError) as exc_info:
        await search.search("q")
    assert not isinstance(exc_info.value, SearchRateLimitedError)

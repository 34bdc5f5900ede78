"""Shared test fixtures."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from osint_helper.clients.http import ResilientClient
from osint_helper.models.case import CollectedEntry, SourceAPI
from osint_helper.utils.retry import RetryPolicy


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch, tmp_path):
    """Set required environment variables for tests."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("GOOGLE_SEARCH_API_KEY", "test-search-key")
    monkeypatch.setenv("GOOGLE_SEARCH_CX", "test-cx")
    monkeypatch.setenv("CASES_DIR", str(tmp_path / "cases"))
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings(tmp_path):
    from osint_helper.config import Settings

    return Settings(
        GEMINI_API_KEY="test-gemini-key",
        GOOGLE_SEARCH_API_KEY="test-search-key",
        GOOGLE_SEARCH_CX="test-cx",
        CASES_DIR=str(tmp_path / "cases"),
        COLLECT_CONCURRENCY=3,
        COLLECT_BATCH_SIZE=10,
        ANALYSIS_BATCH_SIZE=40,
    )


@pytest.fixture
def store(settings):
    from osint_helper.services.case_store import CaseStore

    return CaseStore(settings.CASES_DIR)


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by a ResilientClient built with ``make_http``."""
    return []


@pytest.fixture
def make_http(sleeps) -> Callable[..., ResilientClient]:
    """Build a ResilientClient over an httpx.MockTransport that never really sleeps.

    Jitter is pinned to its maximum so delays are deterministic.
    """

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    def factory(handler, policy: RetryPolicy | None = None) -> ResilientClient:
        return ResilientClient(
            httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            default_policy=policy,
            sleep=fake_sleep,
            uniform=lambda lo, hi: hi,
        )

    return factory


@pytest.fixture
def sample_entry() -> CollectedEntry:
    return CollectedEntry(
        query="Ivan Petrov Moscow",
        url="https://example.com/a",
        title="Ivan Petrov - director",
        snippet="Ivan Petrov, director of Romashka LLC, Moscow.",
        source_api=SourceAPI.CS_API,
    )


@pytest.fixture
def gemini_payload() -> Callable[..., dict]:
    """Builds a ``generateContent`` response body with one candidate."""

    def build(text: str, grounding_uris: list[str] | None = None) -> dict:
        candidate: dict = {"content": {"parts": [{"text": text}], "role": "model"}}
        if grounding_uris is not None:
            candidate["groundingMetadata"] = {
                "groundingChunks": [{"web": {"uri": uri, "title": uri}} for uri in grounding_uris]
            }
        return {"candidates": [candidate]}

    return build

"""Unit tests for the setup verification script."""

from __future__ import annotations

import httpx
import pytest

from scripts.verify_setup import check_cases_dir, check_custom_search, check_gemini


@pytest.mark.asyncio
async def test_cases_dir_is_created(settings, tmp_path):
    settings.CASES_DIR = str(tmp_path / "fresh" / "cases")

    assert await check_cases_dir(settings) is True
    assert (tmp_path / "fresh" / "cases").is_dir()


@pytest.mark.asyncio
async def test_gemini_without_key_fails(settings, capsys):
    settings.GEMINI_API_KEY = ""

    assert await check_gemini(settings) is False
    assert "GEMINI_API_KEY not set" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_custom_search_is_optional(settings):
    settings.GOOGLE_SEARCH_CX = ""
    assert await check_custom_search(settings) is True


@pytest.mark.asyncio
async def test_gemini_lists_models(settings, capsys, monkeypatch):
    body = {"models": [{"name": f"models/{settings.GEMINI_QUERY_MODEL}"}]}
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
    real_client = httpx.AsyncClient

    monkeypatch.setattr(
        "scripts.verify_setup.httpx.AsyncClient",
        lambda *args, **kwargs: real_client(transport=transport),
    )

    assert await check_gemini(settings) is True
    out = capsys.readouterr().out
    assert f"[OK] Model {settings.GEMINI_QUERY_MODEL}" in out
    assert f"[WARN] Model {settings.GEMINI_ANALYZE_MODEL}" in out

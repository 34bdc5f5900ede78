"""Verify API keys and the cases directory before starting the server."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import httpx

from osint_helper.config import get_settings


async def check_gemini(settings) -> bool:
    if not settings.GEMINI_API_KEY:
        print("[FAIL] Gemini: GEMINI_API_KEY not set")
        return False
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(
                f"{settings.GEMINI_BASE_URL.rstrip('/')}/models",
                headers={"x-goog-api-key": settings.GEMINI_API_KEY},
                timeout=15,
            )
            resp.raise_for_status()
            models = {m.get("name", "").removeprefix("models/") for m in resp.json().get("models", [])}
            for slug in {
                settings.GEMINI_QUERY_MODEL,
                settings.GEMINI_SEARCH_MODEL,
                settings.GEMINI_ANALYZE_MODEL,
            }:
                found = slug in models
                status = "OK" if found else "WARN"
                print(f"  [{status}] Model {slug}: {'available' if found else 'not found'}")
        print("[OK] Gemini API accessible")
        return True
    except Exception as exc:
        print(f"[FAIL] Gemini: {exc}")
        return False


async def check_custom_search(settings) -> bool:
    if not settings.GOOGLE_SEARCH_API_KEY or not settings.GOOGLE_SEARCH_CX:
        print("[WARN] Custom Search: key or CX not set, collection will use grounded search only")
        return True
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(
                settings.GOOGLE_SEARCH_URL,
                params={
                    "key": settings.GOOGLE_SEARCH_API_KEY,
                    "cx": settings.GOOGLE_SEARCH_CX,
                    "num": 1,
                    "q": "test",
                },
                timeout=15,
            )
            if resp.status_code == 429:
                print("[WARN] Custom Search: rate limited right now (429)")
                return True
            resp.raise_for_status()
        print("[OK] Custom Search API working")
        return True
    except Exception as exc:
        print(f"[FAIL] Custom Search: {exc}")
        return False


async def check_cases_dir(settings) -> bool:
    path = Path(settings.CASES_DIR)
    try:
        path.mkdir(parents=True, exist_ok=True)
        if not os.access(path, os.W_OK):
            raise PermissionError(f"{path} is not writable")
        count = len(list(path.glob("*.json")))
        print(f"[OK] Cases directory {path} ({count} cases)")
        return True
    except OSError as exc:
        print(f"[FAIL] Cases directory: {exc}")
        return False


async def main() -> None:
    settings = get_settings()
    print("=" * 50)
    print("OSINT Helper: setup verification")
    print("=" * 50)

    results = await asyncio.gather(
        check_gemini(settings),
        check_custom_search(settings),
        check_cases_dir(settings),
    )

    print("=" * 50)
    passed = sum(results)
    total = len(results)
    print(f"Results: {passed}/{total} checks passed")
    if not all(results):
        print("Some checks failed. Review output above.")
        sys.exit(1)
    print("All systems operational.")


if __name__ == "__main__":
    asyncio.run(main())

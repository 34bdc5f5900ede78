"""Health and readiness endpoints."""

from __future__ import annotations

import os

from fastapi import APIRouter, Depends

from osint_helper.api.dependencies import get_case_store
from osint_helper.services.case_store import CaseStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(store: CaseStore = Depends(get_case_store)) -> dict:
    writable = store.cases_dir.is_dir() and os.access(store.cases_dir, os.W_OK)
    ok = store.loaded and writable
    return {
        "status": "ready" if ok else "degraded",
        "cases_loaded": store.loaded,
        "cases_dir_writable": writable,
        "cases": len(store.list_cases()),
    }

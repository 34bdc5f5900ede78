"""Top-level API router aggregating all v1 sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from osint_helper.api.v1.analysis import router as analysis_router
from osint_helper.api.v1.cases import router as cases_router
from osint_helper.api.v1.collection import router as collection_router
from osint_helper.api.v1.health import router as health_router
from osint_helper.api.v1.queries import router as queries_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(queries_router)
api_router.include_router(cases_router)
api_router.include_router(collection_router)
api_router.include_router(analysis_router)

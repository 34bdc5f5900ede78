"""Shared FastAPI dependency injection.

Long-lived objects are built once in the application lifespan and kept on
``app.state``; handlers receive them through these getters.
"""

from __future__ import annotations

from fastapi import Request

from osint_helper.services.analysis_service import AnalysisService
from osint_helper.services.case_store import CaseStore
from osint_helper.services.collection_service import CollectionService
from osint_helper.services.query_service import QueryService


def _state_attr(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized")
    return value


def get_case_store(request: Request) -> CaseStore:
    return _state_attr(request, "case_store")


def get_query_service(request: Request) -> QueryService:
    return _state_attr(request, "query_service")


def get_collection_service(request: Request) -> CollectionService:
    return _state_attr(request, "collection_service")


def get_analysis_service(request: Request) -> AnalysisService:
    return _state_attr(request, "analysis_service")

"""Query generation endpoints: open a case from a task, identity variants."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from osint_helper.api.dependencies import get_query_service
from osint_helper.api.v1.schemas.queries import (
    GenerateQueriesRequest,
    GenerateQueriesResponse,
    VariantsRequest,
)
from osint_helper.services.query_service import IdentityVariants, QueryService

router = APIRouter(prefix="/queries", tags=["queries"])


@router.post("/generate", response_model=GenerateQueriesResponse)
async def generate_queries(
    request: GenerateQueriesRequest,
    service: QueryService = Depends(get_query_service),
) -> GenerateQueriesResponse:
    """Generate search queries for a task and open a new case holding them."""
    case = await service.generate_queries(request.task)
    return GenerateQueriesResponse(case_id=case.case_id, queries=case.generated_queries)


@router.post("/variants", response_model=IdentityVariants)
async def generate_variants(
    request: VariantsRequest,
    service: QueryService = Depends(get_query_service),
) -> IdentityVariants:
    return await service.generate_variants(request.full_name)

"""Case session endpoints: read, list, delete, and edit queries."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from osint_helper.api.dependencies import get_case_store, get_query_service
from osint_helper.api.v1.schemas.cases import (
    CaseSummary,
    DeleteCaseResponse,
    UpdateQueriesRequest,
    UpdateQueriesResponse,
)
from osint_helper.models.case import Case
from osint_helper.services.case_store import CaseStore
from osint_helper.services.query_service import QueryService
from osint_helper.utils.exceptions import CaseNotFoundError
from osint_helper.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/cases", tags=["cases"])


@router.get("", response_model=list[CaseSummary])
async def list_cases(store: CaseStore = Depends(get_case_store)) -> list[CaseSummary]:
    return [CaseSummary.from_case(case) for case in store.list_cases()]


@router.get("/{case_id}", response_model=Case)
async def get_case(case_id: str, store: CaseStore = Depends(get_case_store)) -> Case:
    """Full case record, used to resume an investigation."""
    case = store.require_case(case_id)
    logger.info("case_session_loaded", case_id=case_id)
    return case


@router.delete("/{case_id}", response_model=DeleteCaseResponse)
async def delete_case(case_id: str, store: CaseStore = Depends(get_case_store)) -> DeleteCaseResponse:
    if not await store.delete_case(case_id):
        raise CaseNotFoundError(case_id)
    return DeleteCaseResponse(case_id=case_id, deleted=True)


@router.put("/{case_id}/queries", response_model=UpdateQueriesResponse)
async def update_queries(
    case_id: str,
    request: UpdateQueriesRequest,
    service: QueryService = Depends(get_query_service),
) -> UpdateQueriesResponse:
    """Replace the case's query list with the edited one."""
    case = await service.update_queries(case_id, request.queries)
    return UpdateQueriesResponse(
        case_id=case_id,
        updated_count=len(case.generated_queries),
        queries=case.generated_queries,
    )

"""Analysis endpoint: synthesize collected data into lookalike profiles."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from osint_helper.api.dependencies import get_analysis_service
from osint_helper.api.v1.schemas.analysis import AnalyzeResponse
from osint_helper.services.analysis_service import AnalysisService

router = APIRouter(prefix="/cases", tags=["analysis"])


@router.post("/{case_id}/analyze", response_model=AnalyzeResponse)
async def analyze_case(
    case_id: str,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalyzeResponse:
    """Run synthesis and store the profiles as the case's analysis.

    Can take minutes for large cases: every batch is one LLM call.
    """
    result = await service.analyze(case_id)
    return AnalyzeResponse(
        analysis_data=result.profiles,
        summaries=result.summaries,
        groups=result.groups,
        batches=result.batches,
    )

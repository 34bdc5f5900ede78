"""Request/response models for case session endpoints."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from osint_helper.models.case import CamelModel, Case


class CaseSummary(CamelModel):
    case_id: str
    task: str
    queries_count: int
    collected_count: int
    has_analysis: bool
    created_at: int
    updated_at: int

    @classmethod
    def from_case(cls, case: Case) -> CaseSummary:
        return cls(
            case_id=case.case_id,
            task=case.task,
            queries_count=len(case.generated_queries),
            collected_count=len(case.collected_data),
            has_analysis=case.analysis is not None,
            created_at=case.created_at,
            updated_at=case.updated_at,
        )


class UpdateQueriesRequest(CamelModel):
    queries: list[str] = Field(validation_alias=AliasChoices("queries", "updatedQueries"))


class UpdateQueriesResponse(CamelModel):
    success: bool = True
    case_id: str
    updated_count: int
    queries: list[str]


class DeleteCaseResponse(CamelModel):
    case_id: str
    deleted: bool

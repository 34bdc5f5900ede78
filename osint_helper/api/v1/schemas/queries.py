"""Request/response models for query generation endpoints."""

from __future__ import annotations

from pydantic import Field

from osint_helper.models.case import CamelModel


class GenerateQueriesRequest(CamelModel):
    task: str = Field(..., examples=["Ivan Petrov"])


class GenerateQueriesResponse(CamelModel):
    case_id: str
    queries: list[str]


class VariantsRequest(CamelModel):
    full_name: str = Field(..., examples=["Медведев Сергей Викторович"])

"""Request/response models for collection endpoints."""

from __future__ import annotations

from pydantic import Field

from osint_helper.models.case import CamelModel, CollectedEntry, SourceAPI


class CollectRequest(CamelModel):
    search_query: str
    specialized_sources: list[str] | None = Field(default=None, examples=[["kad.arbitr.ru"]])


class CollectResponse(CamelModel):
    message: str = "Data collected"
    entries_count: int
    processed_results: int
    source: SourceAPI
    collected_count: int


class CollectAllRequest(CamelModel):
    queries: list[str] | None = None
    specialized_sources: list[str] | None = None


class CollectAllResponse(CamelModel):
    total_queries: int
    batches: int
    succeeded: int
    failed: int
    added: int
    processed_results: int
    collected_count: int
    failed_queries: list[str] = Field(default_factory=list)


class CountResponse(CamelModel):
    count: int


class ManualInputRequest(CamelModel):
    name: str
    content: str
    url: str | None = None


class ManualInputResponse(CamelModel):
    success: bool = True
    message: str
    data: CollectedEntry

"""Case and collected-entry models, persisted and served in camelCase."""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MANUAL_INPUT_QUERY = "MANUAL_INPUT"


def now_ms() -> int:
    return int(time.time() * 1000)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_case_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SourceAPI(str, Enum):
    CS_API = "CS_API"
    GEMINI = "GEMINI"
    MANUAL = "MANUAL"


class CollectedEntry(CamelModel):
    query: str
    url: str
    title: str = ""
    snippet: str = ""
    source_api: SourceAPI = Field(alias="sourceAPI")
    timestamp: str = Field(default_factory=utc_timestamp)


class CaseCreate(CamelModel):
    """Initial case data, before the store stamps the timestamps."""

    case_id: str = Field(default_factory=new_case_id)
    task: str
    generated_queries: list[str] = Field(default_factory=list)
    collected_data: list[CollectedEntry] = Field(default_factory=list)
    analysis: str | None = None


class Case(CamelModel):
    """One investigation. Instances are immutable; updates build a new object."""

    case_id: str
    task: str
    generated_queries: list[str] = Field(default_factory=list)
    collected_data: list[CollectedEntry] = Field(default_factory=list)
    analysis: str | None = None
    created_at: int
    updated_at: int

    def known_urls(self) -> set[str]:
        return {entry.url for entry in self.collected_data}

    def to_record(self) -> dict:
        """JSON-ready dict in the persisted field order."""
        return self.model_dump(mode="json", by_alias=True)

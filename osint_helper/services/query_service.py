"""Query generation, identity variants and query editing."""

from __future__ import annotations

from pydantic import Field

from osint_helper.clients.gemini import GeminiClient
from osint_helper.models.case import CamelModel, Case, CaseCreate
from osint_helper.prompts.queries import (
    QUERY_GENERATION_SYSTEM_PROMPT,
    QUERY_GENERATION_USER_PROMPT,
    QUERY_RESPONSE_SCHEMA,
    VARIANTS_SYSTEM_PROMPT,
    VARIANTS_USER_PROMPT,
)
from osint_helper.services.case_store import CaseStore
from osint_helper.utils.exceptions import InvalidRequestError, ModelResponseParsingError
from osint_helper.utils.logging import get_logger
from osint_helper.utils.text_processing import clean_strings, parse_llm_json

logger = get_logger(__name__)


class IdentityVariants(CamelModel):
    name_variants: list[str] = Field(default_factory=list)
    email_variants: list[str] = Field(default_factory=list)
    username_variants: list[str] = Field(default_factory=list)


class QueryService:
    def __init__(self, store: CaseStore, gemini: GeminiClient) -> None:
        self._store = store
        self._gemini = gemini

    async def generate_queries(self, task: str) -> Case:
        """Ask the LLM for search queries and open a new case holding them."""
        task = (task or "").strip()
        if not task:
            raise InvalidRequestError("Field 'task' is required")

        text = await self._gemini.generate_json(
            QUERY_GENERATION_SYSTEM_PROMPT,
            QUERY_GENERATION_USER_PROMPT.format(task=task),
            response_schema=QUERY_RESPONSE_SCHEMA,
        )
        parsed = parse_llm_json(text)

        # The model answers either {"queries": [...]} or a bare array.
        if isinstance(parsed, dict) and isinstance(parsed.get("queries"), list):
            raw_queries = parsed["queries"]
        elif isinstance(parsed, list):
            raw_queries = parsed
        else:
            logger.error("query_response_invalid", parsed=str(parsed)[:2000])
            raise ModelResponseParsingError(
                "Invalid LLM response: missing 'queries' array"
            )

        queries = clean_strings(raw_queries)
        case = await self._store.add_case(CaseCreate(task=task, generated_queries=queries))
        logger.info("queries_generated", case_id=case.case_id, count=len(queries))
        return case

    async def generate_variants(self, full_name: str) -> IdentityVariants:
        full_name = (full_name or "").strip()
        if not full_name:
            raise InvalidRequestError("Field 'fullName' is required")

        text = await self._gemini.generate_json(
            VARIANTS_SYSTEM_PROMPT,
            VARIANTS_USER_PROMPT.format(full_name=full_name),
        )
        parsed = parse_llm_json(text)

        keys = ("nameVariants", "emailVariants", "usernameVariants")
        if not isinstance(parsed, dict) or not all(isinstance(parsed.get(k), list) for k in keys):
            logger.error("variants_response_invalid", parsed=str(parsed)[:2000])
            raise ModelResponseParsingError(
                "Invalid LLM response: missing one of " + ", ".join(keys)
            )

        return IdentityVariants(
            name_variants=clean_strings(parsed["nameVariants"]),
            email_variants=clean_strings(parsed["emailVariants"]),
            username_variants=clean_strings(parsed["usernameVariants"]),
        )

    async def update_queries(self, case_id: str, queries: list[str]) -> Case:
        """Replace the case's query list wholesale."""
        case = await self._store.update_case(case_id, generated_queries=clean_strings(queries))
        logger.info("queries_updated", case_id=case_id, count=len(case.generated_queries))
        return case

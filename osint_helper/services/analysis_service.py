"""Lookalike synthesis over a case's collected data."""

from __future__ import annotations

import json
from dataclasses import dataclass

from osint_helper.clients.gemini import GeminiClient
from osint_helper.config import Settings
from osint_helper.models.case import CollectedEntry
from osint_helper.models.profile import (
    LookalikeGroup,
    LookalikeProfile,
    ProfileSummary,
    dump_profiles,
    group_profiles,
    normalize_profiles,
    summarize_profiles,
)
from osint_helper.prompts.analysis import (
    MERGE_SYSTEM_PROMPT,
    MERGE_USER_PROMPT,
    SYNTHESIS_SYSTEM_PROMPT,
    SYNTHESIS_USER_PROMPT,
)
from osint_helper.services.case_store import CaseStore
from osint_helper.utils.concurrency import run_with_concurrency
from osint_helper.utils.exceptions import InvalidRequestError, ModelResponseParsingError
from osint_helper.utils.logging import get_logger
from osint_helper.utils.text_processing import chunked, parse_llm_json, truncate_content

logger = get_logger(__name__)

_MAX_PROMPT_CHARS = 200_000


@dataclass
class AnalysisResult:
    profiles: list[LookalikeProfile]
    summaries: list[ProfileSummary]
    groups: list[LookalikeGroup]
    batches: int


def format_entry(entry: CollectedEntry) -> str:
    return (
        f'- Query: "{entry.query}", Title: "{entry.title}", Content: "{entry.snippet}", '
        f"URL: {entry.url} [Source: {entry.source_api.value}]"
    )


class AnalysisService:
    def __init__(self, settings: Settings, store: CaseStore, gemini: GeminiClient) -> None:
        self._store = store
        self._gemini = gemini
        self._model = settings.GEMINI_ANALYZE_MODEL
        self._batch_size = settings.ANALYSIS_BATCH_SIZE
        self._concurrency = settings.COLLECT_CONCURRENCY

    async def _synthesize(self, system_prompt: str, user_prompt: str) -> list[LookalikeProfile]:
        text = await self._gemini.generate_json(
            system_prompt,
            truncate_content(user_prompt, _MAX_PROMPT_CHARS),
            model=self._model,
            temperature=0.1,
        )
        return normalize_profiles(parse_llm_json(text))

    async def analyze(self, case_id: str) -> AnalysisResult:
        """Synthesize the case's collected data into lookalike profiles.

        Large cases are split into batches, synthesized separately, then
        merged in a final pass. The JSON profile list replaces the case's
        ``analysis``.

        Raises:
            InvalidRequestError: the case has no collected data.
            ModelResponseParsingError: an LLM response has no profile array.
        """
        case_id = (case_id or "").strip()
        if not case_id:
            raise InvalidRequestError("A valid 'caseId' is required")
        case = self._store.require_case(case_id)
        if not case.collected_data:
            raise InvalidRequestError(
                f"Case '{case_id}' has no collected data to analyze; collect data first"
            )

        batches = chunked(case.collected_data, self._batch_size)
        logger.info("analysis_started", case_id=case_id, entries=len(case.collected_data), batches=len(batches))

        if len(batches) == 1:
            profiles = await self._synthesize(
                SYNTHESIS_SYSTEM_PROMPT,
                SYNTHESIS_USER_PROMPT.format(
                    task=case.task,
                    part="all",
                    sources="\n".join(format_entry(e) for e in batches[0]),
                ),
            )
        else:
            profiles = await self._synthesize_batched(case.task, batches)

        await self._store.update_case(
            case_id, analysis=json.dumps(dump_profiles(profiles), ensure_ascii=False)
        )
        logger.info("analysis_complete", case_id=case_id, profiles=len(profiles))
        return AnalysisResult(
            profiles=profiles,
            summaries=summarize_profiles(profiles),
            groups=group_profiles(profiles),
            batches=len(batches),
        )

    async def _synthesize_batched(
        self, task: str, batches: list[list[CollectedEntry]]
    ) -> list[LookalikeProfile]:
        async def worker(batch: list[CollectedEntry], idx: int) -> list[LookalikeProfile]:
            return await self._synthesize(
                SYNTHESIS_SYSTEM_PROMPT,
                SYNTHESIS_USER_PROMPT.format(
                    task=task,
                    part=f"part {idx + 1} of {len(batches)}",
                    sources="\n".join(format_entry(e) for e in batch),
                ),
            )

        results = await run_with_concurrency(batches, worker, self._concurrency)
        partial: list[LookalikeProfile] = []
        failed = 0
        for result in results:
            if result is None:
                failed += 1
            else:
                partial.extend(result)

        if failed == len(batches):
            raise ModelResponseParsingError("Synthesis failed for every batch of collected data")
        if failed:
            logger.warning("analysis_batches_failed", failed=failed, batches=len(batches))
        if not partial:
            return []

        return await self._synthesize(
            MERGE_SYSTEM_PROMPT,
            MERGE_USER_PROMPT.format(
                task=task,
                profiles_json=json.dumps(dump_profiles(partial), ensure_ascii=False, indent=1),
            ),
        )

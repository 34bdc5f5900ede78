"""Collection workflows: search one query, search many, add manual entries."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from osint_helper.clients.custom_search import CustomSearchClient, SearchHit
from osint_helper.clients.gemini import GeminiClient
from osint_helper.config import Settings
from osint_helper.models.case import MANUAL_INPUT_QUERY, CollectedEntry, SourceAPI, now_ms
from osint_helper.prompts.collection import GROUNDED_SEARCH_SYSTEM_PROMPT
from osint_helper.services.case_store import CaseStore
from osint_helper.utils.concurrency import run_with_concurrency
from osint_helper.utils.exceptions import InvalidRequestError, SearchRateLimitedError
from osint_helper.utils.logging import get_logger
from osint_helper.utils.text_processing import chunked, clean_strings

logger = get_logger(__name__)

EventCallback = Callable[[str, dict[str, Any]], Awaitable[None]]


@dataclass
class CollectResult:
    query: str
    entries_count: int
    processed_results: int
    source: SourceAPI
    collected_count: int


@dataclass
class CollectAllSummary:
    total_queries: int
    batches: int
    succeeded: int = 0
    failed: int = 0
    added: int = 0
    processed_results: int = 0
    collected_count: int = 0
    failed_queries: list[str] = field(default_factory=list)


def build_search_query(query: str, specialized_sources: list[str] | None = None) -> str:
    """Narrow ``query`` to the given domains with ``site:`` operators."""
    sites = clean_strings(specialized_sources or [])
    if not sites:
        return query
    if len(sites) == 1:
        return f"{query} site:{sites[0]}"
    return f"{query} ({' OR '.join(f'site:{s}' for s in sites)})"


class CollectionService:
    def __init__(
        self,
        settings: Settings,
        store: CaseStore,
        search: CustomSearchClient,
        gemini: GeminiClient,
        *,
        batch_pause: float = 0.25,
    ) -> None:
        self._store = store
        self._search = search
        self._gemini = gemini
        self._concurrency = settings.COLLECT_CONCURRENCY
        self._batch_size = settings.COLLECT_BATCH_SIZE
        self._batch_pause = batch_pause

    def collected_count(self, case_id: str) -> int:
        return len(self._store.require_case(case_id).collected_data)

    async def _run_search(self, query: str) -> tuple[list[SearchHit], SourceAPI]:
        try:
            return await self._search.search(query), SourceAPI.CS_API
        except SearchRateLimitedError as exc:
            logger.warning("search_fallback_to_grounded", query=query, error=str(exc))

        grounded = await self._gemini.grounded_search(query, GROUNDED_SEARCH_SYSTEM_PROMPT)
        hits = [
            SearchHit(url=url, title=f"[Gemini Result] {query}", snippet=grounded.text)
            for url in grounded.urls
        ]
        return hits, SourceAPI.GEMINI

    async def collect(
        self,
        case_id: str,
        search_query: str,
        specialized_sources: list[str] | None = None,
    ) -> CollectResult:
        """Run one query and append its new results to the case.

        Results whose URL is already in the case, or repeated within this
        result set, are dropped.
        """
        case_id = (case_id or "").strip()
        search_query = (search_query or "").strip()
        if not case_id or not search_query:
            raise InvalidRequestError("Non-empty 'caseId' and 'searchQuery' are required")
        self._store.require_case(case_id)

        hits, source = await self._run_search(build_search_query(search_query, specialized_sources))
        candidates = [
            CollectedEntry(
                query=search_query,
                url=hit.url,
                title=hit.title,
                snippet=hit.snippet,
                source_api=source,
            )
            for hit in hits
        ]

        # Re-read after the search: other workers may have appended meanwhile.
        # No await between this read and the cache swap in update_case.
        case = self._store.require_case(case_id)
        seen = case.known_urls()
        new_entries: list[CollectedEntry] = []
        for entry in candidates:
            if entry.url not in seen:
                seen.add(entry.url)
                new_entries.append(entry)

        updated = await self._store.update_case(
            case_id, collected_data=[*case.collected_data, *new_entries]
        )
        logger.info(
            "collection_complete",
            case_id=case_id,
            query=search_query,
            source=source.value,
            hits=len(hits),
            added=len(new_entries),
        )
        return CollectResult(
            query=search_query,
            entries_count=len(new_entries),
            processed_results=len(hits),
            source=source,
            collected_count=len(updated.collected_data),
        )

    async def collect_all(
        self,
        case_id: str,
        queries: list[str] | None = None,
        specialized_sources: list[str] | None = None,
        on_event: EventCallback | None = None,
    ) -> CollectAllSummary:
        """Collect every query of the case in batches with bounded parallelism.

        A failed query is counted and skipped; it never stops the others.
        """
        case = self._store.require_case(case_id)
        pending = clean_strings(queries if queries is not None else case.generated_queries)
        if not pending:
            raise InvalidRequestError("Case has no queries to collect")

        batches = chunked(pending, self._batch_size)
        summary = CollectAllSummary(total_queries=len(pending), batches=len(batches))

        async def emit(event: str, data: dict[str, Any]) -> None:
            if on_event is not None:
                await on_event(event, data)

        for batch_idx, batch in enumerate(batches):
            await emit("batch_start", {"batch": batch_idx + 1, "batches": len(batches), "size": len(batch)})

            async def worker(query: str, _idx: int) -> CollectResult:
                try:
                    result = await self.collect(case_id, query, specialized_sources)
                except Exception as exc:
                    await emit("query_failed", {"query": query, "error": str(exc)})
                    raise
                await emit(
                    "query_done",
                    {"query": query, "added": result.entries_count, "source": result.source.value},
                )
                return result

            results = await run_with_concurrency(batch, worker, self._concurrency)
            for query, result in zip(batch, results):
                if result is None:
                    summary.failed += 1
                    summary.failed_queries.append(query)
                    continue
                summary.succeeded += 1
                summary.added += result.entries_count
                summary.processed_results += result.processed_results

            # The case may have been deleted while the batch ran.
            current = self._store.get_case(case_id)
            summary.collected_count = len(current.collected_data) if current is not None else 0
            await emit(
                "batch_done",
                {
                    "batch": batch_idx + 1,
                    "batches": len(batches),
                    "added": summary.added,
                    "collected_count": summary.collected_count,
                },
            )
            if self._batch_pause and batch_idx < len(batches) - 1:
                await asyncio.sleep(self._batch_pause)

        logger.info(
            "collect_all_complete",
            case_id=case_id,
            queries=summary.total_queries,
            failed=summary.failed,
            added=summary.added,
        )
        return summary

    async def add_manual_entry(
        self,
        case_id: str,
        name: str,
        content: str,
        url: str | None = None,
    ) -> CollectedEntry:
        """Append one user-supplied entry to the case."""
        case_id = (case_id or "").strip()
        if not case_id:
            raise InvalidRequestError("A valid 'caseId' is required")
        name = (name or "").strip()
        if not name or not (content or "").strip():
            raise InvalidRequestError("Fields 'name' and 'content' are required for manual input")

        case = self._store.require_case(case_id)
        url = (url or "").strip() or f"manual-input://{case_id}/{now_ms()}"
        if url in case.known_urls():
            raise InvalidRequestError(f"An entry with url '{url}' is already collected")

        entry = CollectedEntry(
            query=MANUAL_INPUT_QUERY,
            url=url,
            title=name,
            snippet=content,
            source_api=SourceAPI.MANUAL,
        )
        await self._store.update_case(case_id, collected_data=[*case.collected_data, entry])
        logger.info("manual_entry_added", case_id=case_id, url=url)
        return entry

"""Unit tests for the collection workflows."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from osint_helper.clients.custom_search import SearchHit
from osint_helper.clients.gemini import GroundedSearchResult
from osint_helper.models.case import MANUAL_INPUT_QUERY, CaseCreate, SourceAPI
from osint_helper.services.collection_service import CollectionService, build_search_query
from osint_helper.utils.exceptions import (
    CaseNotFoundError,
    InvalidRequestError,
    SearchRateLimitedError,
    UpstreamHTTPError,
)


def _hits(*urls: str) -> list[SearchHit]:
    return [SearchHit(url=url, title=f"title {url}", snippet="snippet") for url in urls]


@pytest.fixture
def search():
    mock = MagicMock()
    mock.search = AsyncMock(return_value=_hits("https://example.com/a"))
    return mock


@pytest.fixture
def gemini():
    mock = MagicMock()
    mock.grounded_search = AsyncMock(
        return_value=GroundedSearchResult(
            text="Grounded summary", urls=["https://grounded.example/1", "https://grounded.example/2"]
        )
    )
    return mock


@pytest_asyncio.fixture
async def service(settings, store, search, gemini):
    await store.load()
    return CollectionService(settings, store, search, gemini, batch_pause=0)


@pytest_asyncio.fixture
async def case(store):
    return await store.add_case(
        CaseCreate(task="Ivan Petrov", generated_queries=["q1", "q2", "q3"])
    )


def test_build_search_query():
    assert build_search_query("Ivan Petrov") == "Ivan Petrov"
    assert build_search_query("Ivan Petrov", ["kad.arbitr.ru"]) == "Ivan Petrov site:kad.arbitr.ru"
    assert (
        build_search_query("Ivan Petrov", ["vk.com", " ", "ok.ru"])
        == "Ivan Petrov (site:vk.com OR site:ok.ru)"
    )


@pytest.mark.asyncio
async def test_collect_appends_entries(service, store, case):
    result = await service.collect(case.case_id, "Ivan Petrov")

    assert result.entries_count == 1
    assert result.processed_results == 1
    assert result.source is SourceAPI.CS_API
    stored = store.get_case(case.case_id)
    assert [e.url for e in stored.collected_data] == ["https://example.com/a"]
    assert stored.collected_data[0].query == "Ivan Petrov"


@pytest.mark.asyncio
async def test_same_query_twice_keeps_one_entry(service, store, case):
    await service.collect(case.case_id, "Ivan Petrov")
    second = await service.collect(case.case_id, "Ivan Petrov")

    assert second.entries_count == 0
    assert second.processed_results == 1
    assert len(store.get_case(case.case_id).collected_data) == 1


@pytest.mark.asyncio
async def test_duplicates_within_one_result_set(service, search, store, case):
    search.search.return_value = _hits("https://example.com/a", "https://example.com/a")

    result = await service.collect(case.case_id, "q")

    assert result.entries_count == 1
    assert result.collected_count == 1


@pytest.mark.asyncio
async def test_specialized_sources_narrow_the_query(service, search, case):
    await service.collect(case.case_id, "Ivan Petrov", ["kad.arbitr.ru"])
    search.search.assert_awaited_once_with("Ivan Petrov site:kad.arbitr.ru")


@pytest.mark.asyncio
async def test_rate_limit_falls_back_to_grounded_search(service, search, gemini, store, case):
    search.search.side_effect = SearchRateLimitedError("429")

    result = await service.collect(case.case_id, "Ivan Petrov")

    assert result.source is SourceAPI.GEMINI
    assert result.entries_count == 2
    entries = store.get_case(case.case_id).collected_data
    assert {e.source_api for e in entries} == {SourceAPI.GEMINI}
    assert entries[0].title == "[Gemini Result] Ivan Petrov"
    assert entries[0].snippet == "Grounded summary"
    gemini.grounded_search.assert_awaited_once()


@pytest.mark.asyncio
async def test_other_search_errors_propagate(service, search, gemini, store, case):
    search.search.side_effect = UpstreamHTTPError(403, "forbidden")

    with pytest.raises(UpstreamHTTPError):
        await service.collect(case.case_id, "q")
    gemini.grounded_search.assert_not_called()
    assert store.get_case(case.case_id).collected_data == []


@pytest.mark.asyncio
async def test_collect_validates_input(service, search):
    with pytest.raises(InvalidRequestError):
        await service.collect("", "q")
    with pytest.raises(InvalidRequestError):
        await service.collect("case", "  ")
    with pytest.raises(CaseNotFoundError):
        await service.collect("missing", "q")
    search.search.assert_not_called()


@pytest.mark.asyncio
async def test_collect_all_counts_failures_and_keeps_going(settings, store, search, gemini, case):
    settings.COLLECT_BATCH_SIZE = 2
    service = CollectionService(settings, store, search, gemini, batch_pause=0)

    async def fake_search(query: str):
        if query == "q2":
            raise UpstreamHTTPError(400, "bad")
        return _hits(f"https://example.com/{query}")

    search.search.side_effect = fake_search
    events: list[tuple[str, dict]] = []

    async def on_event(event: str, data: dict) -> None:
        events.append((event, data))

    summary = await service.collect_all(case.case_id, on_event=on_event)

    assert summary.total_queries == 3
    assert summary.batches == 2
    assert summary.succeeded == 2
    assert summary.failed == 1
    assert summary.failed_queries == ["q2"]
    assert summary.added == 2
    assert summary.collected_count == 2
    names = [e for e, _ in events]
    assert names.count("batch_start") == 2
    assert names.count("batch_done") == 2
    assert names.count("query_failed") == 1
    assert names.count("query_done") == 2


@pytest.mark.asyncio
async def test_collect_all_shared_urls_are_stored_once(service, store, case):
    summary = await service.collect_all(case.case_id)

    assert summary.succeeded == 3
    assert summary.added == 1
    assert len(store.get_case(case.case_id).collected_data) == 1


@pytest.mark.asyncio
async def test_collect_all_requires_queries(service, store):
    empty = await store.add_case(CaseCreate(task="t"))
    with pytest.raises(InvalidRequestError):
        await service.collect_all(empty.case_id)


@pytest.mark.asyncio
async def test_collect_all_explicit_queries(service, search, case):
    summary = await service.collect_all(case.case_id, queries=["only this"])
    assert summary.total_queries == 1
    search.search.assert_awaited_once_with("only this")


@pytest.mark.asyncio
async def test_manual_entry(service, store, case):
    entry = await service.add_manual_entry(case.case_id, "Note", "Met at conference")

    assert entry.query == MANUAL_INPUT_QUERY
    assert entry.source_api is SourceAPI.MANUAL
    assert entry.url.startswith(f"manual-input://{case.case_id}/")
    assert store.get_case(case.case_id).collected_data == [entry]


@pytest.mark.asyncio
async def test_manual_entry_duplicate_url(service, case):
    await service.add_manual_entry(case.case_id, "A", "x", url="https://example.com/a")
    with pytest.raises(InvalidRequestError):
        await service.add_manual_entry(case.case_id, "B", "y", url="https://example.com/a")


@pytest.mark.asyncio
async def test_manual_entry_validation(service, case):
    with pytest.raises(InvalidRequestError):
        await service.add_manual_entry(case.case_id, "", "content")
    with pytest.raises(CaseNotFoundError):
        await service.add_manual_entry("missing", "n", "c")


@pytest.mark.asyncio
async def test_collect_all_survives_case_deletion(service, search, store, case):
    async def delete_then_search(query: str):
        await store.delete_case(case.case_id)
        return _hits("https://example.com/a")

    search.search.side_effect = delete_then_search

    summary = await service.collect_all(case.case_id)

    assert summary.failed == 3
    assert summary.collected_count == 0

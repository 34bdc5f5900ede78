"""Collection endpoints: single query, batched collect-all (plain and SSE), manual input."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from osint_helper.api.dependencies import get_collection_service
from osint_helper.api.v1.schemas.collection import (
    CollectAllRequest,
    CollectAllResponse,
    CollectRequest,
    CollectResponse,
    CountResponse,
    ManualInputRequest,
    ManualInputResponse,
)
from osint_helper.services.collection_service import CollectionService
from osint_helper.utils.exceptions import OsintHelperError
from osint_helper.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/cases", tags=["collection"])

# Streams whose client disconnected keep running until done.
_detached_runs: set[asyncio.Task] = set()


@router.post("/{case_id}/collect", response_model=CollectResponse)
async def collect(
    case_id: str,
    request: CollectRequest,
    service: CollectionService = Depends(get_collection_service),
) -> CollectResponse:
    """Run one search query and append new results to the case."""
    result = await service.collect(case_id, request.search_query, request.specialized_sources)
    return CollectResponse(
        entries_count=result.entries_count,
        processed_results=result.processed_results,
        source=result.source,
        collected_count=result.collected_count,
    )


@router.post("/{case_id}/collect-all", response_model=CollectAllResponse)
async def collect_all(
    case_id: str,
    request: CollectAllRequest | None = None,
    service: CollectionService = Depends(get_collection_service),
) -> CollectAllResponse:
    """Collect every query of the case in batches with bounded parallelism."""
    request = request or CollectAllRequest()
    summary = await service.collect_all(case_id, request.queries, request.specialized_sources)
    return CollectAllResponse(**asdict(summary))


@router.post("/{case_id}/collect-all/stream")
async def collect_all_stream(
    case_id: str,
    request: CollectAllRequest | None = None,
    service: CollectionService = Depends(get_collection_service),
) -> EventSourceResponse:
    """SSE variant of collect-all.

    Emits ``batch_start``, ``query_done``/``query_failed`` and ``batch_done``
    while running, then a final ``done`` carrying the summary, or ``error``.
    """
    request = request or CollectAllRequest()
    # Validate before opening the stream so bad ids still get a 404.
    service.collected_count(case_id)

    queue: asyncio.Queue[tuple[str, dict[str, Any]] | None] = asyncio.Queue()

    async def on_event(event: str, data: dict[str, Any]) -> None:
        await queue.put((event, data))

    async def run() -> None:
        try:
            summary = await service.collect_all(
                case_id, request.queries, request.specialized_sources, on_event=on_event
            )
            await queue.put(("done", CollectAllResponse(**asdict(summary)).model_dump(by_alias=True)))
        except OsintHelperError as exc:
            await queue.put(("error", {"detail": str(exc), "type": type(exc).__name__}))
        except Exception as exc:
            logger.error("collect_all_stream_failed", case_id=case_id, error=str(exc))
            await queue.put(("error", {"detail": "Internal server error", "type": type(exc).__name__}))
        finally:
            await queue.put(None)

    async def event_generator():
        task = asyncio.create_task(run())
        try:
            while True:
                item = await queue.get()
                if item is None:
                    return
                event_type, data = item
                yield {"event": event_type, "data": json.dumps(data, ensure_ascii=False)}
        finally:
            if not task.done():
                # Client went away; in-flight calls finish on their own.
                _detached_runs.add(task)
                task.add_done_callback(_detached_runs.discard)

    return EventSourceResponse(event_generator())


@router.get("/{case_id}/collected/count", response_model=CountResponse)
async def collected_count(
    case_id: str,
    service: CollectionService = Depends(get_collection_service),
) -> CountResponse:
    return CountResponse(count=service.collected_count(case_id))


@router.post("/{case_id}/manual", response_model=ManualInputResponse)
async def manual_input(
    case_id: str,
    request: ManualInputRequest,
    service: CollectionService = Depends(get_collection_service),
) -> ManualInputResponse:
    """Store a user-supplied snippet in the case."""
    entry = await service.add_manual_entry(case_id, request.name, request.content, request.url)
    return ManualInputResponse(
        message=f"Manual entry saved for case {case_id}",
        data=entry,
    )

"""Bounded-parallel fan-out over independent async work items."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from osint_helper.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_with_concurrency(
    items: Sequence[T],
    worker: Callable[[T, int], Awaitable[R]],
    concurrency: int = 3,
) -> list[R | None]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    A fixed pool of runners pulls indices from one shared queue. A failing
    item is logged and stored as ``None``; its siblings keep running.
    Results are returned in input order.
    """
    results: list[R | None] = [None] * len(items)
    queue: asyncio.Queue[int] = asyncio.Queue()
    for idx in range(len(items)):
        queue.put_nowait(idx)

    async def runner() -> None:
        while True:
            try:
                idx = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[idx] = await worker(items[idx], idx)
            except Exception as exc:
                logger.warning(
                    "concurrent_item_failed",
                    index=idx,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                results[idx] = None

    pool_size = max(1, min(concurrency, len(items)))
    await asyncio.gather(*(runner() for _ in range(pool_size)))
    return results

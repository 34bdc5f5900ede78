"""Unit tests for the bounded worker pool."""

from __future__ import annotations

import asyncio

import pytest

from osint_helper.utils.concurrency import run_with_concurrency


@pytest.mark.asyncio
async def test_results_keep_input_order():
    async def worker(item: int, idx: int) -> int:
        await asyncio.sleep(0.001 * (5 - item))
        return item * 10

    assert await run_with_concurrency([1, 2, 3, 4], worker, 2) == [10, 20, 30, 40]


@pytest.mark.asyncio
async def test_never_exceeds_concurrency():
    in_flight = 0
    peak = 0

    async def worker(item: int, idx: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return item

    await run_with_concurrency(list(range(10)), worker, 3)
    assert peak == 3


@pytest.mark.asyncio
async def test_failures_become_none_without_stopping_siblings():
    async def worker(item: str, idx: int) -> str:
        if item == "bad":
            raise RuntimeError("boom")
        return item.upper()

    results = await run_with_concurrency(["a", "bad", "c"], worker, 3)
    assert results == ["A", None, "C"]


@pytest.mark.asyncio
async def test_empty_input():
    async def worker(item, idx):
        raise AssertionError("not called")

    assert await run_with_concurrency([], worker, 3) == []

"""Exponential backoff with jitter for outbound provider calls."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

from osint_helper.config import Settings

RETRYABLE_STATUS = 429


@dataclass(frozen=True)
class RetryPolicy:
    """Retry and timeout knobs for one class of outbound call.

    ``max_retries`` counts extra attempts, so a call is tried at most
    ``max_retries + 1`` times.
    """

    max_retries: int = 2
    base_delay_ms: int = 250
    jitter_ms: int = 200
    timeout_ms: int = 15_000

    @classmethod
    def generic(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_retries=settings.HTTP_MAX_RETRIES,
            base_delay_ms=settings.HTTP_BACKOFF_BASE_MS,
            jitter_ms=settings.HTTP_BACKOFF_JITTER_MS,
            timeout_ms=settings.HTTP_TIMEOUT_MS,
        )

    @classmethod
    def llm(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_retries=settings.LLM_MAX_RETRIES,
            base_delay_ms=settings.LLM_BACKOFF_BASE_MS,
            jitter_ms=settings.LLM_BACKOFF_JITTER_MS,
            timeout_ms=settings.LLM_TIMEOUT_MS,
        )

    def floor_ms(self, attempt: int) -> float:
        """Lowest possible delay before retry ``attempt`` (0-indexed)."""
        return (2**attempt) * self.base_delay_ms

    def delay_seconds(
        self,
        attempt: int,
        uniform: Callable[[float, float], float] = random.uniform,
    ) -> float:
        jitter = uniform(0, self.jitter_ms) if self.jitter_ms > 0 else 0.0
        return (self.floor_ms(attempt) + jitter) / 1000


def is_retryable_status(status_code: int) -> bool:
    return status_code == RETRYABLE_STATUS or 500 <= status_code < 600

"""Resilient JSON-over-HTTP client shared by every provider adapter.

One :class:`ResilientClient` wraps a single ``httpx.AsyncClient`` for the
lifetime of the process. Each :meth:`ResilientClient.request` call gets its
own timeout and retries 429, 5xx and transport failures (timeouts included)
with exponential backoff plus jitter. Every other non-2xx status fails at
once with the status code and body text.
"""

from __future__ import annotations

import asyncio
import json
import random
from typing import Any, Awaitable, Callable

import httpx

from osint_helper.utils.exceptions import RetryExhaustedError, UpstreamError, UpstreamHTTPError
from osint_helper.utils.logging import get_logger
from osint_helper.utils.retry import RetryPolicy, is_retryable_status

logger = get_logger(__name__)


class _NoContent:
    """Sentinel type for successful responses with an empty body."""

    _instance: _NoContent | None = None

    def __new__(cls) -> _NoContent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_CONTENT"

    def __bool__(self) -> bool:
        return False


NO_CONTENT = _NoContent()

_JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class ResilientClient:
    """httpx wrapper adding JSON (de)serialization, timeouts and retry."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        default_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        uniform: Callable[[float, float], float] = random.uniform,
    ) -> None:
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        self._default_policy = default_policy or RetryPolicy()
        self._sleep = sleep
        self._uniform = uniform

    async def request(
        self,
        url: str,
        method: str = "GET",
        *,
        headers: dict[str, str] | None = None,
        body: Any = None,
        params: dict[str, Any] | None = None,
        policy: RetryPolicy | None = None,
        max_retries: int | None = None,
        timeout_ms: int | None = None,
    ) -> Any:
        """Send one JSON request and return the parsed response body.

        ``max_retries`` and ``timeout_ms`` override the matching fields of
        ``policy`` (or the client default). Returns :data:`NO_CONTENT` for an
        empty 2xx body.

        Raises:
            UpstreamHTTPError: non-retryable non-2xx status.
            RetryExhaustedError: every attempt hit 429, 5xx or a transport error.
        """
        policy = policy or self._default_policy
        if max_retries is not None:
            policy = RetryPolicy(
                max_retries=max_retries,
                base_delay_ms=policy.base_delay_ms,
                jitter_ms=policy.jitter_ms,
                timeout_ms=policy.timeout_ms,
            )
        effective_timeout_ms = timeout_ms if timeout_ms is not None else policy.timeout_ms

        request_headers = {**_JSON_HEADERS, **(headers or {})}
        content = json.dumps(body, ensure_ascii=False).encode("utf-8") if body is not None else None
        log_url = url.split("?", 1)[0]

        attempts = 0
        last_status: int | None = None
        last_error = ""
        for attempt in range(policy.max_retries + 1):
            attempts += 1
            try:
                # httpx applies its timeout per phase; the deadline bounds the whole attempt.
                async with asyncio.timeout(effective_timeout_ms / 1000):
                    resp = await self._client.request(
                        method,
                        url,
                        headers=request_headers,
                        content=content,
                        params=params,
                        timeout=effective_timeout_ms / 1000,
                    )
            except TimeoutError:
                last_status = None
                last_error = f"TimeoutError: no response within {effective_timeout_ms} ms"
            except httpx.TransportError as exc:
                last_status = None
                last_error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
            else:
                if resp.is_success:
                    return _parse_body(resp, log_url)
                if not is_retryable_status(resp.status_code):
                    raise UpstreamHTTPError(resp.status_code, resp.text, log_url)
                last_status = resp.status_code
                last_error = f"HTTP {resp.status_code}"

            if attempt == policy.max_retries:
                break

            delay = policy.delay_seconds(attempt, self._uniform)
            logger.warning(
                "retry_attempt",
                url=log_url,
                method=method,
                attempt=attempt + 1,
                max_retries=policy.max_retries,
                delay=round(delay, 3),
                error=last_error,
            )
            await self._sleep(delay)

        logger.error(
            "retry_exhausted",
            url=log_url,
            method=method,
            attempts=attempts,
            last_status=last_status,
            error=last_error,
        )
        raise RetryExhaustedError(log_url, attempts, last_status, last_error)

    async def close(self) -> None:
        await self._client.aclose()


def _parse_body(resp: httpx.Response, url: str) -> Any:
    text = resp.text
    if not text.strip():
        return NO_CONTENT
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise UpstreamError(f"Invalid JSON in response from {url}: {exc}") from exc

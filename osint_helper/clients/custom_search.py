"""Google Custom Search JSON API adapter."""

from __future__ import annotations

from dataclasses import dataclass

from osint_helper.clients.http import NO_CONTENT, ResilientClient
from osint_helper.config import Settings
from osint_helper.utils.exceptions import ConfigurationError, RetryExhaustedError, SearchRateLimitedError
from osint_helper.utils.logging import get_logger
from osint_helper.utils.retry import RetryPolicy

logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchHit:
    url: str
    title: str
    snippet: str


class CustomSearchClient:
    """Runs one query against Custom Search and returns its result items."""

    def __init__(self, settings: Settings, http: ResilientClient) -> None:
        self._settings = settings
        self._http = http
        self._policy = RetryPolicy.llm(settings)

    async def search(self, query: str) -> list[SearchHit]:
        """Search ``query``.

        Raises:
            SearchRateLimitedError: the API kept answering 429 until retries ran out.
        """
        if not self._settings.GOOGLE_SEARCH_API_KEY or not self._settings.GOOGLE_SEARCH_CX:
            raise ConfigurationError("GOOGLE_SEARCH_API_KEY or GOOGLE_SEARCH_CX is not configured")

        try:
            data = await self._http.request(
                self._settings.GOOGLE_SEARCH_URL,
                "GET",
                params={
                    "key": self._settings.GOOGLE_SEARCH_API_KEY,
                    "cx": self._settings.GOOGLE_SEARCH_CX,
                    "num": self._settings.SEARCH_RESULTS_PER_QUERY,
                    "q": query,
                },
                policy=self._policy,
            )
        except RetryExhaustedError as exc:
            if exc.last_status == 429:
                raise SearchRateLimitedError(
                    f"Custom Search rate limit persisted after {exc.attempts} attempts"
                ) from exc
            raise

        if data is NO_CONTENT or not isinstance(data, dict):
            return []

        hits: list[SearchHit] = []
        for item in data.get("items") or []:
            if not isinstance(item, dict) or not item.get("link"):
                continue
            hits.append(
                SearchHit(
                    url=item["link"],
                    title=item.get("title") or "Untitled",
                    snippet=item.get("snippet") or "",
                )
            )
        logger.info("custom_search_complete", query=query, hits=len(hits))
        return hits

"""Gemini ``generateContent`` adapter: JSON generation and grounded search."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from osint_helper.clients.http import NO_CONTENT, ResilientClient
from osint_helper.config import Settings
from osint_helper.utils.exceptions import ConfigurationError, ModelResponseParsingError
from osint_helper.utils.logging import get_logger
from osint_helper.utils.retry import RetryPolicy

logger = get_logger(__name__)


@dataclass
class GroundedSearchResult:
    text: str
    urls: list[str] = field(default_factory=list)


class GeminiClient:
    """Thin wrapper over the Gemini REST API.

    Every call goes through :class:`ResilientClient` with the LLM retry
    policy (1000 ms base, 1000 ms jitter by default).
    """

    def __init__(self, settings: Settings, http: ResilientClient) -> None:
        self._settings = settings
        self._http = http
        self._policy = RetryPolicy.llm(settings)

    def _url(self, model: str) -> str:
        return f"{self._settings.GEMINI_BASE_URL.rstrip('/')}/models/{model}:generateContent"

    async def _generate(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self._settings.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        result = await self._http.request(
            self._url(model),
            "POST",
            headers={"x-goog-api-key": self._settings.GEMINI_API_KEY},
            body=payload,
            policy=self._policy,
        )
        if result is NO_CONTENT or not isinstance(result, dict):
            raise ModelResponseParsingError(f"Gemini model {model} returned an empty response")
        return result

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str | None = None,
        response_schema: dict[str, Any] | None = None,
        temperature: float | None = None,
    ) -> str:
        """Ask for a JSON answer and return the raw text of the first candidate."""
        model = model or self._settings.GEMINI_QUERY_MODEL
        generation_config: dict[str, Any] = {"responseMimeType": "application/json"}
        if response_schema is not None:
            generation_config["responseSchema"] = response_schema
        if temperature is not None:
            generation_config["temperature"] = temperature

        payload = {
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": generation_config,
        }
        result = await self._generate(model, payload)
        text = _candidate_text(result)
        if not text:
            logger.error("gemini_empty_candidate", model=model, response=str(result)[:2000])
            raise ModelResponseParsingError("LLM returned no content in its response")
        return text

    async def grounded_search(self, query: str, system_prompt: str) -> GroundedSearchResult:
        """Search through the ``googleSearch`` tool and return summary plus cited URLs."""
        model = self._settings.GEMINI_SEARCH_MODEL
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": f'Perform a search and synthesize information for: "{query}"'}],
                }
            ],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "tools": [{"googleSearch": {}}],
        }
        result = await self._generate(model, payload)
        candidate = _first_candidate(result)
        text = _candidate_text(result) or "No summary available."

        urls: list[str] = []
        metadata = candidate.get("groundingMetadata") or {}
        for chunk in metadata.get("groundingChunks") or []:
            uri = (chunk.get("web") or {}).get("uri") if isinstance(chunk, dict) else None
            if uri and uri not in urls:
                urls.append(uri)

        logger.info("grounded_search_complete", query=query, urls=len(urls))
        return GroundedSearchResult(text=text, urls=urls)


def _first_candidate(result: dict[str, Any]) -> dict[str, Any]:
    candidates = result.get("candidates") or []
    first = candidates[0] if candidates else None
    return first if isinstance(first, dict) else {}


def _candidate_text(result: dict[str, Any]) -> str:
    parts = (_first_candidate(result).get("content") or {}).get("parts") or []
    texts = [p.get("text", "") for p in parts if isinstance(p, dict) and p.get("text")]
    return "".join(texts).strip()

"""Exception hierarchy for the OSINT helper.

Every error raised on purpose by this package derives from
:class:`OsintHelperError`. The API layer maps the classes onto HTTP status
codes: :class:`InvalidRequestError` is 400, :class:`CaseNotFoundError` is 404
and everything else is 500.
"""

from __future__ import annotations


class OsintHelperError(Exception):
    """Base exception for all OSINT helper errors."""


class InvalidRequestError(OsintHelperError):
    """A required request field is missing or malformed."""


class CaseNotFoundError(OsintHelperError):
    """The case identifier does not resolve to a stored case."""

    def __init__(self, case_id: str) -> None:
        super().__init__(f"Case '{case_id}' not found")
        self.case_id = case_id


class ConfigurationError(OsintHelperError):
    """A provider was called without the credentials it needs."""


class UpstreamError(OsintHelperError):
    """Base for failures talking to a search or LLM provider."""


class UpstreamHTTPError(UpstreamError):
    """Provider answered with a non-retryable, non-2xx status."""

    def __init__(self, status_code: int, body: str, url: str = "") -> None:
        super().__init__(f"HTTP {status_code} from {url or 'upstream'}: {body[:500]}")
        self.status_code = status_code
        self.body = body
        self.url = url


class RetryExhaustedError(UpstreamError):
    """All attempts failed with retryable errors (429, 5xx, network, timeout)."""

    def __init__(self, url: str, attempts: int, last_status: int | None, last_error: str) -> None:
        super().__init__(
            f"Request to {url} failed after {attempts} attempts: {last_error}"
        )
        self.url = url
        self.attempts = attempts
        self.last_status = last_status


class SearchRateLimitedError(UpstreamError):
    """Search provider kept answering 429 until retries ran out."""


class ModelResponseParsingError(UpstreamError):
    """LLM output is not parseable JSON or lacks a mandatory structure."""

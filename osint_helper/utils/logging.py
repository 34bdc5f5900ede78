"""structlog setup shared by the API process, the scripts and the tests.

Provider credentials travel as a ``key=`` query parameter (Custom Search)
or an ``x-goog-api-key`` header (Gemini). Both can surface in upstream
error text, so every event passes through :func:`redact_secrets` before it
is rendered.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

# Third-party loggers that log every outbound request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")

# Event fields whose whole value is a credential.
_SECRET_FIELDS = frozenset({"api_key", "key", "x-goog-api-key", "authorization"})

_SECRET_IN_TEXT = re.compile(r"(?i)([?&]key=|x-goog-api-key[\"']?\s*[:=]\s*[\"']?)[^&\s\"',]+")

REDACTED = "***"


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        return _SECRET_IN_TEXT.sub(lambda m: m.group(1) + REDACTED, value)
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in _SECRET_FIELDS else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(v) for v in value)
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor masking API keys in field names and free text."""
    return _redact(event_dict)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        redact_secrets,
    ]


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Route stdlib and structlog records through one renderer on stdout.

    ``log_format`` is ``"console"`` for coloured dev output; anything else
    renders one JSON object per line, keeping Cyrillic names readable.
    """
    shared = _shared_processors()
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    level = getattr(logging, log_level.upper(), logging.INFO)
    root.setLevel(level)

    # uvicorn installs its own handlers; hand its records to the root one.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)

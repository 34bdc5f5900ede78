"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from osint_helper.api.router import api_router
from osint_helper.clients.custom_search import CustomSearchClient
from osint_helper.clients.gemini import GeminiClient
from osint_helper.clients.http import ResilientClient
from osint_helper.config import Settings, get_settings
from osint_helper.services.analysis_service import AnalysisService
from osint_helper.services.case_store import CaseStore
from osint_helper.services.collection_service import CollectionService
from osint_helper.services.query_service import QueryService
from osint_helper.utils.exceptions import CaseNotFoundError, InvalidRequestError, OsintHelperError
from osint_helper.utils.logging import get_logger, setup_logging
from osint_helper.utils.retry import RetryPolicy

logger = get_logger(__name__)


def _error(status_code: int, exc: Exception, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail or str(exc), "type": type(exc).__name__},
    )


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the application.

    ``http_client`` replaces the outbound httpx client, which lets tests
    mount an ``httpx.MockTransport`` in place of the real providers.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application startup and shutdown resources."""
        store = CaseStore(settings.CASES_DIR)
        await store.load()

        http = ResilientClient(
            http_client or httpx.AsyncClient(follow_redirects=True),
            default_policy=RetryPolicy.generic(settings),
        )
        gemini = GeminiClient(settings, http)
        search = CustomSearchClient(settings, http)

        app.state.case_store = store
        app.state.query_service = QueryService(store, gemini)
        app.state.collection_service = CollectionService(settings, store, search, gemini)
        app.state.analysis_service = AnalysisService(settings, store, gemini)

        logger.info("app_started", cases_dir=settings.CASES_DIR)
        yield

        # Shutdown
        await store.flush()
        await http.close()
        logger.info("app_stopped")

    application = FastAPI(
        title="OSINT Helper",
        description="Case-based OSINT collection and lookalike synthesis",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = [
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg', '')}"
            for err in exc.errors()
        ]
        logger.warning("request_invalid", path=request.url.path, errors=messages)
        return _error(400, exc, "; ".join(messages) or "Invalid request")

    @application.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
        logger.warning("request_invalid", path=request.url.path, error=str(exc))
        return _error(400, exc)

    @application.exception_handler(CaseNotFoundError)
    async def case_not_found_handler(request: Request, exc: CaseNotFoundError) -> JSONResponse:
        logger.warning("case_not_found", path=request.url.path, case_id=exc.case_id)
        return _error(404, exc)

    @application.exception_handler(OsintHelperError)
    async def osint_error_handler(request: Request, exc: OsintHelperError) -> JSONResponse:
        logger.error("request_failed", path=request.url.path, error=str(exc), type=type(exc).__name__)
        return _error(500, exc)

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return _error(500, exc, "Internal server error")

    return application


app = create_app()

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_QUERY_MODEL: str = "gemini-2.5-flash"
    GEMINI_SEARCH_MODEL: str = "gemini-2.5-flash"
    GEMINI_ANALYZE_MODEL: str = "gemini-2.5-pro"

    # Google Custom Search
    GOOGLE_SEARCH_API_KEY: str = ""
    GOOGLE_SEARCH_CX: str = ""
    GOOGLE_SEARCH_URL: str = "https://www.googleapis.com/customsearch/v1"
    SEARCH_RESULTS_PER_QUERY: int = 5

    # Case storage
    CASES_DIR: str = "data/cases"

    # Outbound HTTP: generic calls
    HTTP_TIMEOUT_MS: int = 15_000
    HTTP_MAX_RETRIES: int = 2
    HTTP_BACKOFF_BASE_MS: int = 250
    HTTP_BACKOFF_JITTER_MS: int = 200

    # Outbound HTTP: LLM and search calls
    LLM_TIMEOUT_MS: int = 120_000
    LLM_MAX_RETRIES: int = 5
    LLM_BACKOFF_BASE_MS: int = 1_000
    LLM_BACKOFF_JITTER_MS: int = 1_000

    # Workflow config
    COLLECT_CONCURRENCY: int = 3
    COLLECT_BATCH_SIZE: int = 10
    ANALYSIS_BATCH_SIZE: int = 40

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .urls import get_create_document_url


class AppConfig(BaseSettings):
    """Client configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the CRPT_ prefix.
    For example:
        - CRPT_API_URL=https://markirovka.demo.crpt.tech/api/v3/lk/documents/create
        - CRPT_REQUEST_LIMIT=10
        - CRPT_TIME_INTERVAL_SECONDS=1
        - CRPT_ACQUIRE_TIMEOUT_SECONDS=30

    Alternatively, settings can be provided programmatically when creating the client:
        api = CrptApi(TimeUnit.SECONDS, 1, 10, api_url="http://localhost:8080/create")
    """

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = Field(
        default_factory=get_create_document_url,
        min_length=1,
        description="Document creation endpoint the throttled calls are posted to",
    )

    request_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum number of requests dispatched per time window",
    )

    time_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Length of the rate limit window in seconds",
    )

    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="TCP connect timeout for the HTTP transport",
    )

    timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Read/write/pool timeout for the HTTP transport",
    )

    shutdown_grace_seconds: float = Field(
        default=60.0,
        ge=0,
        description="How long shutdown waits for the window resetter thread to finish",
    )

    acquire_timeout_seconds: Optional[float] = Field(
        default=None,
        ge=0,
        description="Maximum wait for a permit. None blocks until one is available",
    )

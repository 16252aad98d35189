"""Core configuration settings for the observability service.

@public

This module provides centralized configuration management for AI Observability
Core: which storage backend to use, where the HTTP routes are mounted, and the
latency bounds applied to storage calls and background scoring. Settings are
loaded from environment variables with .env file support via pydantic-settings.

Environment variables:
    OBSERVABILITY_STORAGE: Storage backend name (only "memory" is built in)
    API_PREFIX: Mount point for the observability routes
    DEFAULT_PER_PAGE: Page size used when a listing request omits perPage
    STORAGE_TIMEOUT_SECONDS: Upper bound for a single storage call in a handler
    SCORING_SHUTDOWN_TIMEOUT_SECONDS: How long shutdown waits for queued scoring jobs

Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values

Example:
    >>> from ai_observability_core.settings import settings
    >>> print(settings.api_prefix)
    /api/observability

Note:
    Settings are loaded once at module import and frozen. The process must be
    restarted to pick up changes to environment variables or the .env file.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Core configuration for the observability storage and HTTP layer.

    @public

    Attributes:
        observability_storage: Backend selected by create_observability_storage().
                               "memory" is the only built-in engine.

        api_prefix: Path prefix for the traces routes.

        default_per_page: Page size for listings that do not specify perPage.

        storage_timeout_seconds: Deadline applied by HTTP handlers to every
                                 storage call. Exceeding it maps to a 500.

        scoring_shutdown_timeout_seconds: Time the scoring worker gets to drain
                                          its queue on application shutdown.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Storage
    observability_storage: str = "memory"
    storage_timeout_seconds: float = Field(default=30.0, gt=0)

    # HTTP
    api_prefix: str = "/api/observability"
    default_per_page: int = Field(default=10, ge=1)

    # Scoring
    scoring_shutdown_timeout_seconds: float = Field(default=60.0, gt=0)


settings = Settings()
"""Global settings instance for the entire application.

@public
"""

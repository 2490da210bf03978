"""Application settings and configuration.

This module defines all configuration options for the Storefront Gate service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Storefront Gate service.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Storefront Gate", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Shared secret merged into public auth tokens. Left unset, every request
    # carrying `login: true` fails with a configuration error.
    user_token_secret: str | None = Field(default=None, alias="USER_TOKEN_SECRET")

    # Database configuration
    database_url: str = Field(default="sqlite:///./storefront_gate.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for the shared rate limit counter store
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # Rate limiting (fixed window with escalating blocks)
    rate_limit_backend: Literal["memory", "redis"] = Field(
        default="memory",
        alias="RATE_LIMIT_BACKEND",
    )
    rate_limit_requests: int = Field(default=50, alias="RATE_LIMIT_REQUESTS")
    rate_limit_window_ms: int = Field(default=15_000, alias="RATE_LIMIT_WINDOW_MS")
    rate_limit_block_ms: int = Field(default=5 * 60 * 1000, alias="RATE_LIMIT_BLOCK_MS")

    # Session descriptor freshness
    session_token_max_age_ms: int = Field(default=30_000, alias="SESSION_TOKEN_MAX_AGE_MS")

    # Paths forwarded without rate limiting or header checks
    auth_exempt_paths: list[str] = Field(
        default=["/health", "/docs", "/redoc", "/openapi.json"],
        alias="AUTH_EXEMPT_PATHS",
    )

    # CORS configuration for web frontend access
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:5500"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "PUT", "PATCH"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization", "ts", "login"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.

        Returns:
            Database URL compatible with synchronous database drivers
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def effective_cors_origins(self) -> list[str]:
        """Return configured CORS origins plus the deployed frontend, if any."""
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins


settings = Settings()

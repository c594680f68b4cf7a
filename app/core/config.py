"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY) are validated at
load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required_and_search (secret_key, search limits and timeout).
    """

    # App
    app_name: str = "case-search"
    app_version: str = "1.0.0"
    debug: bool = False

    # Relational store (read-only from search: assignments and associations)
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None
    db_disable_jit: bool = True

    # Security (identity comes from a JWT issued by the auth layer)
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Tenant
    tenant_header_name: str = "X-Tenant-ID"

    # Elasticsearch (document search engine)
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_username: str | None = None
    elasticsearch_password: SecretStr | None = None
    elasticsearch_verify_certs: bool = True
    # Client-level transport timeout; per-query deadline is search_query_timeout_ms.
    elasticsearch_request_timeout_seconds: float = 5.0

    # Search
    search_index_prefix: str = "org"
    search_query_timeout_ms: int = 500
    # Deadline for the assignment lookups behind a permission filter.
    search_lookup_timeout_ms: int = 1000
    search_default_limit: int = 10
    search_max_limit: int = 100
    search_max_query_length: int = 500

    # Request / middleware
    request_timeout_seconds: int = 30
    request_id_header: str = "X-Request-ID"

    # Redis Cache (assignment lookups for permission filters)
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    # Short TTL: stale assignments widen or narrow search scope until expiry.
    cache_ttl_search_assignments: int = 30

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required_and_search(self) -> "Settings":
        """Validate required env and search limits.

        - SECRET_KEY is required (JWT verification).
        - SEARCH_QUERY_TIMEOUT_MS and SEARCH_LOOKUP_TIMEOUT_MS must be positive.
        - 0 < SEARCH_DEFAULT_LIMIT <= SEARCH_MAX_LIMIT.
        """
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if self.search_query_timeout_ms <= 0:
            raise ValueError(
                f"SEARCH_QUERY_TIMEOUT_MS must be positive, got: {self.search_query_timeout_ms}"
            )
        if self.search_lookup_timeout_ms <= 0:
            raise ValueError(
                f"SEARCH_LOOKUP_TIMEOUT_MS must be positive, got: {self.search_lookup_timeout_ms}"
            )
        if not 0 < self.search_default_limit <= self.search_max_limit:
            raise ValueError(
                "SEARCH_DEFAULT_LIMIT must be between 1 and SEARCH_MAX_LIMIT "
                f"({self.search_max_limit}), got: {self.search_default_limit}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()

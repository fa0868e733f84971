"""Environment-based configuration using pydantic-settings.

Every section reads its own ``FAREWAY_<SECTION>_`` variables and a ``.env``
file in the working directory. Invalid or missing required values raise
``pydantic.ValidationError``, which the CLI treats as a fatal start-up error.

Example:
    >>> from fareway.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.cache.ttl
    300.0

    # Or with environment variables:
    # FAREWAY_STORE_URL=https://xyz.supabase.co
    # FAREWAY_STORE_SERVICE_KEY=...
    # FAREWAY_CACHE_REDIS_URL=redis://localhost:6379/0
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import (
    AnyHttpUrl,
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    computed_field,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


# Sections are built by default_factory, so each one reads .env itself
_DOTENV = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class ServerSettings(BaseSettings):
    """HTTP listener and per-call deadline."""

    model_config = SettingsConfigDict(env_prefix="FAREWAY_SERVER_", **_DOTENV)

    host: str = "0.0.0.0"
    port: Annotated[int, Field(ge=1, le=65535)] = 8081
    request_timeout: PositiveFloat = Field(default=10.0, description="Deadline for one tool call in seconds")


class StoreSettings(BaseSettings):
    """Record store (PostgREST / Supabase REST) connection."""

    model_config = SettingsConfigDict(env_prefix="FAREWAY_STORE_", **_DOTENV)

    url: AnyHttpUrl = Field(description="Base URL of the store, e.g. https://xyz.supabase.co")
    service_key: SecretStr = Field(description="Service key sent as apikey and bearer token")
    schema_name: str = "public"
    timeout: PositiveFloat = Field(default=5.0, description="Per-request timeout in seconds")
    probe_table: str = Field(default="golf_courses", description="Table queried by the liveness probe")


class CacheSettings(BaseSettings):
    """Read-through cache configuration."""

    model_config = SettingsConfigDict(env_prefix="FAREWAY_CACHE_", **_DOTENV)

    enabled: bool = True
    ttl: PositiveFloat = Field(default=300.0, description="Default cache TTL in seconds")
    max_size: PositiveInt = Field(default=1000, description="Max entries for the in-process cache")
    redis_url: SecretStr | None = Field(default=None, description="Redis URL for a shared cache")
    prefix: str = Field(default="fareway:", description="Key namespace")
    socket_timeout: PositiveFloat = Field(default=2.0, description="Redis socket timeout in seconds")

    @computed_field
    @property
    def backend(self) -> Literal["none", "memory", "redis"]:
        """Determine cache backend from configuration."""
        if not self.enabled:
            return "none"
        return "redis" if self.redis_url else "memory"


class AuthSettings(BaseSettings):
    """Shared-secret bearer authentication. Unset key disables auth."""

    model_config = SettingsConfigDict(env_prefix="FAREWAY_AUTH_", **_DOTENV)

    api_key: SecretStr | None = None

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_is_unset(cls, v: object) -> object:
        return None if isinstance(v, str) and not v.strip() else v

    @computed_field
    @property
    def enabled(self) -> bool:
        return self.api_key is not None


class RateLimitSettings(BaseSettings):
    """Fixed-window rate limiting per client address."""

    model_config = SettingsConfigDict(env_prefix="FAREWAY_RATELIMIT_", **_DOTENV)

    enabled: bool = True
    max_calls: PositiveInt = Field(default=100, description="Max requests per window")
    window_seconds: PositiveFloat = Field(default=60.0, description="Window length in seconds")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="FAREWAY_LOG_", **_DOTENV)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class GatewaySettings(BaseSettings):
    """Root settings for the gateway.

    Loads configuration from environment variables with FAREWAY_ prefix.
    Nested sections may also be set as ``FAREWAY_CACHE__TTL`` style variables.

    Example environment variables:
        FAREWAY_ENVIRONMENT=production
        FAREWAY_STORE_URL=https://xyz.supabase.co
        FAREWAY_AUTH_API_KEY=...
        FAREWAY_RATELIMIT_MAX_CALLS=100
    """

    model_config = SettingsConfigDict(
        env_prefix="FAREWAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "staging", "production", "test"] = "development"
    service_name: str = "fareway-database-mcp"
    version: str = "1.0.0"

    server: ServerSettings = Field(default_factory=ServerSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)  # type: ignore[arg-type]
    cache: CacheSettings = Field(default_factory=CacheSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        """Normalize environment name to lowercase."""
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @computed_field
    @property
    def log_format(self) -> Literal["console", "json"]:
        """Explicit FAREWAY_LOG_FORMAT, else JSON in production and console elsewhere."""
        return self.logging.format or ("json" if self.is_production else "console")


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """Get the process-wide settings instance (cached)."""
    return GatewaySettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()

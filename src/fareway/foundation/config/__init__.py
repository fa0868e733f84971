"""Configuration management using pydantic-settings."""

from .settings import (
    AuthSettings,
    CacheSettings,
    GatewaySettings,
    LoggingSettings,
    RateLimitSettings,
    ServerSettings,
    StoreSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "AuthSettings",
    "CacheSettings",
    "GatewaySettings",
    "LoggingSettings",
    "RateLimitSettings",
    "ServerSettings",
    "StoreSettings",
    "clear_settings_cache",
    "get_settings",
]

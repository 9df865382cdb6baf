"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000"

    # ==========================================================================
    # Translation vendor (DeepL)
    # ==========================================================================

    deepl_api_key: str = ""
    deepl_api_url: str = "https://api.deepl.com/v2/translate"
    deepl_timeout: float = 30.0

    # ==========================================================================
    # Localization
    # ==========================================================================

    default_locale: str = "en"
    locales: str = "en"

    # Path to the YAML plugin options (collections, fields, settings)
    plugin_config_path: str = ""

    # ==========================================================================
    # Authentication
    # ==========================================================================

    jwt_secret_key: str = "dev-jwt-secret-change-in-production"
    jwt_algorithm: str = "HS256"

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def locale_codes(self) -> list[str]:
        return [c.strip() for c in self.locales.split(",") if c.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once at startup."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

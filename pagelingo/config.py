"""
Engine configuration.

Loads settings from environment variables (prefixed `PAGELINGO_`) and an
optional `.env` file, with sensible defaults.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    log_level: str = "INFO"

    # ==========================================================================
    # Scheduling
    # ==========================================================================

    consolidation_interval: float = 2.0  # seconds between mutation sweeps
    visibility_interval: float = 0.6  # seconds between viewport checks
    viewport_buffer: float = 0.0  # extra pixels counted as on screen

    # ==========================================================================
    # Segmentation
    # ==========================================================================

    piece_size_limit: int = 1000
    translate_button_values: bool = False

    # ==========================================================================
    # Translation services
    # ==========================================================================

    translator_services: list[str] = ["google", "yandex"]
    rpc_timeout: float = 30.0

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def default_service(self) -> str:
        return self.translator_services[0] if self.translator_services else "google"

    class Config:
        env_prefix = "PAGELINGO_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

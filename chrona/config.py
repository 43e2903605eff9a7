"""
Configuration loader.

Uses pydantic-settings to read ``CHRONA_*`` environment variables (and an
optional .env file) and expose them as a typed Settings object. Provides a
cached get_settings() accessor.
"""

import os
import sys
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FORMAT = ":incoming :method :url :status :response-time :content-length"


class Settings(BaseSettings):
    """Middleware defaults loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="CHRONA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Format ────────────────────────────────────────────────
    FORMAT: str = DEFAULT_FORMAT
    BANNER: bool = False
    ALWAYS_CONNECTOR: bool = False

    # ── Output ────────────────────────────────────────────────
    COLORS: bool | None = None
    SINK: Literal["stdout", "logging"] = "stdout"

    # ── Limits ────────────────────────────────────────────────
    PLAN_CACHE_MAX_ENTRIES: int = 0

    # ── Environment ───────────────────────────────────────────
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    @property
    def colors_enabled(self) -> bool:
        """Explicit COLORS wins; otherwise colour only an interactive stdout."""
        if self.COLORS is not None:
            return self.COLORS
        if "NO_COLOR" in os.environ:
            return False
        return sys.stdout.isatty()

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()

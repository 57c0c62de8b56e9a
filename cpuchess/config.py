"""
Engine configuration.

Loads settings from environment variables (``CPUCHESS_`` prefix) or a
``.env`` file with Pydantic validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine and server settings."""

    # ─── Search ───
    search_depth: int = Field(default=3, ge=1)
    max_search_depth: int = Field(default=5, ge=1)
    mate_depth_near: int = Field(default=3, ge=1)
    mate_depth_far: int = Field(default=1, ge=0)
    queen_proximity: int = Field(default=2, ge=1)
    opening_replies: bool = True

    # ─── Server ───
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CPUCHESS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()

# filmshare/config.py
"""
Centralized application configuration using pydantic-settings.

All settings are read from environment variables or .env file.
Paths to the mapping document and list stores can be moved by editing .env only.
"""

import os
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# --- Paths (computed, not from env) ---
PROJECT_ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
DATA_PATH: str = os.path.join(PROJECT_ROOT, "data")
LOGS_PATH: str = os.path.join(PROJECT_ROOT, "logs")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Data files ---
    MAPPINGS_PATH: str = Field(
        default=os.path.join(DATA_PATH, "film-key-mappings.json"),
        description="Film key <-> short code mapping document"
    )
    CATALOG_PATH: str = Field(
        default=os.path.join(DATA_PATH, "films.json"),
        description="Film catalog read by the mapping regeneration job"
    )
    LISTS_PATH: str = Field(
        default=os.path.join(DATA_PATH, "lists"),
        description="Directory holding per-profile watchlist/watched stores"
    )

    # --- Sharing ---
    SHARE_ORIGIN: str = Field(
        default="http://localhost:3000",
        description="Origin used when building shared-favorites links"
    )
    STRICT_FILM_KEY_VALIDATION: bool = Field(
        default=False,
        description="Fail the whole decode on the first invalid film key"
    )

    # --- Server ---
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind host"
    )
    PORT: int = Field(
        default=8888,
        description="Server bind port"
    )
    API_RATE_LIMIT: int = Field(
        default=60,
        description="Requests per minute per client on /api/"
    )
    GENERAL_RATE_LIMIT: int = Field(
        default=200,
        description="Requests per minute per client elsewhere"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper

    @field_validator("SHARE_ORIGIN")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Singleton instance for easy import ---
settings = get_settings()


# --- Module-level exports ---
MAPPINGS_PATH: str = settings.MAPPINGS_PATH
CATALOG_PATH: str = settings.CATALOG_PATH
LISTS_PATH: str = settings.LISTS_PATH
SHARE_ORIGIN: str = settings.SHARE_ORIGIN

HOST: str = settings.HOST
PORT: int = settings.PORT
DEBUG: bool = settings.DEBUG
LOG_LEVEL: str = settings.LOG_LEVEL

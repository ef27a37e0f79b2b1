"""
Configuration settings for Me-API Playground.
Values come from environment variables or a ``.env`` file at the repo root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=str(_REPO_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Me-API Playground"
    APP_VERSION: str = "1.0.0"

    # Paths
    DATABASE_PATH: Path = Field(default=_REPO_ROOT / "data" / "profile.db")
    SEED_FILE: Path = Field(default=_REPO_ROOT / "data" / "sample_profile.yaml")

    # API Server
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=3000)
    API_RELOAD: bool = Field(default=False)
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    LOG_LEVEL: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_db_path() -> Path:
    return get_settings().DATABASE_PATH

"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # 忽略 .env 中的额外变量
    )

    # Project info
    PROJECT_NAME: str = "Note Hub API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Server (used by scripts/notes_cli.py serve)
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
    ]

    # Paths (relative to project root)
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent.parent

    # Note persistence
    NOTES_STORAGE_BACKEND: Literal["file", "memory"] = "file"
    NOTES_DATA_DIR: Path = PROJECT_ROOT / "data"
    NOTES_STORAGE_KEY: str = "notes"
    NOTES_SEED_SAMPLE: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Cinetrend Movie Discovery API"
    environment: Literal["dev", "test", "prod"] = "dev"
    log_level: str = "INFO"

    # keep the old frontend env var name working
    tmdb_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tmdb_api_key", "vite_tmdb_api_key"),
    )
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w500"
    tmdb_timeout_seconds: float = Field(default=10.0, gt=0.0)

    trend_store_backend: Literal["chroma", "memory"] = "chroma"
    chroma_persist_path: str = "./data/chroma"
    trend_collection_name: str = "search_trends_v1"

    trending_limit: int = Field(default=5, ge=1, le=20)
    search_debounce_ms: int = Field(default=1000, ge=0)

    max_sessions: int = Field(default=200, ge=1)
    session_idle_seconds: float = Field(default=1800.0, gt=0.0)


@lru_cache
def get_settings() -> Settings:
    return Settings()

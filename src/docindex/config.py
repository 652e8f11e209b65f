"""Runtime configuration for docindex."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(env_prefix="docindex_", env_file=".env", case_sensitive=False)

    environment: Literal["dev", "test", "prod"] = "dev"
    data_dir: Path = Path("./data")

    # Storage layout; both default to subdirectories of data_dir
    documents_dir: Path | None = None
    vector_store_dir: Path | None = None

    embedding_dim: int = 128

    default_search_limit: int = 10
    summary_max_length: int = 200
    topic_min_frequency: int = 3

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def resolved_documents_dir(self) -> Path:
        return self.documents_dir or self.data_dir / "docs"

    @property
    def resolved_vector_store_dir(self) -> Path:
        return self.vector_store_dir or self.data_dir / "vector_store"


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()

"""Configuration settings for the pagesearch service."""
import os
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Paths, relative to the working directory the service runs from
DATA_DIR = 'data'
INDEX_PATH = os.path.join(DATA_DIR, 'bm25_matrix.pkl')


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_prefix="PAGESEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ranking/index collaborator
    index_path: str = Field(default=INDEX_PATH, description="Pickled BM25 index")
    backend_url: Optional[str] = Field(
        default=None,
        description="Remote /search collaborator; the local index is used when unset",
    )
    backend_timeout: float = Field(default=10.0, gt=0, description="Seconds to wait for the collaborator")

    # Query bounds
    default_max_results: int = Field(default=100, ge=1)
    max_results_limit: int = Field(default=100, ge=1)
    default_page_size: int = Field(default=10, ge=1)
    page_size_limit: int = Field(default=50, ge=1)
    max_term_length: int = Field(default=256, ge=1)
    page_window: int = Field(default=10, ge=1, description="Page numbers offered around the current page")

    # Ranking
    preview_length: int = Field(default=100, ge=1)
    pagerank_weight: float = Field(default=1.0, ge=0)
    stopwords_path: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: Annotated[List[str], NoDecode] = Field(default=["*"])

    @field_validator('allowed_origins', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse comma-separated origins from env var."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('log_level')
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()

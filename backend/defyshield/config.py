"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from defyshield.analyzers.catalog import DEFAULT_CATEGORY_CAP, ScoringWeights


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_env: str = "development"
    app_debug: bool = False
    log_level: str = "INFO"

    # Chain access (Lisk L2 testnet by default)
    rpc_url: str = "https://rpc.sepolia-api.lisk.com"
    explorer_api_url: str = "https://sepolia-blockscout.lisk.com/api"
    explorer_api_key: str | None = None
    request_timeout_seconds: float = 10.0

    # Result cache
    cache_ttl_seconds: int = 3600
    cache_max_entries: int = 1024

    # Scoring
    score_category_cap: Optional[int] = DEFAULT_CATEGORY_CAP

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    @field_validator("request_timeout_seconds", "cache_ttl_seconds", "cache_max_entries", mode="after")
    @classmethod
    def validate_positive(cls, v, info):
        """Timeouts and cache sizes must be positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be greater than zero")
        return v

    @field_validator("score_category_cap", mode="after")
    @classmethod
    def validate_category_cap(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("score_category_cap must be non-negative")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(category_cap=self.score_category_cap)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Application configuration loaded from environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Central configuration for the video summarization service."""

    # Pipeline timing
    pipeline_min_seconds: float = Field(
        default=8.0, ge=0.0, description="Lower bound of the total simulated pipeline duration"
    )
    pipeline_max_seconds: float = Field(
        default=15.0, ge=0.0, description="Upper bound of the total simulated pipeline duration"
    )
    stage_weights: list[float] = Field(
        default_factory=lambda: [1.0, 1.0, 1.0, 1.0],
        description="Relative share of the pipeline duration spent in each stage",
    )

    # Job records
    initial_progress_percent: int = Field(
        default=5, ge=0, lt=100, description="Progress reported right after submission"
    )
    max_upload_bytes: int = Field(
        default=500 * 1024 * 1024, description="Largest accepted video size in bytes"
    )

    # Storage
    job_store_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Job store backend: memory or redis"
    )
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    job_ttl_seconds: int = Field(default=86400, description="Expiry applied to job keys in Redis")

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Render logs as JSON (console renderer otherwise)")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False}


# Singleton instance
settings = Settings()

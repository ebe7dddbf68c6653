"""Application configuration."""

import os
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    estimator_provider: Literal["ollama", "openai", "openrouter"] = "ollama"
    ollama_url: str = "http://127.0.0.1:11434/api/generate"
    ollama_model: str = "llama3.2:3b"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    openrouter_api_key: str | None = None
    openrouter_model: str = "tngtech/deepseek-r1t2-chimera"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    # Heuristic; tune against real logs before changing.
    similarity_threshold: float = Field(default=0.62, gt=0.0, lt=1.0)
    estimation_executor: Literal["inline", "fifo"] = "fifo"
    recovery_interval_seconds: int = Field(default=60, gt=0)
    recovery_age_seconds: int = Field(default=120, ge=0)
    default_timezone: str = "UTC"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

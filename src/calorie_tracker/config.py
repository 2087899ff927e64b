"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_DAILY_GOAL = 2000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    nutrient_source: str = "llm"
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    storage_path: str = ".calorie_tracker/storage.json"
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    default_daily_goal: int = DEFAULT_DAILY_GOAL
    timezone: str = "UTC"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_nutrient_source(raw: str) -> str:
    """Normalize the configured nutrient source name."""
    cleaned = raw.strip().lower()
    if cleaned in {"fdc", "usda"}:
        return "fdc"
    if cleaned in {"", "llm", "openai"}:
        return "llm"
    raise ValueError(f"Unknown nutrient source: {raw}")

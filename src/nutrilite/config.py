"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_ALLOWED_ORIGINS = (
    "https://nutrilite-app.netlify.app,"
    "https://reliable-jelly-ac1058.netlify.app,"
    "http://localhost:5173"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    usda_api_key: str | None = None
    usda_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    usda_timeout_seconds: float = 12.0
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    allowed_origins: str = DEFAULT_ALLOWED_ORIGINS
    timezone: str = "UTC"
    kcal_per_step: float = 0.04
    default_goal: int = 2000
    default_steps: int = 2500
    search_quiet_seconds: float = 0.35
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse the comma separated CORS origin list from env."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned == "*":
        return ["*"]
    origins: list[str] = []
    for chunk in cleaned.split(","):
        value = chunk.strip().rstrip("/")
        if value and value not in origins:
            origins.append(value)
    return origins

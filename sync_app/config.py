"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    # Credentials are optional: a missing key is reported per request.
    perplexity_api_key: str | None = None
    gemini_api_key: str | None = None
    elevenlabs_api_key: str | None = None
    elevenlabs_voice_id: str | None = None

    database_url: str = Field(
        default="sqlite:///./data/sync.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    perplexity_url: str = Field(default="https://api.perplexity.ai/chat/completions")
    perplexity_model: str = Field(default="sonar-pro")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
    )
    gemini_model: str = Field(default="gemini-pro")
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io/v1/text-to-speech")
    http_timeout_seconds: float = Field(default=60.0, gt=0)

    sync_start_index: int = Field(
        default=2,
        ge=0,
        description="Record position where the user started using Sync.",
    )
    prompt_config_path: Path = Field(default=_PACKAGE_DIR / "config" / "prompts.yaml")

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator(
        "perplexity_api_key",
        "gemini_api_key",
        "elevenlabs_api_key",
        "elevenlabs_voice_id",
    )
    @classmethod
    def blank_as_missing(cls, value: str | None) -> str | None:
        """Treat empty credential strings as unset."""

        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings

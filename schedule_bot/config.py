"""
Configuration management for schedule_bot.
Uses pydantic-settings to load from environment variables and .env files.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM Provider settings (request understanding + schedule explanation)
    llm_provider: Literal["anthropic", "openai", "gemini", "ollama"] = "openai"
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    gemini_api_key: str | None = None
    model_name: str = "gpt-4o-mini"
    llm_max_tokens: int = 1024

    # Ollama settings (for local LLMs)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:latest"

    # Google Calendar
    google_calendar_credentials_file: Path = Field(default=Path("./credentials.json"))
    google_calendar_token_file: Path = Field(default=Path("./token.json"))
    google_calendar_id: str = "primary"
    # IANA timezone name attached to created events, e.g. "Europe/Nicosia", "UTC"
    calendar_timezone: str = "UTC"

    # Slot planner
    max_sessions_per_day: int = 3
    # Oracle errors/timeouts count as "no conflict" when True, as a conflict when False
    oracle_fail_open: bool = True
    oracle_timeout_seconds: float | None = 10.0

    # Reminders on created session events
    reminder_email_minutes: int = 24 * 60
    reminder_popup_minutes: int = 15

    # Logging
    log_level: str = "INFO"

    @field_validator("max_sessions_per_day")
    @classmethod
    def _positive_cap(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_sessions_per_day must be at least 1")
        return v

    @field_validator("oracle_timeout_seconds", mode="before")
    @classmethod
    def _coerce_timeout(cls, v: object) -> object:
        """Accept "none", "off" or 0 to disable the probe timeout."""
        if isinstance(v, str) and v.strip().lower() in ("", "none", "off"):
            return None
        if v == 0:
            return None
        return v

    @field_validator("oracle_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float | None) -> float | None:
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError("oracle_timeout_seconds must be positive, or none/off/0 to disable")
        return v

    def get_api_key(self, provider: str | None = None) -> str:
        """Get the API key for the given provider (defaults to the configured one).

        Note: Ollama doesn't require an API key, returns 'ollama' as placeholder.
        """
        provider = provider or self.llm_provider
        if provider == "anthropic":
            if not self.anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY not set")
            return self.anthropic_api_key
        elif provider == "openai":
            if not self.openai_api_key:
                raise ValueError("OPENAI_API_KEY not set")
            return self.openai_api_key
        elif provider == "gemini":
            if not self.gemini_api_key:
                raise ValueError("GEMINI_API_KEY not set")
            return self.gemini_api_key
        elif provider == "ollama":
            return "ollama"
        else:
            raise ValueError(f"Unknown LLM provider: {provider}")


# Global settings instance
settings = Settings()

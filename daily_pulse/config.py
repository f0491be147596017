# daily_pulse/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL",
    )

    # Authentication
    API_SECRET_KEY: str | None = Field(
        default=None,
        description="Shared secret expected in the X-API-Key header for generate/delete",
    )

    # Content generation
    CONTENT_PROVIDER: str = Field(
        default="gemini",
        description="Content generator: gemini, openai, mock",
    )
    GEMINI_API_KEY: str | None = Field(
        default=None,
        description="Gemini API key (content + narration)",
    )
    GEMINI_MODEL: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model for grounded newsletter writing and JSON formatting",
    )
    OPENAI_API_KEY: str | None = Field(
        default=None,
        description="OpenAI API key when CONTENT_PROVIDER=openai",
    )
    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model when CONTENT_PROVIDER=openai",
    )

    # Narration
    NARRATION_PROVIDER: str = Field(
        default="gemini",
        description="Narration generator: gemini, placeholder",
    )
    GEMINI_TTS_MODEL: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Gemini text-to-speech model",
    )
    GEMINI_TTS_VOICE: str = Field(
        default="Kore",
        description="Prebuilt Gemini voice name",
    )

    # Storage
    AUDIO_STORAGE_PATH: str = Field(
        default="./data/audio",
        description="Flat directory holding one narration file per publish date",
    )
    AUDIO_FILE_PREFIX: str = Field(
        default="daily-pulse",
        description="Audio files are named <prefix>-<YYYY-MM-DD>.wav",
    )
    PUBLIC_URL: str = Field(
        default="http://localhost:3001",
        description="Public base URL used to build audio URLs",
    )

    # CORS
    CORS_ORIGINS: str = Field(
        default="http://localhost:8080",
        description="Comma-separated list of allowed CORS origins",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(
        default=True,
        description="Single-line JSON logs (Railway). Set false for human-readable output.",
    )

    # Background work
    CLEANUP_SCHEDULER_ENABLED: bool = Field(
        default=True,
        description="Register the daily 02:00 UTC retention cleanup on startup",
    )
    REJECT_CONCURRENT_GENERATION: bool = Field(
        default=False,
        description="Reject generate requests for a date that already has a generation in flight (409)",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Railway provides postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("PUBLIC_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def missing_provider_keys(self) -> list[str]:
        """API keys the selected content and narration providers need but don't have."""
        content = self.CONTENT_PROVIDER.lower().strip()
        narration = self.NARRATION_PROVIDER.lower().strip()
        missing = []
        if "gemini" in (content, narration) and not self.GEMINI_API_KEY:
            missing.append("GEMINI_API_KEY")
        if content == "openai" and not self.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")
        return missing


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()

"""
Parse AI Configuration Module.

Handles all application settings, feature flags, and environment configuration.
Uses pydantic-settings for validation and type safety.

Settings are read when get_settings() is first called, never at import time,
so that a .env loaded after startup is still honored.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    """Feature flags for enabling/disabling HTTP modules."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    documents: bool = True
    web: bool = True
    analysis: bool = True
    charts: bool = True

    def to_dict(self) -> dict[str, bool]:
        """Return feature flags as dictionary for health endpoint."""
        return {
            "documents": self.documents,
            "web": self.web,
            "analysis": self.analysis,
            "charts": self.charts,
        }


class GeminiSettings(BaseSettings):
    """Gemini API configuration."""

    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    api_key: str = Field(default="", description="Gemini API Key (empty = heuristic mode)")
    model: str = Field(default="gemini-2.5-flash", description="Model used for chat responses")
    max_output_tokens: int = Field(default=4096, ge=1)
    analysis_max_output_tokens: int = Field(
        default=1024,
        ge=1,
        description="Token cap for the short upload-time document analysis",
    )


class FetchSettings(BaseSettings):
    """Outbound URL fetching."""

    model_config = SettingsConfigDict(env_prefix="FETCH_")

    timeout_seconds: float = Field(default=15.0, gt=0)
    max_content_length: int = Field(default=50_000, ge=1)
    max_urls: int = Field(default=5, ge=1)
    max_concurrency: int = Field(default=5, ge=1)
    user_agent: str = "Mozilla/5.0 (compatible; ParseBot/1.0; +https://parse.app)"


class ContextSettings(BaseSettings):
    """Bounds applied when assembling model context."""

    model_config = SettingsConfigDict(env_prefix="CONTEXT_")

    large_document_threshold: int = Field(default=15_000, ge=1)
    section_size: int = Field(default=5_000, ge=1)
    history_limit: int = Field(default=10, ge=0)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    # Nested settings
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Configuration management for commentary retrieval."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ScraperAPI key; empty means direct requests only
    scraperapi_key: str = Field(default="")
    # Try Bible Hub when StudyLight is blocked, even before a block was seen
    use_alternative_sources: bool = Field(default=False)

    # Request limits
    max_commentaries: int = Field(default=3, description="Sources fetched per request")
    max_verses: int = Field(default=30, description="Largest verse range accepted")

    # Timeouts (seconds)
    retrieval_timeout: float = Field(default=12.0, description="Wall-clock ceiling for one retrieval")
    proxy_timeout: float = Field(default=15.0)
    direct_timeout: float = Field(default=8.0)
    alternative_timeout: float = Field(default=8.0)

    log_level: str = Field(default="INFO")

    @property
    def proxy_enabled(self) -> bool:
        return bool(self.scraperapi_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

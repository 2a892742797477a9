"""
Configuration management for the Newsdesk backend.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database configuration
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "newsdesk_dev"
    POSTGRES_USER: str = "newsdesk"
    POSTGRES_PASSWORD: str = ""

    # Service configuration
    SERVICE_HOST: str = "0.0.0.0"
    SERVICE_PORT: int = 8008
    LOG_LEVEL: str = "INFO"

    # Provider credentials (one per provider family, absent = skipped)
    GOOGLE_AI_API_KEY: Optional[str] = None
    OPENROUTER_API_KEY: Optional[str] = None
    DEEPSEEK_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None

    # Per-call timeouts (seconds)
    PROVIDER_TIMEOUT: int = 30
    SCRAPE_TIMEOUT: int = 20
    STORAGE_TIMEOUT: int = 20

    # Image storage (Supabase Storage REST API)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "news-images"

    # Autonomous publishing
    NEWS_AUTO_PUBLISH_ENABLED: bool = True
    NEWS_AUTO_PUBLISH_COUNT: int = 1
    NEWS_REVENUE_MIN_SCORE: int = 62
    ROAMING_MAX_CONCURRENT: int = 1  # 1 = sequential iterations
    NEWS_RETENTION_DAYS: int = 7
    NEWS_BOT_AUTHOR_ID: str = "global-intelligence-bot"
    CRON_SECRET: Optional[str] = None

    # Hourly scheduler
    SCHEDULER_ENABLED: bool = False
    SCHEDULER_CRON_MINUTE: int = 0

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL connection URL."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def async_database_url(self) -> str:
        """Construct async PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# Global settings instance
settings = Settings()

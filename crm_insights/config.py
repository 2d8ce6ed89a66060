"""Configuration management for the application."""

import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM settings
    llm_provider: str = "anthropic"
    llm_api_key: Optional[str] = None  # Missing key disables remote calls
    llm_model: str = "claude-haiku-4-5-20251001"
    llm_max_tokens: int = 4096
    llm_sentiment_max_tokens: int = 2048

    # CRM account feed settings
    crm_feed_url: Optional[str] = None  # Unset = bundled sample data
    crm_api_key: Optional[str] = None
    crm_feed_limit: int = 250

    # Reachability probe timeout in seconds
    probe_timeout: float = 3.0

    log_level: str = "WARNING"

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False


def load_settings() -> Settings:
    """Load and return application settings."""
    load_dotenv()
    return Settings()


def configure_logging(level: str = "WARNING") -> None:
    """Install a single stream handler on the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=True,
    )

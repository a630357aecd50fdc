"""
Configuration management for ChaosChain actions.

Uses Pydantic Settings for type-safe configuration with .env file support.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=_PACKAGE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ChaosChain network
    chaoschain_api_url: str = Field(default="http://localhost:3000", description="Base URL of the ChaosChain API")
    chaoschain_agent_id: Optional[str] = Field(default=None, description="Agent ID to use before registration")
    chaoschain_token: Optional[str] = Field(default=None, description="Auth token to use before registration")
    request_timeout_s: float = Field(default=30.0, gt=0)

    # LLM Settings
    openai_api_key: str = Field(default="")
    llm_model: str = Field(default="gpt-4o-mini")
    llm_temperature: float = Field(default=0.2, ge=0, le=2)
    extraction_timeout_s: float = Field(default=60.0, gt=0)

    # Conversation
    recent_message_limit: int = Field(default=20, ge=1)

    # Logging
    log_level: str = Field(default="INFO")

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings/errors."""
        issues = []

        if not self.openai_api_key:
            issues.append("OPENAI_API_KEY is not set")

        if not self.chaoschain_api_url.startswith(("http://", "https://")):
            issues.append(f"CHAOSCHAIN_API_URL must be an http(s) URL, got {self.chaoschain_api_url!r}")

        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            issues.append(f"LOG_LEVEL {self.log_level!r} is not a known logging level")

        return issues


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    issues = settings.validate_config()

    for issue in issues:
        logger.warning("Configuration issue: %s", issue)

    return settings


settings = get_settings()

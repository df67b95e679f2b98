"""
Base configuration settings.

Application-wide settings read without the EMBED_PIPELINE_ prefix.
Holds the shared log level read by configure_logging().

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )


@lru_cache
def get_settings() -> BaseSettings:
    """
    Get application settings singleton.

    Returns:
        BaseSettings: Settings loaded once from environment / .env
    """
    return BaseSettings()

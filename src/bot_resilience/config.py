"""
Configuration settings for the Bot API resilience layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development. Nested channel settings use a double
underscore delimiter, e.g.:

    CHANNELS__TELEGRAM__RETRY__ATTEMPTS=5
    CHANNELS__DISCORD__RETRY__MAX_DELAY_MS=10000

Config files are parsed by the embedding application; pass the parsed
mapping to `Settings.model_validate(...)` (camelCase retry keys such as
`minDelayMs` are accepted).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bot_resilience.retry.config import RetryOverrides


class ChannelConfig(BaseModel):
    """Per-channel settings consumed by the resilience layer."""

    model_config = ConfigDict(extra="ignore")

    retry: RetryOverrides | None = None


class ChannelsConfig(BaseModel):
    """The `channels` section: one entry per supported chat platform."""

    model_config = ConfigDict(extra="ignore")

    discord: ChannelConfig = Field(default_factory=ChannelConfig)
    telegram: ChannelConfig = Field(default_factory=ChannelConfig)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # development | production

    # === Channels ===
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)


# Global settings instance
settings = Settings()

"""
Configuration management for Crypto Price Aggregator Service.
Uses pydantic-settings for environment variable management.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="Crypto Price Aggregator")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    # Server binding
    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=3000)

    # Upstream providers (no API keys required)
    dexscreener_api_url: str = Field(default="https://api.dexscreener.com/latest/dex")
    dexscreener_token_address: str = Field(
        default="0x84604526d71bbe7738c3c02d3c8a48778955718289c03d814d8468b58ae9a898::skelsui::SKELSUI"
    )
    coingecko_api_url: str = Field(default="https://api.coingecko.com/api/v3")
    cryptocompare_api_url: str = Field(default="https://min-api.cryptocompare.com/data")

    # Timeouts (in seconds); unset means wait indefinitely
    upstream_timeout: Optional[float] = Field(default=None)
    aggregation_timeout: Optional[float] = Field(default=None)

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = {'json', 'text'}
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {', '.join(sorted(valid_formats))}")
        return v.lower()

    @field_validator('upstream_timeout', 'aggregation_timeout')
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Timeouts must be positive when set."""
        if v is not None and v <= 0:
            raise ValueError("timeouts must be greater than zero")
        return v

    @field_validator('dexscreener_api_url', 'coingecko_api_url', 'cryptocompare_api_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')


# Global settings instance
settings = Settings()

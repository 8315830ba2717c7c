"""
Configuration management using Pydantic Settings
Loads and validates environment variables from .env file
"""

from pathlib import Path
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Provider tokens are optional here; a missing token is only an error
    when a deployment or domain call actually targets that provider.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Vercel API Configuration
    vercel_token: str = Field(
        default="",
        description="Vercel bearer token"
    )
    vercel_team_id: str = Field(
        default="",
        description="Optional Vercel team ID appended as ?teamId="
    )
    vercel_api_url: str = Field(
        default="https://api.vercel.com",
        description="Vercel REST API base URL"
    )

    # Netlify API Configuration
    netlify_token: str = Field(
        default="",
        description="Netlify personal access token"
    )
    netlify_api_url: str = Field(
        default="https://api.netlify.com/api/v1",
        description="Netlify REST API base URL"
    )

    # WHOIS / RDAP lookup
    rdap_base_url: str = Field(
        default="https://rdap.org",
        description="RDAP bootstrap service used for expiry/registrar lookups"
    )
    whois_timeout_seconds: float = Field(
        default=8.0,
        description="Timeout for a single RDAP request"
    )

    # Deployment pipeline
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to every provider HTTP call"
    )
    poll_interval_seconds: float = Field(
        default=2.0,
        description="Delay between readiness checks"
    )
    poll_timeout_seconds: float = Field(
        default=60.0,
        description="Maximum time spent polling before proceeding optimistically"
    )
    upload_concurrency: int = Field(
        default=8,
        ge=1,
        description="Maximum number of concurrent file uploads per deployment"
    )
    excluded_build_files: List[str] = Field(
        default_factory=lambda: ["config.schema.json"],
        description="Build-relative paths never shipped to a provider"
    )
    builds_dir: str = Field(
        default="output_files/builds",
        description="Directory holding rendered site builds, one folder per project slug"
    )
    error_body_limit: int = Field(
        default=500,
        ge=1,
        description="Maximum characters of a provider error body kept in logs or records"
    )

    # Domain registry
    expiring_soon_days: int = Field(
        default=30,
        ge=1,
        description="Days before expiry at which a domain becomes EXPIRING_SOON"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("poll_interval_seconds", "poll_timeout_seconds", "http_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Durations must be strictly positive"""
        if v <= 0:
            raise ValueError("durations must be greater than zero")
        return v

    def token_for(self, platform: str) -> Optional[str]:
        """Return the configured token for a platform, or None when absent"""
        tokens = {
            "VERCEL": self.vercel_token,
            "NETLIFY": self.netlify_token,
        }
        return tokens.get(platform.upper()) or None


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get or create the settings singleton instance.
    Loads configuration from the environment and, when present, the .env file.

    Returns:
        Settings instance

    Raises:
        ValidationError: If environment variables are present but invalid
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reset_settings():
    """
    Reset the settings singleton (useful for testing)
    """
    global _settings
    _settings = None

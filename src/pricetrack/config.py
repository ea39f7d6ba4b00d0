"""
Configuration management for the pricetrack service.

Settings are validated once, when the configuration is first built. A missing
admin token or a malformed base URL is a startup failure, not a per-request one.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _check_base_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"expected an http(s) URL, got {value!r}")
    return value.rstrip("/")


class RulesConfig(BaseSettings):
    """Configuration for the domain rules source."""

    source: Path = Field(
        default=Path("./config/rules"),
        description="Directory of per-domain JSON rule files, or one JSON mapping file",
    )

    model_config = SettingsConfigDict(env_prefix="RULES_")


class ServiceConfig(BaseSettings):
    """Configuration for the HTTP surface."""

    admin_token: SecretStr = Field(..., description="Token required by admin endpoints")

    # Public URLs
    hosting_url: str = Field(
        default="http://localhost:8000", description="Root URL of the web frontend"
    )
    functions_url: str = Field(
        default="http://localhost:5001/price-tracker/us-central1",
        description="Base URL for generated function links",
    )
    regional_functions_urls: dict[str, str] = Field(
        default_factory=dict,
        description="Per-region overrides of functions_url (e.g. {'asia': ...})",
    )

    # Bind address for `pricetrack serve`
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")

    model_config = SettingsConfigDict(env_prefix="SERVICE_")

    @field_validator("admin_token")
    @classmethod
    def _validate_admin_token(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("admin_token must not be empty")
        return value

    @field_validator("hosting_url", "functions_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        return _check_base_url(value)

    @field_validator("regional_functions_urls")
    @classmethod
    def _validate_regional_urls(cls, value: dict[str, str]) -> dict[str, str]:
        return {region: _check_base_url(url) for region, url in value.items()}


class Config(BaseSettings):
    """Main configuration."""

    # Sub-configs
    rules: RulesConfig = Field(default_factory=RulesConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    # Global settings
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_nested_delimiter="__"
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (mainly for testing)."""
    global _config
    _config = None

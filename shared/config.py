"""
Shared configuration management for the Audience Rules service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RULES_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Storage
    data_file: str = Field(default="data/rules.json")
    document_version: str = Field(default="1.0")

    # Authoring
    max_condition_depth: int = Field(default=5, ge=1)
    default_rule_duration_days: int = Field(default=90, ge=1)
    default_rule_priority: int = Field(default=50, ge=1, le=100)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "rules"
    host: str = "0.0.0.0"
    port: int = 3001


def get_config(service_name: str, port: Optional[int] = None, **overrides) -> ServiceConfig:
    """Get configuration for a specific service.

    An explicit port wins over RULES_PORT.
    """
    if port is not None:
        overrides["port"] = port
    return ServiceConfig(service_name=service_name, **overrides)

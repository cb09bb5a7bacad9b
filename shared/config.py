"""
Shared configuration management for the Recipe Collections services.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="COLLECTIONS_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Qualification
    near_threshold: int = Field(default=80, ge=0, le=100, description="Progress percentage that counts as NEAR")
    default_target_count: int = Field(default=20, ge=0)
    default_min_required: int = Field(default=10, ge=0)

    # Rule input bounds, enforced before compilation
    max_rule_groups: int = Field(default=20, ge=1)
    max_group_conditions: int = Field(default=50, ge=1)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)

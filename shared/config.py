"""
Shared configuration management for the map locations service.
"""

import os
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MAP_",
        case_sensitive=False,
        populate_by_name=True,
        extra="allow"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Document store
    mongo_uri: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("mongo_uri", "MONGO_URI", "MAP_MONGO_URI"),
    )
    mongo_database: str = "soulforged-db"
    mongo_collection: str = "maplocations"
    mongo_max_pool_size: int = Field(default=10, ge=1)

    # Cache refresh
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    refresh_interval_seconds: float = Field(default=20.0, gt=0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, **kwargs):
        super().__init__(service_name=service_name, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service.

    `port` is the service default; MAP_PORT overrides it.
    """
    overrides.setdefault("port", int(os.getenv("MAP_PORT", port)))
    return ServiceConfig(service_name=service_name, **overrides)

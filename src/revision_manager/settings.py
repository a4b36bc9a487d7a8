"""Application settings via Pydantic BaseSettings.

All configuration uses the RM_ environment variable prefix.
Centralized here to prevent hardcoded magic numbers across the codebase.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class RedisSettings(BaseSettings):
    """Redis connection settings."""

    model_config = {"env_prefix": "RM_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str | None = None

    # Prefix for every key the store writes
    key_prefix: str = "rm:"

    # Change triggers for Certificates and CertificateRequests
    trigger_stream: str = "revisionmanager:triggers"

    # Consumer group name
    group_revision_manager: str = "revision-manager"

    # Consumer group block timeout (ms)
    block_timeout_ms: int = 5000

    # Messages read per XREADGROUP call
    batch_size: int = 10


class ControllerSettings(BaseSettings):
    """Revision manager worker settings."""

    model_config = {"env_prefix": "RM_CONTROLLER_"}

    # Consumer name within the group; must be unique per worker process
    consumer_name: str = "revision-manager-1"


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "RM_"}

    app_name: str = "revision-manager"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    redis: RedisSettings = Field(default_factory=RedisSettings)
    controller: ControllerSettings = Field(default_factory=ControllerSettings)

#!/usr/bin/env python3
"""
Environment-driven configuration for the task selection engine.
Uses Pydantic settings for validation and type safety.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-level configuration for the task selection engine."""

    # Environment
    environment: str = Field(default="development", json_schema_extra={"env": "ENVIRONMENT"})
    debug: bool = Field(default=False, json_schema_extra={"env": "DEBUG"})

    # Execution Configuration
    executor_max_workers: int = Field(default=8, json_schema_extra={"env": "EXECUTOR_MAX_WORKERS"})
    autostart_agents: bool = Field(default=True, json_schema_extra={"env": "AUTOSTART_AGENTS"})

    # Monitoring Configuration
    log_level: str = Field(default="INFO", json_schema_extra={"env": "LOG_LEVEL"})
    log_format: str = Field(default="json", json_schema_extra={"env": "LOG_FORMAT"})
    log_file: Optional[str] = Field(default=None, json_schema_extra={"env": "LOG_FILE"})
    metrics_enabled: bool = Field(default=True, json_schema_extra={"env": "METRICS_ENABLED"})
    metrics_port: int = Field(default=9090, json_schema_extra={"env": "METRICS_PORT"})

    @field_validator("executor_max_workers", "metrics_port")
    @classmethod
    def validate_positive_integers(cls, v):
        if v <= 0:
            raise ValueError("Values must be positive integers")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ("json", "console"):
            raise ValueError("Log format must be 'json' or 'console'")
        return v.lower()

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings

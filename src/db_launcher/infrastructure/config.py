"""Configuration management for the database launcher."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from db_launcher.domain.entities.server_config import ServerConfig


class LaunchConfig(BaseModel):
    """Server launch configuration."""

    mode: str = Field(default="server", description="Server variant: server or webserver")
    db_name: str = Field(default="test", min_length=1, description="Database name or path")
    silent: bool = Field(default=True, description="False displays all queries")
    trace: bool = Field(default=False, description="Display wire trace messages")
    tls: bool = Field(default=False, description="Use TLS/SSL sockets")
    tls_certfile: str | None = Field(default=None, description="TLS certificate chain file")
    tls_keyfile: str | None = Field(default=None, description="TLS private key file")
    address: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=0, ge=0, le=65535, description="Listen port, 0 keeps the default")
    is_transient: bool = Field(default=False, description="In-memory (mem:) instead of file:")
    delete_on_entry: bool = Field(default=False, description="Delete db files before start")
    delete_on_exit: bool = Field(default=False, description="Delete db files at process exit")
    base_dir: Path = Field(default=Path("."), description="Directory scanned on entry cleanup")


class MetricsConfig(BaseModel):
    """Prometheus metrics configuration."""

    enabled: bool = Field(default=False, description="Expose a Prometheus scrape endpoint")
    port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="db_launcher", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the database launcher."""

    model_config = SettingsConfigDict(
        env_prefix="DB_LAUNCHER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    launch: LaunchConfig = Field(default_factory=LaunchConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def to_server_config(self) -> ServerConfig:
        """Build the immutable launch record from the settings."""
        return ServerConfig(**self.launch.model_dump())


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()

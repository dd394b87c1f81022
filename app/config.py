"""
Application configuration using Pydantic Settings.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Timeouts (seconds)
    scan_timeout: float = 1.5  # Per-probe timeout while scanning a subnet
    command_timeout: float = 10.0  # Targeted status/restart/settings calls

    # Subnet scanning
    scan_concurrency: int = 256  # Max probes in flight per scan
    scan_start: int = 1
    scan_end: int = 254
    default_subnet: Optional[str] = None  # e.g. "192.168.1"; None = auto-detect

    # Server Configuration
    host_port: int = 8080
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

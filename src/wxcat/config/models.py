"""Configuration models describing wxcat settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WxcatBaseModel(BaseModel):
    """Shared configuration for wxcat Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ScanOptions(WxcatBaseModel):
    """Options governing catalog scans.

    Attributes:
        cache_ttl_seconds: Age after which a cached snapshot is rescanned.
        min_file_size_bytes: Files smaller than this are treated as thumbnails.
        workers: Number of threads used to walk profiles in parallel.
    """

    cache_ttl_seconds: float = Field(default=300.0, ge=0)
    min_file_size_bytes: int = Field(default=1024, ge=0)
    workers: int = Field(default=4, ge=1)


class LoggingSettings(WxcatBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(WxcatBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        table_limit: Maximum number of rows rendered in result tables.
    """

    quiet_default: bool = False
    summary_default: bool = False
    table_limit: int = 200


class WxcatConfig(WxcatBaseModel):
    """Top-level configuration struct for wxcat.

    Attributes:
        scan: Catalog scan settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    scan: ScanOptions = Field(default_factory=ScanOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "WxcatBaseModel",
    "ScanOptions",
    "LoggingSettings",
    "CLIOptions",
    "WxcatConfig",
]

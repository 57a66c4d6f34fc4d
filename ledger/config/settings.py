"""
Configuration Management for the Personal Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Where the data file lives, how it is written, and how logs look are the only
knobs; the ledger rules themselves are not configurable.
"""

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Main ledger settings.

    Loads configuration from LEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Persistence
    data_dir: Path = Field(
        default=Path.home() / ".personal-ledger",
        description="Directory holding the ledger snapshot file"
    )
    data_file_name: str = Field(
        default="appdata_v1.json",
        min_length=1,
        description="File name of the ledger snapshot"
    )
    background_persistence: bool = Field(
        default=True,
        description="Write snapshots on a background thread"
    )
    flush_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long close() waits for pending writes"
    )

    # Export
    export_dir: Optional[Path] = Field(
        default=None,
        description="Where CSV exports are written (system temp dir if unset)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console renderer otherwise)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('data_file_name')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """The snapshot must live directly inside data_dir."""
        if Path(v).name != v:
            raise ValueError(f"data_file_name must be a bare file name, got {v}")
        return v

    @property
    def data_file_path(self) -> Path:
        """Full path of the snapshot file."""
        return self.data_dir.expanduser() / self.data_file_name

    @property
    def export_directory(self) -> Path:
        """Resolved export directory."""
        if self.export_dir is not None:
            return self.export_dir.expanduser()
        return Path(tempfile.gettempdir())


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()

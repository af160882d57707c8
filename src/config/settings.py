"""Engine settings using Pydantic Settings.

Centralized runtime configuration for the tax engine. Tax law constants do
not live here; they are versioned per year in ``calculator.tax_year_config``
and ``config/tax_parameters``.

Environment variables (prefix ``TAX_ENGINE_``):
- TAX_ENGINE_DEFAULT_TAX_YEAR: Tax year used when a return omits one
- TAX_ENGINE_AUDIT_ENABLED: Record computations in the audit log
- TAX_ENGINE_AUDIT_DB_PATH: sqlite file for the audit log
- TAX_ENGINE_STATE_WORKERS: Thread pool size for state returns (1 = sequential)
- TAX_ENGINE_LOG_LEVEL: Root log level for ``configure_logging``
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EngineSettings(BaseSettings):
    """Tax engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_tax_year: int = Field(default=2025, description="Default tax year")

    # Audit log
    audit_enabled: bool = Field(default=True, description="Record computations in the audit log")
    audit_db_path: Optional[Path] = Field(
        default=None,
        description="sqlite database for the audit log (defaults to ./data/audit_log.db)"
    )

    # State fan-out
    state_workers: int = Field(
        default=1, ge=1, le=32,
        description="Worker threads for independent state returns; 1 computes sequentially"
    )

    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("log_level")
    @classmethod
    def _valid_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


@lru_cache
def get_settings() -> EngineSettings:
    """
    Get cached engine settings instance.

    Returns:
        EngineSettings: Cached settings loaded from environment.
    """
    return EngineSettings()


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    """Apply the configured log level with a standard format."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # basicConfig leaves the level alone once handlers exist
    logging.getLogger().setLevel(level)
    logger.debug("Logging configured at %s", settings.log_level)

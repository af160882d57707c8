"""Configuration module for the tax engine."""

from .settings import EngineSettings, get_settings, configure_logging
from .tax_config_loader import TaxConfigLoader, ConfigMetadata, get_config_loader, clear_config_cache

__all__ = [
    "EngineSettings",
    "get_settings",
    "configure_logging",
    "TaxConfigLoader",
    "ConfigMetadata",
    "get_config_loader",
    "clear_config_cache",
]

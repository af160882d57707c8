"""
Tax Configuration Loader.

Loads versioned tax parameter files (``tax_parameters/tax_year_<year>.yaml``)
that accompany the built-in constants in ``calculator.tax_year_config``:

- ``_metadata``: version, effective date and IRS references for the year
- ``overrides``: field-level replacements applied on top of the built-in
  constants (values in the units the field stores: cents or fractions)

Environment variables of the form ``TAX_<year>_<FIELD>`` add further scalar
overrides, e.g. ``TAX_2025_SS_WAGE_BASE=17610000``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default config directory
CONFIG_DIR = Path(__file__).parent / "tax_parameters"


@dataclass
class ConfigMetadata:
    """Metadata about a configuration file."""
    version: str
    tax_year: int
    effective_date: str
    source: str  # "IRS", "state", "custom"
    irs_references: List[str] = field(default_factory=list)
    last_updated: str = ""
    notes: str = ""


class TaxConfigLoader:
    """
    Loads tax parameter files from YAML.

    Loaded years are memoized on the instance; use ``clear_config_cache`` to
    force a reload.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the config loader.

        Args:
            config_dir: Directory containing YAML config files.
                       Defaults to src/config/tax_parameters/
        """
        self.config_dir = config_dir or CONFIG_DIR
        self._configs: Dict[int, Dict[str, Any]] = {}
        self._metadata: Dict[int, ConfigMetadata] = {}

    def load_config(self, tax_year: int) -> Dict[str, Any]:
        """
        Load configuration for a specific tax year.

        Args:
            tax_year: The tax year to load (e.g., 2025)

        Returns:
            Dictionary with an ``overrides`` mapping (possibly empty)
        """
        if tax_year in self._configs:
            return self._configs[tax_year]

        config = self._load_from_files(tax_year)
        config = self._apply_env_overrides(config, tax_year)
        self._validate_config(config, tax_year)

        self._configs[tax_year] = config
        return config

    def _load_from_files(self, tax_year: int) -> Dict[str, Any]:
        """Load configuration from YAML files."""
        config: Dict[str, Any] = {"overrides": {}}

        year_file = self.config_dir / f"tax_year_{tax_year}.yaml"
        if year_file.exists():
            logger.info(f"Loading tax config from {year_file}")
            with open(year_file, 'r') as f:
                year_config = yaml.safe_load(f)
            if year_config:
                if '_metadata' in year_config:
                    self._metadata[tax_year] = ConfigMetadata(**year_config.pop('_metadata'))
                config["overrides"].update(year_config.get("overrides") or {})
        else:
            logger.warning(f"No config file found for tax year {tax_year}, using built-in constants")

        return config

    def _apply_env_overrides(self, config: Dict[str, Any], tax_year: int) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        # Environment variables like TAX_2025_SS_WAGE_BASE=17610000
        prefix = f"TAX_{tax_year}_"

        for key, value in os.environ.items():
            if key.startswith(prefix):
                param_name = key[len(prefix):].lower()
                try:
                    if '.' in value:
                        config["overrides"][param_name] = float(value)
                    elif value.lstrip('-').isdigit():
                        config["overrides"][param_name] = int(value)
                    else:
                        config["overrides"][param_name] = value
                    logger.info(f"Applied env override: {param_name}={value}")
                except (ValueError, TypeError):
                    logger.warning(f"Could not parse env override: {key}={value}")

        return config

    def _validate_config(self, config: Dict[str, Any], tax_year: int) -> None:
        """Overrides must be a flat mapping of field names."""
        overrides = config.get("overrides")
        if not isinstance(overrides, dict):
            logger.warning(f"Ignoring malformed overrides for {tax_year}: {overrides!r}")
            config["overrides"] = {}

    def get_metadata(self, tax_year: int) -> Optional[ConfigMetadata]:
        """Get metadata for a tax year's configuration."""
        self.load_config(tax_year)  # Ensure loaded
        return self._metadata.get(tax_year)

    def available_years(self) -> List[int]:
        """Years with a parameter file on disk."""
        years = []
        for path in self.config_dir.glob("tax_year_*.yaml"):
            suffix = path.stem.rsplit("_", 1)[-1]
            if suffix.isdigit():
                years.append(int(suffix))
        return sorted(years)


# Global singleton
_config_loader: Optional[TaxConfigLoader] = None


def get_config_loader() -> TaxConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = TaxConfigLoader()
    return _config_loader


def clear_config_cache() -> None:
    """Clear the configuration cache (useful for testing)."""
    global _config_loader
    _config_loader = None

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Configuration parser: layered loading of defaults, platform preset, YAML
file and command-line overrides.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging
import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..simulation.models import ConfigurationError, SimulationSettings
from .schema import apply_preset, build_settings, default_config, _deep_merge, validate_config

logger = logging.getLogger(__name__)


class ConfigParser:
    """
    Parse and validate ReadWeaver configuration.

    Precedence, lowest first:
    - Built-in defaults
    - Platform preset (``platform`` argument, else ``sequencing.platform`` in the file)
    - YAML configuration file
    - Command-line overrides (:meth:`merge_cli_overrides`)

    String values support environment variable substitution
    (``${VAR}`` and ``${VAR:-default}``).
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None,
                 platform: Optional[str] = None):
        """
        Initialize configuration parser.

        Args:
            config_file: Path to YAML configuration file (optional)
            platform: Platform preset name (optional, wins over the file's)
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Dict[str, Any] = default_config()

        user_config = self._load_user_config() if self.config_file else {}

        platform = platform or (user_config.get('sequencing') or {}).get('platform')
        if platform:
            self._config = apply_preset(self._config, platform)
            logger.debug(f"Applied platform preset {platform}")

        if user_config:
            # User values override defaults and preset
            self._config = _deep_merge(self._config, user_config)
            if platform:
                self._config['sequencing']['platform'] = platform.strip().lower()

        self._config = self._substitute_env_vars(self._config)

    def _load_user_config(self) -> Dict[str, Any]:
        """Load the user configuration file."""
        if not self.config_file.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_file}"
            )

        try:
            with open(self.config_file, 'r') as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file {self.config_file}: {e}"
            ) from e

        if user_config is None:
            return {}
        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Config file {self.config_file} must contain a mapping at the top level"
            )
        return user_config

    def _substitute_env_vars(self, config: Any) -> Any:
        """
        Recursively substitute environment variables in configuration.

        Supports:
        - ${VAR}: Replace with environment variable VAR
        - ${VAR:-default}: Replace with VAR, or 'default' if not set
        """
        if isinstance(config, dict):
            return {k: self._substitute_env_vars(v) for k, v in config.items()}

        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]

        elif isinstance(config, str):
            # Pattern: ${VAR} or ${VAR:-default}
            pattern = r'\$\{([^}:]+)(?::-(.*?))?\}'

            def replace_var(match):
                var_name = match.group(1)
                default_value = match.group(2)
                return os.environ.get(var_name, default_value or '')

            return re.sub(pattern, replace_var, config)

        else:
            return config

    def merge_cli_overrides(self, overrides: Dict[str, Any]):
        """
        Merge command-line overrides into configuration.

        Args:
            overrides: Dictionary of override values
                      Keys use dotted notation (e.g., 'sequencing.read_length.mean')
        """
        for key, value in overrides.items():
            keys = key.split('.')

            # Navigate to the nested dictionary
            target = self._config
            for k in keys[:-1]:
                if not isinstance(target.get(k), dict):
                    target[k] = {}
                target = target[k]

            target[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Supports dotted notation for nested access.

        Args:
            key: Configuration key (e.g., 'errors.substitution_rate')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return self._config.copy()

    def validate(self) -> bool:
        """
        Validate the merged configuration.

        Returns:
            True if valid

        Raises:
            ConfigurationError: listing every validation error
        """
        errors = validate_config(self._config)
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  " + "\n  ".join(errors)
            )
        return True

    def to_settings(self) -> SimulationSettings:
        """Build the immutable SimulationSettings for a run."""
        return build_settings(self._config)

    def __repr__(self) -> str:
        return f"ConfigParser(config_file={self.config_file})"

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
